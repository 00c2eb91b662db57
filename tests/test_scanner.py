# =============================================================================
# test_scanner.py - Quote-Aware Scanner Tests
# =============================================================================
# Tests for the shared scanner used by label stripping, comment stripping
# and db argument parsing.
#
# Test coverage includes:
#   - Character classification inside and outside strings
#   - Escaped quotes and backslashes
#   - Label and comment splitting
# =============================================================================

from tushie.assembler.scanner import (
    CharKind,
    QuoteScanner,
    classify,
    find_unquoted,
    split_label,
    strip_comment,
)


# =============================================================================
# Classification
# =============================================================================

class TestQuoteScanner:
    """Character-level state tracking."""

    def test_plain_text(self):
        kinds = [kind for _, _, kind in classify("ab")]
        assert kinds == [CharKind.PLAIN, CharKind.PLAIN]

    def test_string(self):
        kinds = [kind for _, _, kind in classify('"a"b')]
        assert kinds == [CharKind.QUOTE, CharKind.STRING, CharKind.QUOTE, CharKind.PLAIN]

    def test_escaped_quote_stays_in_string(self):
        scanner = QuoteScanner()
        kinds = [scanner.feed(c) for c in '"\\""']
        assert kinds == [CharKind.QUOTE, CharKind.ESCAPE, CharKind.STRING, CharKind.QUOTE]
        assert not scanner.in_string

    def test_escaped_backslash(self):
        kinds = [kind for _, _, kind in classify('"\\\\"')]
        assert kinds == [CharKind.QUOTE, CharKind.ESCAPE, CharKind.STRING, CharKind.QUOTE]

    def test_backslash_outside_string_is_plain(self):
        kinds = [kind for _, _, kind in classify('\\"')]
        assert kinds == [CharKind.PLAIN, CharKind.QUOTE]


# =============================================================================
# Delimiter Search
# =============================================================================

class TestFindUnquoted:
    """Locating delimiters outside strings."""

    def test_found(self):
        assert find_unquoted("db 1 ; x", ";") == 5

    def test_not_found(self):
        assert find_unquoted("db 1", ";") == -1

    def test_skips_quoted(self):
        assert find_unquoted('db ";" ; x', ";") == 7

    def test_skips_escaped_quote(self):
        assert find_unquoted('db "\\";" ; x', ";") == 9

    def test_multiple_terminators(self):
        assert find_unquoted("a;b:c", ":;") == 1


class TestStripComment:
    """Trailing comment removal."""

    def test_trailing_comment(self):
        assert strip_comment("db 1 ; explanation") == "db 1 "

    def test_semicolon_in_string_kept(self):
        assert strip_comment('db "a;b"') == 'db "a;b"'

    def test_no_comment(self):
        assert strip_comment("db 1") == "db 1"


class TestSplitLabel:
    """Label extraction."""

    def test_label_only(self):
        assert split_label("start:") == ("start", "")

    def test_label_with_code(self):
        assert split_label("start: db 1") == ("start", " db 1")

    def test_label_and_comment(self):
        assert split_label("start: db 1 ; one") == ("start", " db 1 ")

    def test_no_label(self):
        assert split_label("db 1") == (None, "db 1")

    def test_colon_in_string_is_not_label(self):
        assert split_label('db "a:b"') == (None, 'db "a:b"')

    def test_colon_in_comment_is_not_label(self):
        assert split_label("db 1 ; note: later") == (None, "db 1 ")

    def test_label_name_kept_verbatim(self):
        label, rest = split_label('"x\\"y": db 1')
        assert label == '"x\\"y"'
        assert rest == " db 1"
