# =============================================================================
# test_emitter.py - Emitter Tests
# =============================================================================
# Tests for the single-pass byte emitter.
#
# Test coverage includes:
#   - db with numbers, strings, escapes and mixed arguments
#   - base64 on one line and across several lines
#   - Label addresses and redefinition
#   - Comment handling
#   - Error conditions and partial output
# =============================================================================

import base64
import io

import pytest

from tushie.assembler.emitter import AssemblyContext, Emitter, InBase64Block, emit
from tushie.assembler.labels import LabelTable
from tushie.assembler.preprocessor import SourceLine
from tushie.errors import (
    Base64Error,
    ByteOverflowError,
    DuplicateLabelError,
    MissingArgumentError,
    MissingQuoteError,
    NumericParseError,
    UnknownOpcodeError,
    UnterminatedBase64Error,
)


# =============================================================================
# Helper Functions
# =============================================================================

def make_lines(source: str, filename: str = "<test>") -> list[SourceLine]:
    """Build SourceLines directly, one per physical line, without preprocessing."""
    return [
        SourceLine(text, filename, number)
        for number, text in enumerate(source.split("\n"), start=1)
    ]


def run(source: str, strict_labels: bool = False):
    """Emit source into a BytesIO and return (bytes, result)."""
    out = io.BytesIO()
    result = emit(make_lines(source), out, strict_labels=strict_labels)
    return out.getvalue(), result


def output_of(source: str) -> bytes:
    return run(source)[0]


class FlushCountingSink(io.BytesIO):
    """BytesIO that records how many bytes had been written at each flush."""

    def __init__(self):
        super().__init__()
        self.flushed_at: list[int] = []

    def flush(self):
        self.flushed_at.append(len(self.getvalue()))
        super().flush()


# =============================================================================
# db
# =============================================================================

class TestDb:
    """Literal byte emission."""

    def test_single_byte(self):
        assert output_of("\tdb 1") == b"\x01"

    def test_byte_list(self):
        assert output_of("\tdb 1, 2, 3") == bytes([1, 2, 3])

    def test_number_formats(self):
        assert output_of("db 0x10, $20, %11, @10, 255") == bytes([0x10, 0x20, 3, 8, 255])

    def test_no_spaces_between_arguments(self):
        assert output_of("db 1,2,3") == bytes([1, 2, 3])

    def test_opcode_case_insensitive(self):
        assert output_of("DB 7") == b"\x07"

    def test_string(self):
        assert output_of('db "hello"') == b"hello"

    def test_string_and_numbers(self):
        assert output_of('db "hi", 13, 10, "!", 0') == b"hi\r\n!\x00"

    def test_string_with_spaces(self):
        assert output_of('db "a  b"') == b"a  b"

    def test_escaped_quote(self):
        assert output_of('db "say \\"hi\\""') == b'say "hi"'

    def test_escaped_backslash(self):
        assert output_of('db "a\\\\b"') == b"a\\b"

    def test_escape_is_literal(self):
        # \n is just 'n', not a newline
        assert output_of('db "\\n"') == b"n"

    def test_string_with_comment_characters(self):
        assert output_of('db ";:", 1 ; trailing') == b";:\x01"

    def test_non_ascii_string_is_utf8(self):
        data, result = run('db "é"')
        assert data == "é".encode("utf-8")
        assert result.size == 2

    def test_trailing_comma_ignored(self):
        assert output_of("db 1,") == b"\x01"

    def test_byte_count_matches_arguments(self):
        values = list(range(0, 256, 17))
        line = "db " + ", ".join(str(v) for v in values)
        assert output_of(line) == bytes(values)

    def test_missing_argument(self):
        with pytest.raises(MissingArgumentError):
            output_of("\tdb")

    def test_empty_argument(self):
        with pytest.raises(MissingArgumentError, match="malformed"):
            output_of("db 1,,2")

    def test_overflow(self):
        with pytest.raises(ByteOverflowError) as exc_info:
            output_of("db 256")
        assert exc_info.value.value == 256

    def test_overflow_writes_nothing_for_that_argument(self):
        out = io.BytesIO()
        with pytest.raises(ByteOverflowError):
            Emitter().emit(make_lines("db 1, 2, 0x100, 3"), out)
        assert out.getvalue() == b"\x01\x02"

    def test_bad_number(self):
        with pytest.raises(NumericParseError) as exc_info:
            output_of("db 1\ndb zz")
        assert exc_info.value.location.line == 2

    def test_character_literal(self):
        assert output_of("db 'A', '*'") == b"A*"

    def test_character_literal_cannot_hold_semicolon(self):
        # Single quotes do not hide ; from the comment stripper
        with pytest.raises(NumericParseError):
            output_of("db ';'")

    def test_character_literal_cannot_hold_comma(self):
        with pytest.raises(NumericParseError):
            output_of("db ','")

    def test_semicolon_as_string(self):
        assert output_of('db ";", 44') == b";,"

    def test_flushed_once_per_line(self):
        sink = FlushCountingSink()
        emit(make_lines("db 1, 2\ndb \"ab\""), sink)
        assert sink.flushed_at == [2, 4]


# =============================================================================
# base64
# =============================================================================

class TestBase64:
    """Base64 payload emission."""

    def test_inline(self):
        assert output_of('base64 "AAEC"') == b"\x00\x01\x02"

    def test_round_trip(self):
        payload = base64.b64encode(bytes(range(50))).decode()
        data = output_of(f'base64 "{payload}"')
        assert data == bytes(range(50))
        assert base64.b64encode(data).decode() == payload

    def test_multi_line_block(self):
        source = 'base64 "AAEC\nAwQF\nBgcI"'
        assert output_of(source) == bytes(range(9))

    def test_block_opening_line_may_be_empty(self):
        source = 'base64 "\nAAEC\n"'
        assert output_of(source) == b"\x00\x01\x02"

    def test_block_followed_by_db(self):
        source = 'base64 "AA\nEC"\ndb 9'
        assert output_of(source) == b"\x00\x01\x02\x09"

    def test_block_lines_are_not_interpreted(self):
        # A line reading like an opcode is payload while the block is open
        with pytest.raises(Base64Error):
            output_of('base64 "\ndb 1\n"')

    def test_missing_quote(self):
        with pytest.raises(MissingQuoteError):
            output_of("base64 AAEC")

    def test_invalid_payload(self):
        with pytest.raises(Base64Error):
            output_of('base64 "A!!C"')

    def test_bad_padding(self):
        with pytest.raises(Base64Error):
            output_of('base64 "AAE"')

    def test_unterminated(self):
        out = io.BytesIO()
        with pytest.raises(UnterminatedBase64Error) as exc_info:
            Emitter().emit(make_lines('db 1\nbase64 "AAEC\nAwQF'), out)
        assert exc_info.value.location.line == 2
        assert out.getvalue() == b"\x01"

    def test_block_state_carries_start(self):
        emitter = Emitter()
        ctx = AssemblyContext(io.BytesIO(), LabelTable())
        line = SourceLine('base64 "AA', "x.s", 4)
        emitter._assemble_line(ctx, line)
        assert isinstance(ctx.mode, InBase64Block)
        assert ctx.mode.start is line
        assert ctx.mode.chunks == ["AA"]

    def test_flushed_once_per_payload(self):
        sink = FlushCountingSink()
        emit(make_lines('base64 "AA=="\nbase64 "AAEC\nAwQF"'), sink)
        assert sink.flushed_at == [1, 7]

    def test_block_not_flushed_until_closed(self):
        sink = FlushCountingSink()
        with pytest.raises(UnterminatedBase64Error):
            emit(make_lines('db 1\nbase64 "AAEC'), sink)
        assert sink.flushed_at == [1]

    def test_db_and_base64_each_flush(self):
        sink = FlushCountingSink()
        emit(make_lines('db 1\nbase64 "AA=="'), sink)
        assert sink.flushed_at == [1, 2]


# =============================================================================
# Labels
# =============================================================================

class TestLabels:
    """Label recording."""

    def test_scenario(self):
        data, result = run("label1:\n\tdb 1, 2, 3\nlabel2:\n\tdb 4")
        assert data == bytes([1, 2, 3, 4])
        assert result.labels.as_dict() == {"label1": 0, "label2": 3}

    def test_label_on_same_line(self):
        _, result = run("a: db 1, 2\nb: db 3\nc:")
        assert result.labels.as_dict() == {"a": 0, "b": 2, "c": 3}

    def test_label_after_base64_block(self):
        _, result = run('base64 "AAEC\nAwQF"\nend:')
        assert result.labels["end"] == 6

    def test_label_location(self):
        _, result = run("\n\nhere: db 1")
        entry = result.labels.get("here")
        assert entry.location.line == 3

    def test_redefinition_last_wins(self):
        _, result = run("x:\ndb 1\nx:")
        assert result.labels["x"] == 1

    def test_redefinition_strict(self):
        with pytest.raises(DuplicateLabelError) as exc_info:
            run("x:\ndb 1\nx:", strict_labels=True)
        assert "first defined at <test>:1" in str(exc_info.value)

    def test_iterate_entries(self):
        _, result = run("a: db 1\nb: db 2, 3\nc:")
        entries = list(result.labels)
        assert [e.name for e in entries] == ["a", "b", "c"]
        assert [e.address for e in entries] == [0, 1, 3]
        assert [e.location.line for e in entries] == [1, 2, 3]

    def test_iterate_after_redefinition(self):
        _, result = run("x:\ndb 1\ny:\nx:")
        assert [(e.name, e.address) for e in result.labels] == [("x", 1), ("y", 1)]


# =============================================================================
# Comments and Blank Lines
# =============================================================================

class TestComments:
    """Comments never change output."""

    def test_trailing_comment(self):
        assert output_of("db 1 ; explanation") == output_of("db 1")

    def test_comment_line(self):
        assert output_of("; whatever\ndb 1") == output_of("db 1")

    def test_indented_comment_line(self):
        assert output_of("   ; whatever\ndb 1") == b"\x01"

    def test_blank_lines(self):
        assert output_of("\n   \n\t\ndb 1\n") == b"\x01"

    def test_label_then_comment(self):
        _, result = run("start: ; entry point")
        assert result.labels["start"] == 0


# =============================================================================
# Unknown Opcodes
# =============================================================================

class TestUnknownOpcode:
    """Anything that is not db or base64 fails."""

    def test_unknown(self):
        with pytest.raises(UnknownOpcodeError) as exc_info:
            output_of("dw 1")
        assert exc_info.value.opcode == "dw"

    def test_error_message_has_location(self):
        with pytest.raises(UnknownOpcodeError) as exc_info:
            output_of("db 1\nNOP")
        assert str(exc_info.value).startswith("<test>:2: error: unknown opcode 'nop'")

    def test_tab_after_opcode_is_part_of_opcode(self):
        with pytest.raises(UnknownOpcodeError):
            output_of("db\t1")

    def test_output_before_error_kept(self):
        out = io.BytesIO()
        with pytest.raises(UnknownOpcodeError):
            Emitter().emit(make_lines("db 1\ndb 2\nzap"), out)
        assert out.getvalue() == b"\x01\x02"
