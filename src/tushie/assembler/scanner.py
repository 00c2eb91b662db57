"""
Quote-Aware Line Scanner
========================

Every place that looks for a delimiter in a source line (label colons,
comment semicolons, db argument commas) has to skip over double-quoted
strings and honour backslash escapes inside them. This module holds the
one scanner they all share, so escaping behaves identically everywhere.

Escaping rules
--------------
- A double quote that is not escaped opens or closes a string.
- Inside a string, a backslash escapes the next character, which is then
  taken literally (no \\n-style translation).
- Outside a string, a backslash is an ordinary character.

Example
-------
>>> from tushie.assembler.scanner import split_label
>>> split_label('msg: db "a;b" ; greeting')
('msg', ' db "a;b" ')
"""

from enum import Enum, auto
from typing import Iterator, Optional


class CharKind(Enum):
    """Classification of one character during a scan."""

    QUOTE = auto()    # Unescaped double quote (opens or closes a string)
    ESCAPE = auto()   # Backslash that escapes the next string character
    STRING = auto()   # Literal character inside a string
    PLAIN = auto()    # Character outside any string


class QuoteScanner:
    """
    Character-at-a-time classifier tracking string and escape state.

    Usage:
        scanner = QuoteScanner()
        for char in text:
            kind = scanner.feed(char)
    """

    def __init__(self) -> None:
        self.in_string = False
        self.escaped = False

    def feed(self, char: str) -> CharKind:
        """Classify the next character and update the scanner state."""
        if self.escaped:
            self.escaped = False
            return CharKind.STRING

        if char == '"':
            self.in_string = not self.in_string
            return CharKind.QUOTE

        if self.in_string:
            if char == "\\":
                self.escaped = True
                return CharKind.ESCAPE
            return CharKind.STRING

        return CharKind.PLAIN


def classify(text: str) -> Iterator[tuple[int, str, CharKind]]:
    """Yield (index, char, kind) for every character of text."""
    scanner = QuoteScanner()
    for index, char in enumerate(text):
        yield index, char, scanner.feed(char)


def find_unquoted(text: str, terminators: str) -> int:
    """
    Find the first character of terminators outside any string.

    Args:
        text: Line to scan
        terminators: Characters to look for

    Returns:
        Index of the first match, or -1 if there is none
    """
    for index, char, kind in classify(text):
        if kind is CharKind.PLAIN and char in terminators:
            return index
    return -1


def strip_comment(text: str) -> str:
    """Cut text at the first ';' that is not inside a string."""
    index = find_unquoted(text, ";")
    if index == -1:
        return text
    return text[:index]


def split_label(text: str) -> tuple[Optional[str], str]:
    """
    Separate a leading label and any trailing comment from a line.

    The first unquoted ':' ends a label name; everything before it is the
    name, kept verbatim. A ';' met before any ':' starts a comment, so a
    colon inside a comment never makes a label.

    Args:
        text: Whitespace-trimmed source line

    Returns:
        (label, rest) where label is None if the line has no label and
        rest has its trailing comment removed
    """
    label = None
    index = find_unquoted(text, ":;")
    if index != -1 and text[index] == ":":
        label = text[:index]
        text = text[index + 1:]
    return label, strip_comment(text)
