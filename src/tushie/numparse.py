"""
Numeric Literal Parser
======================

Converts the text of a numeric literal into an unsigned 64-bit integer.

Number Formats
--------------
| Format      | Prefix / suffix    | Example            | Value |
|-------------|--------------------|--------------------|-------|
| Decimal     | (none)             | 42                 | 42    |
| Hexadecimal | $, 0x or suffix h  | $2A, 0x2A, 2Ah     | 42    |
| Binary      | % or 0b            | %101010, 0b101010  | 42    |
| Octal       | @, 0o or leading 0 | @52, 0o52, 052     | 42    |
| Character   | '                  | '*'                | 42    |

Underscores may separate digits (0xFF_FF). Signs are not accepted.

Inside a db line only double quotes protect text from the comment and
argument splitting, so a character literal cannot hold ;, a comma, a space
or a double quote there: db ';' is read as db ' followed by a comment.
Use the numeric value or a string (db ";") for those characters.

Example
-------
>>> from tushie.numparse import parse_unsigned
>>> parse_unsigned("0x1F")
31
>>> parse_unsigned("%1010")
10
"""

import re

from tushie.errors import NumericParseError

UINT64_MAX = 0xFFFF_FFFF_FFFF_FFFF

# Digit runs per base, with optional single underscores between digits
_DIGITS = {
    2: re.compile(r"[01]+(?:_[01]+)*"),
    8: re.compile(r"[0-7]+(?:_[0-7]+)*"),
    10: re.compile(r"[0-9]+(?:_[0-9]+)*"),
    16: re.compile(r"[0-9a-fA-F]+(?:_[0-9a-fA-F]+)*"),
}

_BASE_NAMES = {2: "binary", 8: "octal", 10: "decimal", 16: "hexadecimal"}

# Prefix -> base, longest prefixes first
_PREFIXES = (
    ("0x", 16), ("0X", 16),
    ("0b", 2), ("0B", 2),
    ("0o", 8), ("0O", 8),
    ("$", 16),
    ("%", 2),
    ("@", 8),
)


def _split_base(text: str) -> tuple[str, int]:
    """Work out the base of a literal and strip its prefix or suffix."""
    # Trailing h only counts when the literal starts with a digit, so that
    # identifiers like "ah" are rejected instead of read as hex. Checked
    # before prefixes so that 0Bh is hex 0B rather than binary.
    if text[-1] in "hH" and text[0].isdigit():
        return text[:-1], 16

    for prefix, base in _PREFIXES:
        if text.startswith(prefix):
            return text[len(prefix):], base

    if len(text) > 1 and text[0] == "0":
        return text[1:], 8

    return text, 10


def parse_unsigned(text: str) -> int:
    """
    Parse a numeric literal into an unsigned 64-bit integer.

    Args:
        text: The literal, e.g. "42", "0x2A", "$2A", "%101010", "'*'"

    Returns:
        The integer value (0 to 2**64 - 1)

    Raises:
        NumericParseError: If the text is not a valid literal or does not
            fit in 64 bits
    """
    literal = text.strip()
    if not literal:
        raise NumericParseError(text, "empty literal")

    if literal[0] == "'":
        if len(literal) == 3 and literal[2] == "'":
            return ord(literal[1])
        raise NumericParseError(text, "character literal must be a single character in quotes")

    digits, base = _split_base(literal)
    if not digits:
        raise NumericParseError(text, f"expected {_BASE_NAMES[base]} digits")

    if not _DIGITS[base].fullmatch(digits):
        raise NumericParseError(text, f"invalid {_BASE_NAMES[base]} digits")

    value = int(digits, base)
    if value > UINT64_MAX:
        raise NumericParseError(text, "value out of range for 64 bits")

    return value
