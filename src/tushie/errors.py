"""
tushie Error Hierarchy
======================

This module defines the exception hierarchy for the whole toolchain.
All exceptions inherit from TushieError, allowing callers to catch every
assembly failure with a single except clause.

Exception Hierarchy
-------------------
TushieError (base)
└── AssemblerError (carries source location)
    ├── MissingArgumentError - directive or opcode without its argument
    ├── MissingQuoteError - base64 opcode without a double quote
    ├── UnknownDirectiveError - unrecognised #directive
    ├── UnknownOpcodeError - unrecognised opcode keyword
    ├── Base64Error - malformed base64 payload
    ├── NumericParseError - malformed numeric literal
    ├── ByteOverflowError - db argument larger than 0xFF
    ├── UnterminatedBase64Error - input ended inside a base64 block
    ├── DuplicateLabelError - label defined twice (strict mode)
    ├── SourceFileError - source or incbin file cannot be read
    └── IncludeError - failure inside an included file
        ├── IncludeCycleError - file includes itself
        └── IncludeDepthError - include nesting too deep

Every assembly error is fatal: the first one raised aborts the run.

Error messages follow this format:
    filename:line: error: description
        source_line_text
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class TushieError(Exception):
    """
    Base exception for all tushie errors.

        try:
            assemble_file("boot.s", "boot.bin")
        except TushieError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in a source file, used for error reporting.

    The assembler is line oriented, so there is no column.

    Attributes:
        filename: Name of the source file
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        """Format as 'filename:line' for error messages."""
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(TushieError):
    """
    Base exception for errors tied to a place in the source.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            boot.s:15: error: unknown opcode 'dw'
                dw 1234
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line.strip()}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class MissingArgumentError(AssemblerError):
    """
    A directive or opcode was given without the argument it requires.

    Examples:
        #include
        db
        db 1,,2
    """
    pass


class MissingQuoteError(AssemblerError):
    """The base64 opcode was used without a double-quoted payload."""

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "base64 argument must be enclosed by double quotes",
            location=location,
            hint='write the payload as base64 "AAEC"',
            source_line=source_line,
        )


class UnknownDirectiveError(AssemblerError):
    """A '#' line named a directive other than include or incbin."""

    def __init__(
        self,
        directive: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.directive = directive
        super().__init__(
            f"unknown preprocessor directive '#{directive}'",
            location=location,
            hint="supported directives: #include, #incbin",
            source_line=source_line,
        )


class UnknownOpcodeError(AssemblerError):
    """A line started with a keyword the assembler does not know."""

    def __init__(
        self,
        opcode: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.opcode = opcode
        super().__init__(
            f"unknown opcode '{opcode}'",
            location=location,
            hint="supported opcodes: db, base64",
            source_line=source_line,
        )


class Base64Error(AssemblerError):
    """A base64 payload could not be decoded."""
    pass


class NumericParseError(AssemblerError):
    """
    A numeric literal could not be parsed.

    Raised by tushie.numparse without a location; the assembler re-raises
    it with the file and line of the offending db argument.
    """

    def __init__(
        self,
        text: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        self.reason = reason
        super().__init__(
            f"invalid numeric literal '{text}': {reason}",
            location=location,
            source_line=source_line,
        )


class ByteOverflowError(AssemblerError):
    """A db argument does not fit in one byte."""

    def __init__(
        self,
        value: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.value = value
        super().__init__(
            f"argument to db larger than 0xFF: {value}/0o{value:o}/0x{value:X}",
            location=location,
            hint="split wide values into several bytes",
            source_line=source_line,
        )


class UnterminatedBase64Error(AssemblerError):
    """
    Input ended while a multi-line base64 block was still open.

    The location points at the line that opened the block.
    """

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "unterminated base64",
            location=location,
            hint='close the block with a double quote (")',
            source_line=source_line,
        )


class DuplicateLabelError(AssemblerError):
    """
    Label defined more than once.

    Only raised when strict labels are enabled; by default the later
    definition replaces the earlier one.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class SourceFileError(AssemblerError):
    """
    A source or binary file could not be opened or read.

    Raised for the top-level input file, for #include targets and for
    #incbin payloads.
    """

    def __init__(
        self,
        filename: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        search_paths: Optional[list[str]] = None,
    ):
        self.filename = filename
        self.reason = reason
        self.search_paths = search_paths or []

        hint = None
        if self.search_paths:
            hint = f"searched in: {', '.join(self.search_paths)}"

        super().__init__(
            f"cannot read '{filename}': {reason}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class IncludeError(AssemblerError):
    """
    Error while expanding an included file.

    The location is the #include line in the including file; the
    error raised inside the included file is chained as __cause__.
    """

    def __init__(
        self,
        filename: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.included_filename = filename
        self.reason = reason
        super().__init__(
            f"in file included as '{filename}': {reason}",
            location=location,
            source_line=source_line,
        )

    @property
    def root_cause(self) -> BaseException:
        """Follow the chain of wrapped include errors to the original one."""
        error: BaseException = self
        while isinstance(error, IncludeError) and error.__cause__ is not None:
            error = error.__cause__
        return error


class IncludeCycleError(IncludeError):
    """A file includes itself, directly or through other files."""

    def __init__(
        self,
        filename: str,
        chain: list[str],
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.chain = chain
        super().__init__(
            filename,
            "circular include detected (" + " -> ".join(chain + [filename]) + ")",
            location=location,
            source_line=source_line,
        )


class IncludeDepthError(IncludeError):
    """Includes are nested deeper than the configured limit."""

    def __init__(
        self,
        filename: str,
        max_depth: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.max_depth = max_depth
        super().__init__(
            filename,
            f"includes nested deeper than {max_depth} levels",
            location=location,
            source_line=source_line,
        )
