"""
Byte Emitter
============

Walks the flattened SourceLine list produced by the preprocessor and writes
the bytes each line describes to a binary sink.

Each line goes through:
1. Whitespace trim
2. Label and trailing-comment stripping (labels are recorded at the
   current output offset)
3. Opcode dispatch on the first space-separated word

Opcodes
-------
- db <arg>[, <arg> ...]  - numeric byte values (0-255) or quoted strings
- base64 "<payload>"     - base64 data, optionally spanning several lines

State Machine
-------------
The emitter is always in exactly one of two modes:

    Normal ──base64 with one quote──> InBase64Block
      ^                                    │
      └──────── line containing " ─────────┘

Input must end in Normal mode, otherwise UnterminatedBase64Error is raised.

Output is written incrementally and flushed after every emitting line, so
bytes produced before an error stay in the sink.
"""

from dataclasses import dataclass, field
from typing import BinaryIO, Iterable, Union
import base64
import binascii
import logging

from tushie.assembler.labels import LabelTable
from tushie.assembler.preprocessor import SourceLine
from tushie.assembler.scanner import CharKind, classify, split_label
from tushie.errors import (
    Base64Error,
    ByteOverflowError,
    MissingArgumentError,
    MissingQuoteError,
    NumericParseError,
    UnknownOpcodeError,
    UnterminatedBase64Error,
)
from tushie.numparse import parse_unsigned

logger = logging.getLogger(__name__)


# =============================================================================
# Emitter State
# =============================================================================

@dataclass(frozen=True)
class Normal:
    """Interpreting opcode lines."""


@dataclass
class InBase64Block:
    """
    Accumulating a multi-line base64 literal.

    Attributes:
        start: The line that opened the block
        chunks: Payload text collected so far
    """
    start: SourceLine
    chunks: list[str] = field(default_factory=list)


EmitterMode = Union[Normal, InBase64Block]

NORMAL = Normal()


class AssemblyContext:
    """
    Everything one emit pass mutates: sink, cursor, labels and mode.

    Attributes:
        sink: Binary stream receiving output
        address: Offset of the next byte to be written
        labels: Labels recorded so far
        mode: Current emitter mode
    """

    def __init__(self, sink: BinaryIO, labels: LabelTable):
        self.sink = sink
        self.address = 0
        self.labels = labels
        self.mode: EmitterMode = NORMAL

    def write(self, data: bytes) -> None:
        """Write bytes to the sink and advance the cursor."""
        self.sink.write(data)
        self.address += len(data)


@dataclass
class AssemblyResult:
    """
    Outcome of a successful emit pass.

    Attributes:
        size: Total bytes written
        labels: Final label table
    """
    size: int
    labels: LabelTable


# =============================================================================
# Emitter
# =============================================================================

class Emitter:
    """
    Single-pass byte emitter.

    Usage:
        emitter = Emitter()
        with open("out.bin", "wb") as out:
            result = emitter.emit(lines, out)
        print(result.labels.as_dict())
    """

    def __init__(self, strict_labels: bool = False):
        self._strict_labels = strict_labels

    def emit(self, lines: Iterable[SourceLine], sink: BinaryIO) -> AssemblyResult:
        """
        Assemble lines into sink.

        Args:
            lines: Flattened source lines, in order
            sink: Writable binary stream

        Returns:
            AssemblyResult with the byte count and label table

        Raises:
            AssemblerError: On the first error; bytes already written
                are left in the sink
        """
        ctx = AssemblyContext(sink, LabelTable(strict=self._strict_labels))

        for line in lines:
            mode = ctx.mode
            if isinstance(mode, InBase64Block):
                self._continue_base64(ctx, mode, line)
            else:
                self._assemble_line(ctx, line)

        if isinstance(ctx.mode, InBase64Block):
            start = ctx.mode.start
            raise UnterminatedBase64Error(start.location, source_line=start.text)

        logger.debug(f"Emitted {ctx.address} bytes, {len(ctx.labels)} labels")
        return AssemblyResult(ctx.address, ctx.labels)

    # =========================================================================
    # Normal Mode
    # =========================================================================

    def _assemble_line(self, ctx: AssemblyContext, line: SourceLine) -> None:
        """Strip label and comment from a line and dispatch its opcode."""
        label, text = split_label(line.text.strip())
        if label is not None:
            ctx.labels.define(label, ctx.address, line.location, line.text)

        words = text.strip().split(" ")
        op = words[0].lower()

        if op == "":
            return
        if op == "base64":
            self._op_base64(ctx, line)
        elif op == "db":
            self._op_db(ctx, line, words[1:])
        else:
            raise UnknownOpcodeError(op, line.location, source_line=line.text)

    def _op_base64(self, ctx: AssemblyContext, line: SourceLine) -> None:
        """Handle base64: decode a one-line payload or open a block."""
        if '"' not in line.text:
            raise MissingQuoteError(line.location, source_line=line.text)

        parts = line.text.split('"')
        if len(parts) == 2:
            ctx.mode = InBase64Block(start=line, chunks=[parts[1]])
            return

        self._write_base64(ctx, parts[1], line)

    def _op_db(self, ctx: AssemblyContext, line: SourceLine, args: list[str]) -> None:
        """
        Handle db: emit each argument as bytes.

        Strings emit their characters (UTF-8 encoded); numbers emit one byte
        each. Arguments are comma separated and whitespace outside strings
        is ignored.

        Single quotes are not string delimiters here, so a character literal
        such as ';' or ',' is cut apart before it reaches parse_unsigned.
        """
        if not args:
            raise MissingArgumentError(
                "db requires at least one argument", line.location, source_line=line.text
            )

        token: list[str] = []
        after_string = False

        for _, char, kind in classify(" ".join(args)):
            if kind is CharKind.QUOTE:
                after_string = True
            elif kind is CharKind.ESCAPE:
                continue
            elif kind is CharKind.STRING:
                ctx.write(char.encode("utf-8"))
            elif char == ",":
                if token:
                    self._write_number(ctx, "".join(token), line)
                elif not after_string:
                    raise MissingArgumentError(
                        "malformed arguments to db", line.location, source_line=line.text
                    )
                token = []
                after_string = False
            elif not char.isspace():
                token.append(char)

        if token:
            self._write_number(ctx, "".join(token), line)

        ctx.sink.flush()

    def _write_number(self, ctx: AssemblyContext, text: str, line: SourceLine) -> None:
        """Parse one numeric db argument and write it as a byte."""
        try:
            value = parse_unsigned(text)
        except NumericParseError as e:
            raise NumericParseError(
                e.text, e.reason, line.location, source_line=line.text
            ) from e

        if value > 0xFF:
            raise ByteOverflowError(value, line.location, source_line=line.text)

        ctx.write(bytes([value]))

    # =========================================================================
    # Base64 Block Mode
    # =========================================================================

    def _continue_base64(
        self,
        ctx: AssemblyContext,
        block: InBase64Block,
        line: SourceLine,
    ) -> None:
        """Add a line to an open base64 block, closing it on a quote."""
        if '"' not in line.text:
            block.chunks.append(line.text)
            return

        block.chunks.append(line.text.split('"')[0])
        ctx.mode = NORMAL
        self._write_base64(ctx, "".join(block.chunks), line)

    def _write_base64(self, ctx: AssemblyContext, payload: str, line: SourceLine) -> None:
        """Decode a complete base64 payload and write the bytes."""
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise Base64Error(
                f"invalid base64 payload: {e}", line.location, source_line=line.text
            ) from e

        start = ctx.address
        ctx.write(data)
        ctx.sink.flush()
        logger.debug(f"{line.location}: base64 {len(data)} bytes at ${start:04X}")


# =============================================================================
# Convenience Function
# =============================================================================

def emit(
    lines: Iterable[SourceLine],
    sink: BinaryIO,
    strict_labels: bool = False,
) -> AssemblyResult:
    """
    Assemble lines into a binary sink.

    Args:
        lines: Flattened source lines
        sink: Writable binary stream
        strict_labels: Reject duplicate labels

    Returns:
        AssemblyResult with the byte count and label table
    """
    return Emitter(strict_labels=strict_labels).emit(lines, sink)
