"""
Assembler - Main Interface
==========================

This module provides the Assembler class, the primary interface for turning
source files into raw binary output. It runs the two pipeline stages in
order:

1. **Preprocessing** (Preprocessor): expand #include and #incbin into a
   flat line list
2. **Emission** (Emitter): walk the lines once, writing bytes and
   recording labels

Example Usage
-------------
>>> from tushie.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_file("boot.s", "boot.bin")
>>> print(asm.get_symbols())
{'start': 0, 'table': 16}

Command-Line Usage
------------------
    $ tuasm boot.s boot.bin -s boot.sym
"""

from dataclasses import replace
from pathlib import Path
from typing import Optional
import io
import logging

from tushie.assembler.emitter import AssemblyResult, Emitter
from tushie.assembler.labels import LabelTable
from tushie.assembler.preprocessor import Preprocessor, SourceLine
from tushie.config import AssemblerConfig

logger = logging.getLogger(__name__)


class Assembler:
    """
    Preprocess-then-emit pipeline.

    The label table from the most recent run is kept so that callers can
    query it or write a symbol file afterwards.

    Attributes:
        config: Settings for include search, label strictness and limits
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        """
        Initialize the assembler.

        Args:
            config: Assembler settings (defaults to AssemblerConfig()). The
                assembler works on its own copy, so later changes such as
                add_include_path do not reach the caller's config.
        """
        config = config or AssemblerConfig()
        self.config = replace(config, include_paths=list(config.include_paths))
        self._result: Optional[AssemblyResult] = None

    # =========================================================================
    # Configuration
    # =========================================================================

    def add_include_path(self, path: str | Path) -> None:
        """
        Add a directory to search for included files.

        Args:
            path: Directory path to add
        """
        self.config.add_include_path(path)

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def preprocess(self, filepath: str | Path) -> list[SourceLine]:
        """
        Run only the preprocessor on a file.

        Args:
            filepath: Source file

        Returns:
            Flattened SourceLine list
        """
        return Preprocessor(self.config).expand(filepath)

    def emit(self, lines: list[SourceLine], sink) -> AssemblyResult:
        """
        Run only the emitter, writing into an open binary stream.

        Args:
            lines: Flattened source lines
            sink: Writable binary stream

        Returns:
            AssemblyResult with the byte count and label table
        """
        self._result = None
        result = Emitter(strict_labels=self.config.strict_labels).emit(lines, sink)
        self._result = result
        return result

    def assemble_file(self, infile: str | Path, outfile: str | Path) -> AssemblyResult:
        """
        Assemble a source file into a binary file.

        The whole source is preprocessed before the output file is created,
        so preprocessing errors never touch the output. Errors during
        emission leave the bytes written so far in the output file.

        Args:
            infile: Source file
            outfile: Binary output file (created or truncated)

        Returns:
            AssemblyResult with the byte count and label table

        Raises:
            AssemblerError: If preprocessing or emission fails
            OSError: If the output file cannot be written
        """
        logger.debug(f"Assembling {infile} -> {outfile}")
        lines = self.preprocess(infile)
        logger.debug(f"Preprocessed {len(lines)} lines")

        with open(outfile, "wb") as out:
            result = self.emit(lines, out)

        logger.debug(f"Wrote {result.size} bytes to {outfile}")
        return result

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source text held in memory.

        Args:
            source: Source text
            filename: Virtual filename for error messages

        Returns:
            The assembled bytes

        Raises:
            AssemblerError: If assembly fails
        """
        lines = Preprocessor(self.config).expand_string(source, filename)
        out = io.BytesIO()
        self.emit(lines, out)
        return out.getvalue()

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_labels(self) -> LabelTable:
        """
        Get the label table from the last assembly.

        Returns:
            LabelTable (empty if nothing has been assembled)
        """
        if self._result is None:
            return LabelTable(strict=self.config.strict_labels)
        return self._result.labels

    def get_symbols(self) -> dict[str, int]:
        """
        Get the label table as a dictionary.

        Returns:
            Dictionary mapping label names to output offsets
        """
        return self.get_labels().as_dict()

    def get_size(self) -> int:
        """Return the number of bytes written by the last assembly."""
        return self._result.size if self._result else 0

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the label table to a symbol file.

        Args:
            filepath: Output file path
        """
        self.get_labels().write_symbols(filepath)
        logger.debug(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> bytes:
    """
    Convenience function to assemble source text.

    Args:
        source: Source text
        filename: Virtual filename for errors

    Returns:
        Assembled bytes

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(
    infile: str | Path,
    outfile: str | Path,
    config: Optional[AssemblerConfig] = None,
) -> AssemblyResult:
    """
    Convenience function to assemble a file into a binary file.

    Args:
        infile: Source file
        outfile: Binary output file
        config: Optional assembler settings

    Returns:
        AssemblyResult with the byte count and label table

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(config).assemble_file(infile, outfile)
