"""
tushie - Source-to-Binary Assembler
===================================

tushie turns a small line-oriented source format into a raw binary file.
The format can embed literal bytes, strings and base64 payloads, pull in
other source files and binary files, and mark output offsets with labels.

Main Components
---------------
- **assembler**: Preprocessor, emitter and label table (tuasm)
- **numparse**: Numeric literal parser used for db arguments
- **config**: Settings shared by the pipeline stages

Quick Start
-----------
Assemble a file:
    >>> from tushie import assemble_file
    >>> result = assemble_file("boot.s", "boot.bin")
    >>> result.labels.as_dict()
    {'start': 0}

Or use the command-line tool:
    $ tuasm boot.s boot.bin

Version History
---------------
1.0.0 - Initial release with preprocessor, emitter and tuasm
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from tushie.assembler import (
    Assembler,
    AssemblyResult,
    LabelTable,
    Preprocessor,
    SourceLine,
    assemble,
    assemble_file,
)
from tushie.config import AssemblerConfig
from tushie.errors import (
    TushieError,
    AssemblerError,
    SourceLocation,
    MissingArgumentError,
    MissingQuoteError,
    UnknownDirectiveError,
    UnknownOpcodeError,
    Base64Error,
    NumericParseError,
    ByteOverflowError,
    UnterminatedBase64Error,
    DuplicateLabelError,
    SourceFileError,
    IncludeError,
    IncludeCycleError,
    IncludeDepthError,
)
from tushie.numparse import parse_unsigned

__all__ = [
    # Version info
    "__version__",
    # Pipeline
    "Assembler",
    "AssemblyResult",
    "AssemblerConfig",
    "LabelTable",
    "Preprocessor",
    "SourceLine",
    "assemble",
    "assemble_file",
    "parse_unsigned",
    # Exception hierarchy
    "TushieError",
    "AssemblerError",
    "SourceLocation",
    "MissingArgumentError",
    "MissingQuoteError",
    "UnknownDirectiveError",
    "UnknownOpcodeError",
    "Base64Error",
    "NumericParseError",
    "ByteOverflowError",
    "UnterminatedBase64Error",
    "DuplicateLabelError",
    "SourceFileError",
    "IncludeError",
    "IncludeCycleError",
    "IncludeDepthError",
]
