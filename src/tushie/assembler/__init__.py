"""
tushie Assembler
================

Translates tushie source files into raw binary output.

Main Components
---------------
- **Assembler**: Runs the preprocessor and the emitter in order
- **Preprocessor**: Expands #include and #incbin into a flat line list
- **Emitter**: Walks the lines once, writing bytes and recording labels
- **LabelTable**: Label name to output offset mapping
- **scanner**: Quote- and escape-aware delimiter search shared by all of
  the above

Source Format
-------------
    ; full-line comment
    #include common.s       ; splice in another source file
    #incbin logo.bin        ; embed a binary file
    start:                  ; label at the current output offset
        db 1, 0x02, $03     ; literal bytes
        db "text", 0        ; string bytes
        base64 "AAEC"       ; base64 payload (may span lines)

Example Usage
-------------
>>> from tushie.assembler import assemble
>>> assemble('db "hi", 0')
b'hi\\x00'
"""

from tushie.assembler.assembler import Assembler, assemble, assemble_file
from tushie.assembler.emitter import (
    AssemblyContext,
    AssemblyResult,
    Emitter,
    InBase64Block,
    Normal,
    emit,
)
from tushie.assembler.labels import LabelEntry, LabelTable
from tushie.assembler.preprocessor import (
    Preprocessor,
    SourceLine,
    incbin_lines,
    preprocess,
)
from tushie.assembler.scanner import (
    CharKind,
    QuoteScanner,
    find_unquoted,
    split_label,
    strip_comment,
)

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Preprocessor
    "Preprocessor",
    "SourceLine",
    "incbin_lines",
    "preprocess",
    # Emitter
    "Emitter",
    "AssemblyContext",
    "AssemblyResult",
    "Normal",
    "InBase64Block",
    "emit",
    # Labels
    "LabelEntry",
    "LabelTable",
    # Scanner
    "CharKind",
    "QuoteScanner",
    "find_unquoted",
    "split_label",
    "strip_comment",
]
