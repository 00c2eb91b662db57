"""
tushie Command-Line Interface
=============================

This package provides the command-line tools for tushie:

- **tuasm**: source-to-binary assembler

Each tool is implemented as a Click-based CLI application with
comprehensive help and error reporting.
"""

__all__ = ["tuasm"]
