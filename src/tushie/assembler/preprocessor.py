"""
Source Preprocessor
===================

Flattens a source file and everything it includes into one ordered list of
SourceLine records, ready for the assembler.

It handles:
- Full-line comments (';' in the first column), which are dropped
- Lines shorter than two characters, which are dropped
- #include <path>  - splice another source file in at this point
- #incbin <path>   - embed a binary file as a base64 literal

Every line remembers the file and line number it came from, so errors raised
later by the assembler point at the right place even inside included files.
Binary payloads become ordinary `base64 "..."` lines, so the assembler has a
single path for ingesting binary data.

Example
-------
>>> from tushie.assembler.preprocessor import Preprocessor
>>> pp = Preprocessor()
>>> lines = pp.expand_string("; header\\n\\tdb 1, 2\\n", "demo.s")
>>> [(l.text, l.line) for l in lines]
[('\\tdb 1, 2', 2)]
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import base64
import logging

from tushie.config import AssemblerConfig
from tushie.errors import (
    AssemblerError,
    IncludeCycleError,
    IncludeDepthError,
    IncludeError,
    MissingArgumentError,
    SourceFileError,
    SourceLocation,
    UnknownDirectiveError,
)

logger = logging.getLogger(__name__)

# Length of "#include " and "#incbin "; the path is everything after them
INCLUDE_PREFIX_LEN = 9
INCBIN_PREFIX_LEN = 8


# =============================================================================
# Source Line Record
# =============================================================================

@dataclass(frozen=True)
class SourceLine:
    """
    One logical line handed to the assembler.

    Attributes:
        text: Raw line text (comments and labels not yet stripped)
        filename: File the line came from (the including file for lines
            synthesized from #incbin)
        line: 1-based line number in that file
    """
    text: str
    filename: str
    line: int

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line)


def incbin_lines(data: bytes, width: int = 64) -> list[str]:
    """
    Render binary data as the text of a multi-line base64 literal.

    The first line is '\\tbase64 "' followed by up to width characters,
    each following line carries the next chunk, and the last chunk is
    followed by the closing quote.

    Args:
        data: Raw bytes to embed
        width: Maximum base64 characters per line

    Returns:
        Line texts, without newlines

    Raises:
        ValueError: If width is less than 1
    """
    if width < 1:
        raise ValueError(f"base64 line width must be at least 1, got {width}")
    encoded = base64.b64encode(data).decode("ascii")
    chunks = [encoded[i:i + width] for i in range(0, len(encoded), width)] or [""]
    chunks[0] = '\tbase64 "' + chunks[0]
    chunks[-1] = chunks[-1] + '"'
    return chunks


# =============================================================================
# Preprocessor
# =============================================================================

class Preprocessor:
    """
    Expands #include and #incbin directives into a flat line list.

    Includes are resolved depth-first. The files currently being expanded
    are kept on a stack so that a file including itself, directly or
    through others, fails with IncludeCycleError instead of recursing
    forever.

    Usage:
        pp = Preprocessor(AssemblerConfig(include_paths=[Path("inc")]))
        lines = pp.expand("main.s")
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()

        # Resolved paths of the files being expanded, outermost first
        self._include_stack: list[str] = []
        # Names of the same files as written, for cycle reports
        self._include_names: list[str] = []

    # =========================================================================
    # Public Interface
    # =========================================================================

    def expand(self, filename: str | Path) -> list[SourceLine]:
        """
        Expand a source file.

        Args:
            filename: Path of the top-level source file

        Returns:
            Ordered SourceLine list with all inclusions resolved

        Raises:
            AssemblerError: On the first preprocessing error
        """
        path = Path(filename)
        self._include_stack = []
        self._include_names = []
        return self._expand_file(path, str(filename))

    def expand_string(self, source: str, filename: str = "<input>") -> list[SourceLine]:
        """
        Expand source text that does not come from a file.

        Relative #include and #incbin paths are looked up as written and
        then in the configured include paths.

        Args:
            source: Source text
            filename: Virtual filename for diagnostics

        Returns:
            Ordered SourceLine list with all inclusions resolved
        """
        self._include_stack = []
        self._include_names = []
        return self._expand_text(source, filename)

    # =========================================================================
    # File Handling
    # =========================================================================

    def _expand_file(self, path: Path, name: str) -> list[SourceLine]:
        """Read one file and expand it with itself pushed on the include stack."""
        source = self._read_text(path, name)

        self._include_stack.append(str(path.resolve()))
        self._include_names.append(name)
        try:
            lines = self._expand_text(source, name)
        finally:
            self._include_stack.pop()
            self._include_names.pop()

        logger.debug(f"Expanded {name}: {len(lines)} lines")
        return lines

    def _read_text(
        self,
        path: Path,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> str:
        """Read a source file, turning OS and decoding failures into SourceFileError."""
        try:
            with open(path, encoding=self.config.encoding, newline="") as f:
                return f.read()
        except OSError as e:
            raise SourceFileError(
                name, e.strerror or str(e), location, source_line
            ) from e
        except UnicodeDecodeError as e:
            raise SourceFileError(
                name, f"not valid {self.config.encoding} text", location, source_line
            ) from e

    def _resolve(
        self,
        target: str,
        location: SourceLocation,
        source_line: str,
    ) -> Path:
        """
        Find the file named by an #include or #incbin argument.

        Search order: the path as written, the including file's
        directory, then each configured include path.
        """
        path = Path(target)
        if path.is_absolute():
            candidates = [path]
        else:
            candidates = [path, Path(location.filename).parent / path]
            candidates.extend(Path(p) / path for p in self.config.include_paths)

        for candidate in candidates:
            if candidate.is_file():
                return candidate

        search_paths = []
        for candidate in candidates[1:]:
            parent = str(candidate.parent)
            if parent not in search_paths:
                search_paths.append(parent)

        raise SourceFileError(
            target,
            "file not found",
            location,
            source_line,
            search_paths=search_paths,
        )

    # =========================================================================
    # Line Processing
    # =========================================================================

    def _expand_text(self, source: str, filename: str) -> list[SourceLine]:
        """Expand the lines of one file's text."""
        output: list[SourceLine] = []

        for linum, line in enumerate(source.split("\n"), start=1):
            if line.endswith("\r"):
                line = line[:-1]

            if len(line) < 2 or line[0] == ";":
                continue

            if line[0] == "#":
                output.extend(self._process_directive(line, SourceLocation(filename, linum)))
            else:
                output.append(SourceLine(line, filename, linum))

        return output

    def _process_directive(self, line: str, location: SourceLocation) -> list[SourceLine]:
        """Dispatch a '#' line."""
        directive = line[1:].split(" ")[0].lower()

        if directive == "include":
            if len(line) <= INCLUDE_PREFIX_LEN:
                raise MissingArgumentError(
                    "no filename provided to #include", location, source_line=line
                )
            return self._process_include(line[INCLUDE_PREFIX_LEN:], location, line)

        if directive == "incbin":
            if len(line) <= INCBIN_PREFIX_LEN:
                raise MissingArgumentError(
                    "no filename provided to #incbin", location, source_line=line
                )
            return self._process_incbin(line[INCBIN_PREFIX_LEN:], location, line)

        raise UnknownDirectiveError(directive, location, source_line=line)

    def _process_include(
        self,
        target: str,
        location: SourceLocation,
        line: str,
    ) -> list[SourceLine]:
        """Expand an included file and return its lines."""
        path = self._resolve(target, location, line)

        if str(path.resolve()) in self._include_stack:
            raise IncludeCycleError(
                target, list(self._include_names), location, source_line=line
            )

        if len(self._include_stack) >= self.config.max_include_depth:
            raise IncludeDepthError(
                target, self.config.max_include_depth, location, source_line=line
            )

        logger.debug(f"{location}: including {path}")
        try:
            return self._expand_file(path, str(path))
        except AssemblerError as e:
            reason = f"{e.location}: {e.message}" if e.location else e.message
            raise IncludeError(target, reason, location, source_line=line) from e

    def _process_incbin(
        self,
        target: str,
        location: SourceLocation,
        line: str,
    ) -> list[SourceLine]:
        """Turn a binary file into synthesized base64 lines."""
        path = self._resolve(target, location, line)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise SourceFileError(
                target, e.strerror or str(e), location, source_line=line
            ) from e

        texts = incbin_lines(data, self.config.base64_line_width)
        logger.debug(f"{location}: incbin {path} ({len(data)} bytes, {len(texts)} lines)")
        return [SourceLine(text, location.filename, location.line) for text in texts]


# =============================================================================
# Convenience Function
# =============================================================================

def preprocess(
    filename: str | Path,
    config: Optional[AssemblerConfig] = None,
) -> list[SourceLine]:
    """
    Expand a source file into its flattened line list.

    Args:
        filename: Top-level source file
        config: Optional configuration (include paths, depth limit)

    Returns:
        Ordered SourceLine list
    """
    return Preprocessor(config).expand(filename)
