"""
Label Table
===========

Records the output offset at which each label was declared. The assembler
fills the table as it goes; nothing in the assembler reads it back, but it
is returned to the caller and can be written out as a symbol file.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional
import logging

from tushie.errors import DuplicateLabelError, SourceLocation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LabelEntry:
    """
    A label and the byte offset it marks.

    Attributes:
        name: Label name as written in the source
        address: Offset of the next byte written after the label
        location: Where the label was declared
    """
    name: str
    address: int
    location: Optional[SourceLocation] = None


class LabelTable:
    """
    Mapping of label name to LabelEntry.

    By default a redefinition replaces the earlier entry. With strict=True
    it raises DuplicateLabelError instead.
    """

    def __init__(self, strict: bool = False):
        self._strict = strict
        self._entries: dict[str, LabelEntry] = {}

    def define(
        self,
        name: str,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> LabelEntry:
        """
        Record a label at an address.

        Args:
            name: Label name
            address: Current output offset
            location: Declaration site, for diagnostics
            source_line: Declaring source text, for diagnostics

        Returns:
            The new entry

        Raises:
            DuplicateLabelError: If strict and the name is already defined
        """
        previous = self._entries.get(name)
        if previous is not None:
            if self._strict:
                raise DuplicateLabelError(
                    name,
                    location=location,
                    original_location=previous.location,
                    source_line=source_line,
                )
            logger.debug(
                f"Label '{name}' redefined at {location} "
                f"(was ${previous.address:04X}, now ${address:04X})"
            )

        entry = LabelEntry(name, address, location)
        self._entries[name] = entry
        logger.debug(f"Label '{name}' = ${address:04X}")
        return entry

    def get(self, name: str) -> Optional[LabelEntry]:
        """Return the entry for name, or None."""
        return self._entries.get(name)

    def __getitem__(self, name: str) -> int:
        return self._entries[name].address

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LabelEntry]:
        return iter(self._entries.values())

    def as_dict(self) -> dict[str, int]:
        """Return the table as a plain name -> address dictionary."""
        return {name: entry.address for name, entry in self._entries.items()}

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the table as a symbol file.

        Format: name $address (one per line, sorted by name)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by tuasm\n")
            for name, entry in sorted(self._entries.items()):
                f.write(f"{name} ${entry.address:04X}\n")
