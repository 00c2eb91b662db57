"""
Assembler Configuration
=======================

Settings shared by the preprocessor and the assembler. Configuration can
come from:
- Default values (defined here)
- Environment variables (AssemblerConfig.from_env)
- Command-line options, which the CLI applies on top of the environment
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import logging
import os

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class AssemblerConfig:
    """
    Configuration for one preprocess + assemble run.

    Attributes:
        include_paths: Extra directories searched for #include and #incbin
            targets, after the path as written and the including file's
            directory
        strict_labels: Reject a label defined twice instead of letting the
            later definition win (default: False)
        max_include_depth: Maximum #include nesting (default: 64)
        base64_line_width: Characters of base64 per synthesized #incbin
            line (default: 64)
        encoding: Text encoding of source files (default: "utf-8")
    """

    include_paths: List[Path] = field(default_factory=list)
    strict_labels: bool = False
    max_include_depth: int = 64
    base64_line_width: int = 64
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.base64_line_width < 1:
            raise ValueError(
                f"base64_line_width must be at least 1, got {self.base64_line_width}"
            )

    @classmethod
    def from_env(cls) -> "AssemblerConfig":
        """
        Create an AssemblerConfig from environment variables.

        Environment variables (all optional):
            TUSHIE_INCLUDE_PATH: Include directories, separated by os.pathsep
            TUSHIE_STRICT_LABELS: 1/true/yes/on to reject duplicate labels
            TUSHIE_MAX_INCLUDE_DEPTH: Maximum include nesting (integer)

        Returns:
            AssemblerConfig with values from environment variables
        """
        config = cls()

        if include_path := os.environ.get("TUSHIE_INCLUDE_PATH"):
            config.include_paths = [
                Path(p) for p in include_path.split(os.pathsep) if p
            ]

        if strict := os.environ.get("TUSHIE_STRICT_LABELS"):
            config.strict_labels = strict.strip().lower() in _TRUE_VALUES

        if depth := os.environ.get("TUSHIE_MAX_INCLUDE_DEPTH"):
            try:
                config.max_include_depth = int(depth)
            except ValueError:
                logger.warning(f"Ignoring invalid TUSHIE_MAX_INCLUDE_DEPTH={depth!r}")

        return config

    def add_include_path(self, path: str | Path) -> None:
        """
        Add a directory to search for included files.

        Args:
            path: Directory path to add
        """
        path = Path(path)
        if not path.is_dir():
            logger.warning(f"Include path '{path}' is not a directory")
            return
        if path not in self.include_paths:
            self.include_paths.append(path)
