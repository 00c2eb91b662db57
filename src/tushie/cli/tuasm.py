"""
tuasm - Assembler Command-Line Interface
========================================

This module implements the command-line interface for the assembler.

Usage Examples
--------------
Basic assembly:
    $ tuasm boot.s boot.bin

With include paths and a symbol file:
    $ tuasm -I ./include -s boot.sym boot.s boot.bin

Reject duplicate labels:
    $ tuasm --strict-labels boot.s boot.bin

Verbose mode:
    $ tuasm -v boot.s boot.bin

Exit Status
-----------
0 on success, 1 on a missing argument or any assembly or I/O error,
3 on an unexpected internal error.
"""

from pathlib import Path
from typing import Optional
import logging
import sys

import click

from tushie import __version__
from tushie.assembler import Assembler
from tushie.cli.errors import ExitCode, handle_cli_exception
from tushie.config import AssemblerConfig

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.argument(
    "output_file",
    required=False,
    type=click.Path(dir_okay=False, path_type=Path),
)
@click.option(
    "-I", "--include",
    multiple=True,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Add include search path (can be repeated)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the label table to a symbol file",
)
@click.option(
    "--strict-labels",
    is_flag=True,
    help="Treat a label defined twice as an error instead of keeping the last one",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="tuasm")
@click.pass_context
def main(
    ctx: click.Context,
    input_file: Optional[Path],
    output_file: Optional[Path],
    include: tuple[Path, ...],
    symbols: Optional[Path],
    strict_labels: bool,
    verbose: bool,
) -> None:
    """
    Assemble a tushie source file into a raw binary file.

    INPUT_FILE is the source file; OUTPUT_FILE receives the binary.

    \b
    Examples:
        tuasm boot.s boot.bin
        tuasm -I inc/ boot.s boot.bin
        tuasm -s boot.sym boot.s boot.bin
    """
    if input_file is None or output_file is None:
        click.echo(ctx.get_usage(), err=True)
        sys.exit(ExitCode.USAGE_ERROR)

    setup_logging(verbose)

    config = AssemblerConfig.from_env()
    for inc_path in include:
        config.add_include_path(inc_path)
    if strict_labels:
        config.strict_labels = True

    asm = Assembler(config)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        result = asm.assemble_file(input_file, output_file)

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(f"Wrote {result.size} bytes to {output_file}")
            click.echo(f"Defined {len(result.labels)} labels")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose)


if __name__ == "__main__":
    main()
