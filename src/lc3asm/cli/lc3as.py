"""
lc3as - LC-3 Assembler Command-Line Interface
=============================================

This module implements the command-line interface for the LC-3 assembler.

Usage Examples
--------------
Basic assembly (writes out.obj and out.sym next to the source):
    $ lc3as -f hello.asm

With output base name:
    $ lc3as -f hello.asm -o hello

Debug mode (logs every scanned line and the symbol table):
    $ lc3as -f hello.asm -d
"""

from pathlib import Path
import logging

import click

from lc3asm import __version__
from lc3asm.assembler import Assembler, AssemblerConfig
from lc3asm.cli.errors import handle_cli_exception


def setup_logging(debug: bool) -> None:
    """Configure logging based on the debug flag."""
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if debug else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.option(
    "-f", "--file", "source",
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Assembly source file",
)
@click.option(
    "-o", "--outfile",
    default="out",
    show_default=True,
    help="Base name of the output files (<outfile>.obj, <outfile>.sym), "
         "written in the source file's directory",
)
@click.option(
    "-d", "--debug",
    is_flag=True,
    help="Log scanner and symbol table details",
)
@click.version_option(version=__version__, prog_name="lc3as")
def main(source: Path, outfile: str, debug: bool) -> None:
    """
    Assemble LC-3 source code.

    Produces a big-endian object file whose first word is the .ORIG
    address, and a symbol file listing every label with its address.
    Nothing is written if assembly fails.

    \b
    Examples:
        lc3as -f hello.asm              # Outputs out.obj, out.sym
        lc3as -f hello.asm -o hello     # Outputs hello.obj, hello.sym
        lc3as -f hello.asm -d           # Debug logging
    """
    setup_logging(debug)

    config = AssemblerConfig(source=source, outfile=outfile, debug=debug)
    asm = Assembler(config)

    try:
        click.echo("Starting assembly process...")
        obj_path, sym_path = asm.run()

        words = asm.get_words()
        click.echo(
            f"Assembled {len(words) - 1} words at x{asm.get_origin():04X}, "
            f"{len(asm.get_symbols())} symbols"
        )
        click.echo(f"Wrote {obj_path} and {sym_path}")

    except Exception as e:
        handle_cli_exception(e, verbose=debug, error_type="Assembly")


if __name__ == "__main__":
    main()
