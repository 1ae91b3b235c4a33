"""
LC-3 Assembler - Main Interface
===============================

This module provides the Assembler class, the primary interface for
assembling LC-3 source. It runs the two passes in order and writes the
two output artifacts.

Example Usage
-------------
>>> from lc3asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
...         .ORIG x3000
...         LEA R0, MSG
...         PUTS
...         HALT
... MSG     .STRINGZ "Hi"
...         .END
... ''')
>>> asm.get_symbols()
{'MSG': 12291}
>>> asm.write_object("hello.obj")
>>> asm.write_symbols("hello.sym")

Output Artifacts
----------------
- ``<outfile>.obj``: big-endian 16-bit words, origin first
- ``<outfile>.sym``: one ``<label> <address in lowercase hex>`` line per
  label, in ascending address order

Command-Line Usage
------------------
    $ lc3as -f prog.asm -o prog

writes prog.obj and prog.sym next to prog.asm.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional
import logging
import struct

from lc3asm.assembler.codegen import FirstPass, SecondPass
from lc3asm.assembler.symbols import Symbol, SymbolTable
from lc3asm.errors import AssemblerIOError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

@dataclass(frozen=True)
class AssemblerConfig:
    """
    Settings for one assembly run.

    Attributes:
        source: Path of the assembly source file
        outfile: Base name of the artifacts (<outfile>.obj, <outfile>.sym),
                 written in the source file's directory
        debug: Log every scanned line and the symbol table at DEBUG level
    """
    source: Optional[Path] = None
    outfile: str = "out"
    debug: bool = False

    @property
    def output_dir(self) -> Path:
        """Directory the artifacts go to: the source file's directory."""
        if self.source is None:
            return Path(".")
        return Path(self.source).parent

    @property
    def object_path(self) -> Path:
        return self.output_dir / f"{self.outfile}.obj"

    @property
    def symbol_path(self) -> Path:
        return self.output_dir / f"{self.outfile}.sym"


# =============================================================================
# Assembler
# =============================================================================

class Assembler:
    """
    Main LC-3 assembler class.

    Assembling is all-or-nothing: the first error raises and leaves no
    output behind. Results of the last successful run are available
    through the get_* methods.

    Attributes:
        config: Run settings (source path, output base name, debug flag)
    """

    def __init__(
        self,
        config: Optional[AssemblerConfig] = None,
        log: Optional[logging.Logger] = None,
    ):
        """
        Initialize the assembler.

        Args:
            config: Run settings. Defaults to AssemblerConfig().
            log: Logger the passes report progress to. Defaults to the
                 module loggers, which are silent unless logging is
                 configured (the CLI does this for --debug).
        """
        self.config = config or AssemblerConfig()
        self._log = log or logger
        self._words: list[int] = []
        self._symbols = SymbolTable()

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def run(self) -> tuple[Path, Path]:
        """
        Assemble config.source and write both artifacts.

        Returns:
            (object file path, symbol file path)

        Raises:
            AssemblerError: If assembly fails (nothing is written)
            ValueError: If config.source is not set
        """
        if self.config.source is None:
            raise ValueError("AssemblerConfig.source is required for run()")

        self.assemble_file(self.config.source)
        return self.write_outputs()

    def assemble_lines(self, lines: Iterable[str], filename: str = "<input>") -> list[int]:
        """
        Assemble a sequence of source lines.

        Returns:
            The object word sequence: [origin, word, ...]

        Raises:
            AssemblerError: On the first error in either pass
        """
        self._words = []
        self._symbols = SymbolTable()

        result = FirstPass(filename, self._log_for("codegen")).run(lines)

        if self.config.debug:
            self._log.debug("Symbol table: %s", {
                sym.name: f"x{sym.address:04X}" for sym in result.symbols.sorted_by_address()
            })

        words = SecondPass(result.symbols, result.lines, self._log_for("codegen")).run(
            result.tokens
        )

        self._log.debug("Generated %d words", len(words))

        self._symbols = result.symbols
        self._words = words
        return words

    def assemble_string(self, source: str, filename: str = "<input>") -> list[int]:
        """Assemble source code held in a string."""
        return self.assemble_lines(source.splitlines(), filename)

    def assemble_file(self, filepath: str | Path) -> list[int]:
        """
        Assemble a source file.

        Raises:
            AssemblerIOError: If the file cannot be read
            AssemblerError: If assembly fails
        """
        filepath = Path(filepath)
        self._log.debug("Assembling %s", filepath)
        return self.assemble_lines(self.read_source(filepath), str(filepath))

    @staticmethod
    def read_source(filepath: str | Path) -> list[str]:
        """
        Read a source file into lines (UTF-8).

        Raises:
            AssemblerIOError: If the file cannot be read or decoded
        """
        try:
            return Path(filepath).read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise AssemblerIOError(f"cannot read '{filepath}': {e}") from e

    def _log_for(self, name: str) -> Optional[logging.Logger]:
        """Child of an injected logger, or None to use the module default."""
        if self._log is logger:
            return None
        return self._log.getChild(name)

    # =========================================================================
    # Results
    # =========================================================================

    def get_words(self) -> list[int]:
        """The object word sequence from the last run, origin first."""
        return list(self._words)

    def get_code(self) -> bytes:
        """The object word sequence serialized big-endian."""
        return struct.pack(f">{len(self._words)}H", *self._words)

    def get_origin(self) -> int:
        """
        The .ORIG address of the last run.

        Raises:
            RuntimeError: If nothing has been assembled yet
        """
        if not self._words:
            raise RuntimeError("nothing has been assembled yet")
        return self._words[0]

    def get_symbols(self) -> dict[str, int]:
        """Label -> address mapping from the last run."""
        return self._symbols.as_dict()

    def get_symbol_table(self) -> SymbolTable:
        return self._symbols

    def get_symbol_listing(self) -> str:
        """The symbol artifact text: '<label> <hex address>' per line."""
        return "".join(format_symbol(sym) for sym in self._symbols.sorted_by_address())

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_object(self, filepath: str | Path) -> None:
        """
        Write the object artifact.

        Raises:
            AssemblerIOError: If the file cannot be written
        """
        try:
            with open(filepath, "wb") as f:
                f.write(self.get_code())
        except OSError as e:
            raise AssemblerIOError(f"cannot write '{filepath}': {e}") from e

        self._log.debug("Wrote %d words to %s", len(self._words), filepath)

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write the symbol artifact, sorted by address.

        Raises:
            AssemblerIOError: If the file cannot be written
        """
        try:
            with open(filepath, "w", encoding="utf-8", newline="\n") as f:
                f.write(self.get_symbol_listing())
        except OSError as e:
            raise AssemblerIOError(f"cannot write '{filepath}': {e}") from e

        self._log.debug("Wrote %d symbols to %s", len(self._symbols), filepath)

    def write_outputs(self) -> tuple[Path, Path]:
        """
        Write both artifacts to the locations given by the config.

        The object file goes first. If the symbol file then fails, the
        object file is removed again so no half-written pair is left.

        Returns:
            (object file path, symbol file path)

        Raises:
            AssemblerIOError: If either file cannot be written
        """
        obj_path = self.config.object_path
        sym_path = self.config.symbol_path
        self.write_object(obj_path)
        try:
            self.write_symbols(sym_path)
        except AssemblerIOError:
            obj_path.unlink(missing_ok=True)
            raise
        return obj_path, sym_path


def format_symbol(symbol: Symbol) -> str:
    """One symbol artifact line: 'LOOP 3002'."""
    return f"{symbol.name} {symbol.address:x}\n"


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>") -> list[int]:
    """
    Convenience function to assemble source code.

    Returns:
        The object word sequence, origin first

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_string(source, filename)


def assemble_file(filepath: str | Path) -> list[int]:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler().assemble_file(filepath)
