"""
lc3asm - Two-Pass Assembler for the LC-3
========================================

This package assembles programs for the LC-3, a 16-bit, word-addressed
teaching architecture with eight general-purpose registers.

Main Components
---------------
- **assembler**: Lexer, symbol table, bit-field encoder and the two passes
    Converts assembly source files (.asm) to an object file (.obj) and a
    symbol file (.sym)

- **cli**: The ``lc3as`` command-line tool

Quick Start
-----------
Assemble a program:
    >>> from lc3asm.assembler import Assembler
    >>> asm = Assembler()
    >>> words = asm.assemble_file("hello.asm")
    >>> asm.write_object("hello.obj")
    >>> asm.write_symbols("hello.sym")

Or use the command-line tool:
    $ lc3as -f hello.asm -o hello

Logging
-------
Modules log through the standard ``logging`` package under the
``lc3asm`` logger. Nothing is printed unless the application configures
logging; ``lc3as --debug`` does so at DEBUG level.
"""

import logging

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from lc3asm.assembler import Assembler, AssemblerConfig, assemble, assemble_file
from lc3asm.errors import (
    Lc3Error,
    ErrorKind,
    SourceLocation,
    AssemblerError,
    AssemblerIOError,
    ParseConstantError,
    ParseOpCodeError,
    ParseRegisterError,
    ParseDirectiveError,
    InvalidTokenError,
    UnexpectedEofError,
    MissingLabelError,
    AssemblySyntaxError,
    DuplicateLabelError,
    OffsetRangeError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "Lc3Error",
    "ErrorKind",
    "SourceLocation",
    "AssemblerError",
    "AssemblerIOError",
    "ParseConstantError",
    "ParseOpCodeError",
    "ParseRegisterError",
    "ParseDirectiveError",
    "InvalidTokenError",
    "UnexpectedEofError",
    "MissingLabelError",
    "AssemblySyntaxError",
    "DuplicateLabelError",
    "OffsetRangeError",
]
