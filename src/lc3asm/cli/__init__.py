"""
lc3asm Command-Line Interface
=============================

- **lc3as**: LC-3 assembler

Implemented as a Click application with the shared error handling and
exit codes from lc3asm.cli.errors.
"""

__all__ = ["lc3as"]
