"""
LC-3 Assembler
==============

This module provides a two-pass assembler for the LC-3 instruction set.

Main Components
---------------
- **Assembler**: Main class that runs both passes and writes the artifacts
- **lexer**: Splits source lines into typed tokens
- **SymbolTable**: Label -> address mapping built by the first pass
- **encoder**: Pure bit-field packing for every instruction and directive
- **FirstPass / SecondPass**: The two passes over the token stream

Assembly Process
----------------
1. **Pass 1 (FirstPass)**:
   - Tokenize each line and concatenate the tokens into one stream
   - Assign every label the location counter of its statement
   - Stop after .END

2. **Pass 2 (SecondPass)**:
   - Walk the stream, consuming each statement's operands
   - Resolve labels to PC-relative offsets and range-check all fields
   - Produce [origin, word, word, ...]

Example Usage
-------------
>>> from lc3asm.assembler import assemble
>>> [hex(w) for w in assemble('''
...     .ORIG x3000
...     ADD R1, R1, #1
...     HALT
...     .END
... ''')]
['0x3000', '0x1261', '0xf025']

Supported Features
------------------
- All LC-3 instructions, including BR condition variants and TRAP aliases
  (GETC, OUT, PUTS, IN, PUTSP, HALT)
- Directives .ORIG, .FILL, .BLKW, .STRINGZ, .END
- Hexadecimal (x), binary (b) and decimal (#) constants
- Object file and address-sorted symbol file output
"""

from lc3asm.assembler.assembler import Assembler, AssemblerConfig, assemble, assemble_file
from lc3asm.assembler.lexer import Token, TokenType, classify, parse_constant, tokenize_line
from lc3asm.assembler.opcodes import Directive, OpCode, Register
from lc3asm.assembler.symbols import Symbol, SymbolTable
from lc3asm.assembler.codegen import FirstPass, FirstPassResult, SecondPass, first_pass, second_pass

__all__ = [
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_file",
    "Token",
    "TokenType",
    "classify",
    "parse_constant",
    "tokenize_line",
    "Directive",
    "OpCode",
    "Register",
    "Symbol",
    "SymbolTable",
    "FirstPass",
    "FirstPassResult",
    "SecondPass",
    "first_pass",
    "second_pass",
]
