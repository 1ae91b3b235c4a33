"""
LC-3 Instruction Set Definition
===============================

This module defines the closed vocabularies of the assembly language:
instruction mnemonics, register names and directives, together with the
fixed numbers the encoder needs (opcode nibbles, branch condition codes
and trap vectors).

The LC-3 is a 16-bit, word-addressed machine with eight general purpose
registers. Every instruction is exactly one word; the top four bits hold
the opcode.

Opcode Map
----------
| Nibble | Mnemonic(s)             |
|--------|-------------------------|
| 0000   | BR, BRn, BRz, BRp, ...  |
| 0001   | ADD                     |
| 0010   | LD                      |
| 0011   | ST                      |
| 0100   | JSR, JSRR               |
| 0101   | AND                     |
| 0110   | LDR                     |
| 0111   | STR                     |
| 1000   | RTI                     |
| 1001   | NOT                     |
| 1010   | LDI                     |
| 1011   | STI                     |
| 1100   | JMP, RET                |
| 1101   | (reserved)              |
| 1110   | LEA                     |
| 1111   | TRAP, GETC, OUT, ...    |

Trap Aliases
------------
GETC, OUT, PUTS, IN, PUTSP and HALT are spelled as instructions but
assemble to TRAP with a fixed vector (x20 through x25).
"""

from enum import Enum, IntEnum

from lc3asm.errors import ParseDirectiveError, ParseOpCodeError, ParseRegisterError


# =============================================================================
# Registers
# =============================================================================

class Register(IntEnum):
    """General purpose registers. The value is the 3-bit register field."""

    R0 = 0
    R1 = 1
    R2 = 2
    R3 = 3
    R4 = 4
    R5 = 5
    R6 = 6
    R7 = 7

    @classmethod
    def parse(cls, name: str) -> "Register":
        """
        Look up a register by name (case-insensitive).

        Raises:
            ParseRegisterError: If name is not R0..R7
        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ParseRegisterError(f"unknown register '{name}'") from None

    def __repr__(self) -> str:
        return self.name


# =============================================================================
# Instruction Mnemonics
# =============================================================================

class OpCode(Enum):
    """
    Instruction mnemonics.

    The value is the upper-case source spelling. Use OPCODE_BITS for the
    4-bit opcode field.
    """

    # Branches (opcode 0000, condition codes in bits 11:9)
    BR = "BR"
    BRN = "BRN"
    BRZ = "BRZ"
    BRP = "BRP"
    BRZP = "BRZP"
    BRNP = "BRNP"
    BRNZ = "BRNZ"
    BRNZP = "BRNZP"

    ADD = "ADD"
    LD = "LD"
    ST = "ST"
    JSR = "JSR"
    JSRR = "JSRR"
    AND = "AND"
    LDR = "LDR"
    STR = "STR"
    RTI = "RTI"
    NOT = "NOT"
    LDI = "LDI"
    STI = "STI"
    RET = "RET"
    JMP = "JMP"
    RES = "RES"
    LEA = "LEA"
    TRAP = "TRAP"

    # Trap aliases
    GETC = "GETC"
    OUT = "OUT"
    PUTS = "PUTS"
    IN = "IN"
    PUTSP = "PUTSP"
    HALT = "HALT"

    @classmethod
    def parse(cls, name: str) -> "OpCode":
        """
        Look up a mnemonic (case-insensitive).

        Raises:
            ParseOpCodeError: If name is not an instruction mnemonic
        """
        try:
            return cls(name.strip().upper())
        except ValueError:
            raise ParseOpCodeError(f"unknown instruction '{name}'") from None

    def __repr__(self) -> str:
        return f"OpCode.{self.name}"


# =============================================================================
# Directives
# =============================================================================

class Directive(Enum):
    """Assembler directives. The value is the upper-case source spelling."""

    ORIG = ".ORIG"
    END = ".END"
    FILL = ".FILL"
    BLKW = ".BLKW"
    STRINGZ = ".STRINGZ"

    @classmethod
    def parse(cls, name: str) -> "Directive":
        """
        Look up a directive by its dotted name (case-insensitive).

        Raises:
            ParseDirectiveError: If name is not a known directive
        """
        try:
            return cls(name.strip().upper())
        except ValueError:
            raise ParseDirectiveError(f"unknown directive '{name}'") from None

    def __repr__(self) -> str:
        return f"Directive.{self.name}"


# =============================================================================
# Encoding Tables
# =============================================================================

# 4-bit opcode field for every mnemonic
OPCODE_BITS: dict[OpCode, int] = {
    OpCode.BR: 0b0000,
    OpCode.BRN: 0b0000,
    OpCode.BRZ: 0b0000,
    OpCode.BRP: 0b0000,
    OpCode.BRZP: 0b0000,
    OpCode.BRNP: 0b0000,
    OpCode.BRNZ: 0b0000,
    OpCode.BRNZP: 0b0000,
    OpCode.ADD: 0b0001,
    OpCode.LD: 0b0010,
    OpCode.ST: 0b0011,
    OpCode.JSR: 0b0100,
    OpCode.JSRR: 0b0100,
    OpCode.AND: 0b0101,
    OpCode.LDR: 0b0110,
    OpCode.STR: 0b0111,
    OpCode.RTI: 0b1000,
    OpCode.NOT: 0b1001,
    OpCode.LDI: 0b1010,
    OpCode.STI: 0b1011,
    OpCode.RET: 0b1100,
    OpCode.JMP: 0b1100,
    OpCode.RES: 0b1101,
    OpCode.LEA: 0b1110,
    OpCode.TRAP: 0b1111,
    OpCode.GETC: 0b1111,
    OpCode.OUT: 0b1111,
    OpCode.PUTS: 0b1111,
    OpCode.IN: 0b1111,
    OpCode.PUTSP: 0b1111,
    OpCode.HALT: 0b1111,
}

# n/z/p condition bits (bits 11:9). Plain BR branches unconditionally.
BRANCH_CONDITIONS: dict[OpCode, int] = {
    OpCode.BR: 0b111,
    OpCode.BRN: 0b100,
    OpCode.BRZ: 0b010,
    OpCode.BRP: 0b001,
    OpCode.BRZP: 0b011,
    OpCode.BRNP: 0b101,
    OpCode.BRNZ: 0b110,
    OpCode.BRNZP: 0b111,
}

# Fixed service routines reached through the trap table
TRAP_VECTORS: dict[OpCode, int] = {
    OpCode.GETC: 0x20,
    OpCode.OUT: 0x21,
    OpCode.PUTS: 0x22,
    OpCode.IN: 0x23,
    OpCode.PUTSP: 0x24,
    OpCode.HALT: 0x25,
}

BRANCH_INSTRUCTIONS = frozenset(BRANCH_CONDITIONS)

# Instructions whose operand is a 9-bit PC-relative offset after a register
PC_OFFSET9_INSTRUCTIONS = frozenset({
    OpCode.LD, OpCode.LDI, OpCode.ST, OpCode.STI, OpCode.LEA,
})

# Upper-case source spellings, used by the token classifier
MNEMONICS = frozenset(op.value for op in OpCode)
REGISTER_NAMES = frozenset(reg.name for reg in Register)
DIRECTIVE_NAMES = frozenset(d.value for d in Directive)
