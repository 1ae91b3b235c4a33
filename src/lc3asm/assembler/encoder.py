"""
LC-3 Bit-Field Encoder
======================

Pure functions that pack an opcode and its operands into 16-bit words.
Each function returns a list of words: one for every instruction, any
number for data directives.

Instruction Layouts (bit 15 = MSB)
----------------------------------
```
ADD/AND reg     opcode  DR   SR1  0 00 SR2
ADD/AND imm     opcode  DR   SR1  1 imm5
BR              0000    nzp  pcoffset9
JMP/RET         1100    000  BaseR 000000
JSR             0100    1    pcoffset11
JSRR            0100    0 00 BaseR 000000
LD/LDI/ST/STI/LEA opcode DR/SR pcoffset9
LDR/STR         opcode  DR/SR BaseR offset6
NOT             1001    DR   SR   111111
RTI             1000    000000000000
TRAP            1111    0000 trapvect8
```

Field values passed to the encoders are the raw low bits of the field
(for example imm5 = 0b11101 for -3). Use verify_offset() to turn a
signed 16-bit value into a field. Values wider than their field are
rejected with OffsetRangeError, never truncated.
"""

from typing import Union

from lc3asm.assembler.opcodes import (
    BRANCH_CONDITIONS,
    OPCODE_BITS,
    OpCode,
    Register,
)
from lc3asm.errors import OffsetRangeError, SourceLocation


RegisterLike = Union[Register, int]


# =============================================================================
# Range Validation
# =============================================================================

def to_signed(value: int) -> int:
    """Interpret a 16-bit pattern as a two's complement integer."""
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def sign_extend(value: int, bit_count: int) -> int:
    """
    Sign-extend the low bit_count bits of value to 16 bits.

    >>> hex(sign_extend(0b11101, 5))
    '0xfffd'
    """
    value &= (1 << bit_count) - 1
    if value & (1 << (bit_count - 1)):
        value |= 0xFFFF << bit_count
    return value & 0xFFFF


def verify_offset(
    value: int,
    bit_count: int,
    location: SourceLocation | None = None,
) -> int:
    """
    Check that a 16-bit value fits a signed field of bit_count bits.

    The value fits when every bit above the field's sign bit is a copy of
    it: all zeros for a non-negative value, all ones for a negative one.

    Args:
        value: 16-bit pattern (negative Python ints are accepted and taken
               in two's complement)
        bit_count: Field width, 1 to 16
        location: Source location for the error message

    Returns:
        The low bit_count bits, ready to be OR-ed into an instruction word

    Raises:
        OffsetRangeError: If the value needs more than bit_count bits
    """
    value &= 0xFFFF
    high = value >> (bit_count - 1)
    if high not in (0, 0xFFFF >> (bit_count - 1)):
        raise OffsetRangeError(to_signed(value), bit_count, location)
    return value & ((1 << bit_count) - 1)


def verify_unsigned(
    value: int,
    bit_count: int,
    location: SourceLocation | None = None,
) -> int:
    """
    Check that value fits an unsigned field of bit_count bits.

    Raises:
        OffsetRangeError: If value is negative or too wide
    """
    if not 0 <= value < (1 << bit_count):
        raise OffsetRangeError(value, bit_count, location, signed=False)
    return value


def _reg(register: RegisterLike) -> int:
    """Validate a register number and return it as a plain int."""
    return int(Register(register))


def _instruction(opcode: OpCode) -> int:
    return OPCODE_BITS[opcode] << 12


# =============================================================================
# Operate Instructions
# =============================================================================

def encode_add(dr: RegisterLike, sr1: RegisterLike, sr2: RegisterLike) -> list[int]:
    """ADD DR, SR1, SR2 (register form)."""
    return [_instruction(OpCode.ADD) | _reg(dr) << 9 | _reg(sr1) << 6 | _reg(sr2)]


def encode_add_imm(dr: RegisterLike, sr1: RegisterLike, imm5: int) -> list[int]:
    """ADD DR, SR1, imm5 (immediate form)."""
    imm5 = verify_unsigned(imm5, 5)
    return [_instruction(OpCode.ADD) | _reg(dr) << 9 | _reg(sr1) << 6 | 1 << 5 | imm5]


def encode_and(dr: RegisterLike, sr1: RegisterLike, sr2: RegisterLike) -> list[int]:
    """AND DR, SR1, SR2 (register form)."""
    return [_instruction(OpCode.AND) | _reg(dr) << 9 | _reg(sr1) << 6 | _reg(sr2)]


def encode_and_imm(dr: RegisterLike, sr1: RegisterLike, imm5: int) -> list[int]:
    """AND DR, SR1, imm5 (immediate form)."""
    imm5 = verify_unsigned(imm5, 5)
    return [_instruction(OpCode.AND) | _reg(dr) << 9 | _reg(sr1) << 6 | 1 << 5 | imm5]


def encode_not(dr: RegisterLike, sr: RegisterLike) -> list[int]:
    """NOT DR, SR. The low six bits are always 111111."""
    return [_instruction(OpCode.NOT) | _reg(dr) << 9 | _reg(sr) << 6 | 0b111111]


# =============================================================================
# Control Flow
# =============================================================================

def encode_br(opcode: OpCode, pcoffset9: int) -> list[int]:
    """
    BR[n][z][p] with the condition bits taken from the mnemonic.

    Plain BR is unconditional (nzp = 111), same as BRnzp.
    """
    nzp = BRANCH_CONDITIONS[opcode]
    pcoffset9 = verify_unsigned(pcoffset9, 9)
    return [nzp << 9 | pcoffset9]


def encode_jmp(base: RegisterLike) -> list[int]:
    """JMP BaseR."""
    return [_instruction(OpCode.JMP) | _reg(base) << 6]


def encode_ret() -> list[int]:
    """RET, i.e. JMP R7."""
    return encode_jmp(Register.R7)


def encode_jsr(pcoffset11: int) -> list[int]:
    """JSR with an 11-bit PC-relative offset; bit 11 selects this form."""
    pcoffset11 = verify_unsigned(pcoffset11, 11)
    return [_instruction(OpCode.JSR) | 1 << 11 | pcoffset11]


def encode_jsrr(base: RegisterLike) -> list[int]:
    """JSRR BaseR."""
    return [_instruction(OpCode.JSRR) | _reg(base) << 6]


def encode_rti() -> list[int]:
    """RTI. No operands."""
    return [_instruction(OpCode.RTI)]


def encode_res() -> list[int]:
    """The reserved opcode 1101, emitted as a bare word."""
    return [_instruction(OpCode.RES)]


def encode_trap(trapvect8: int) -> list[int]:
    """TRAP trapvect8."""
    trapvect8 = verify_unsigned(trapvect8, 8)
    return [_instruction(OpCode.TRAP) | trapvect8]


# =============================================================================
# Data Movement
# =============================================================================

def encode_pc_relative(opcode: OpCode, reg: RegisterLike, pcoffset9: int) -> list[int]:
    """LD, LDI, ST, STI or LEA: register plus a 9-bit PC-relative offset."""
    pcoffset9 = verify_unsigned(pcoffset9, 9)
    return [_instruction(opcode) | _reg(reg) << 9 | pcoffset9]


def encode_ld(dr: RegisterLike, pcoffset9: int) -> list[int]:
    return encode_pc_relative(OpCode.LD, dr, pcoffset9)


def encode_ldi(dr: RegisterLike, pcoffset9: int) -> list[int]:
    return encode_pc_relative(OpCode.LDI, dr, pcoffset9)


def encode_st(sr: RegisterLike, pcoffset9: int) -> list[int]:
    return encode_pc_relative(OpCode.ST, sr, pcoffset9)


def encode_sti(sr: RegisterLike, pcoffset9: int) -> list[int]:
    return encode_pc_relative(OpCode.STI, sr, pcoffset9)


def encode_lea(dr: RegisterLike, pcoffset9: int) -> list[int]:
    return encode_pc_relative(OpCode.LEA, dr, pcoffset9)


def encode_base_offset(
    opcode: OpCode,
    reg: RegisterLike,
    base: RegisterLike,
    offset6: int,
) -> list[int]:
    """LDR or STR: register, base register and a 6-bit offset."""
    offset6 = verify_unsigned(offset6, 6)
    return [_instruction(opcode) | _reg(reg) << 9 | _reg(base) << 6 | offset6]


def encode_ldr(dr: RegisterLike, base: RegisterLike, offset6: int) -> list[int]:
    return encode_base_offset(OpCode.LDR, dr, base, offset6)


def encode_str(sr: RegisterLike, base: RegisterLike, offset6: int) -> list[int]:
    return encode_base_offset(OpCode.STR, sr, base, offset6)


# =============================================================================
# Directives
# =============================================================================

def encode_orig(origin: int) -> list[int]:
    """The origin word that heads every object file."""
    return [verify_unsigned(origin, 16)]


def encode_fill(value: int) -> list[int]:
    """.FILL: one word holding a constant or an address."""
    return [verify_unsigned(value, 16)]


def encode_blkw(count: int) -> list[int]:
    """.BLKW: count zero words."""
    return [0] * verify_unsigned(count, 16)


def encode_stringz(text: str) -> list[int]:
    """
    .STRINGZ: one word per byte of the UTF-8 encoded text, then a zero.

    Bytes are stored as-is, so ASCII text gives one word per character.
    """
    return [*text.encode("utf-8"), 0]


def stringz_length(text: str) -> int:
    """Number of words encode_stringz() emits for text."""
    return len(text.encode("utf-8")) + 1
