"""
LC-3 Assembly Language Lexer
============================

This module turns source lines into typed tokens. The language is line
oriented, so the lexer works one line at a time:

    [LABEL] (MNEMONIC OPERAND[,OPERAND...] | DIRECTIVE OPERAND)? [; COMMENT]

Token Types
-----------
- LABEL: Label definition or label reference (case preserved)
- OP: Instruction mnemonic (ADD, BRnz, HALT, ...)
- DIR: Directive (.ORIG, .END, .FILL, .BLKW, .STRINGZ)
- CONST: Numeric literal, stored as an unsigned 16-bit value
- REG: Register R0..R7
- STR: Double-quoted string literal, escapes decoded
- INVALID: Empty operand field or unterminated string

Number Formats
--------------
| Format      | Prefix | Example | Value  |
|-------------|--------|---------|--------|
| Hexadecimal | x      | x1A     | 26     |
| Binary      | b      | b101    | 5      |
| Decimal     | #      | #42     | 42     |
| Decimal     | (none) | 42      | 42     |

Negative literals (#-1, x-1) are stored in two's complement: #-1 is xFFFF.

Example
-------
>>> from lc3asm.assembler.lexer import tokenize_line
>>> tokenize_line("LOOP ADD R0,R1,#3 ; inc")
[Token(LABEL, 'LOOP'), Token(OP, OpCode.ADD), Token(REG, R0), Token(REG, R1), Token(CONST, x0003)]
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, Union
import string

from lc3asm.assembler.opcodes import (
    DIRECTIVE_NAMES,
    MNEMONICS,
    REGISTER_NAMES,
    Directive,
    OpCode,
    Register,
)
from lc3asm.errors import AssemblerError, ParseConstantError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token categories of the assembly language."""

    LABEL = auto()
    OP = auto()
    DIR = auto()
    CONST = auto()
    REG = auto()
    STR = auto()
    INVALID = auto()


TokenValue = Union[str, int, OpCode, Directive, Register, None]


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source code.

    Equality only looks at the type and value, so tests can compare
    against tokens built without position information.

    Attributes:
        type: The TokenType classification
        value: Label or string text, OpCode, Directive, Register, or the
               16-bit value of a constant. For INVALID, the raw text.
        line: Line number in source (1-indexed, 0 when unknown)
        filename: Name of the source file
    """
    type: TokenType
    value: TokenValue = None
    line: int = field(default=0, compare=False)
    filename: str = field(default="<input>", compare=False)

    def __repr__(self) -> str:
        if self.type is TokenType.CONST:
            return f"Token({self.type.name}, x{self.value:04X})"
        return f"Token({self.type.name}, {self.value!r})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line)

    # Shorthand constructors, mostly for readable tests

    @classmethod
    def label(cls, name: str) -> "Token":
        return cls(TokenType.LABEL, name)

    @classmethod
    def op(cls, opcode: OpCode) -> "Token":
        return cls(TokenType.OP, opcode)

    @classmethod
    def directive(cls, directive: Directive) -> "Token":
        return cls(TokenType.DIR, directive)

    @classmethod
    def const(cls, value: int) -> "Token":
        return cls(TokenType.CONST, value & 0xFFFF)

    @classmethod
    def reg(cls, register: Union[Register, int]) -> "Token":
        return cls(TokenType.REG, Register(register))

    @classmethod
    def string(cls, contents: str) -> "Token":
        return cls(TokenType.STR, contents)


# =============================================================================
# Constants
# =============================================================================

# Radix prefixes recognised by parse_constant
CONSTANT_PREFIXES = {
    "x": 16,
    "b": 2,
    "#": 10,
}

# ASCII digits allowed after the prefix (and an optional sign)
RADIX_DIGITS = {
    16: string.hexdigits,
    2: "01",
    10: string.digits,
}

# Values must fit a signed 32-bit integer before truncation to 16 bits
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1


def parse_constant(text: str) -> int:
    """
    Parse a numeric literal into an unsigned 16-bit value.

    The first character selects the radix: 'x' hexadecimal, 'b' binary,
    '#' decimal. Anything else is read as plain decimal.

    Args:
        text: The literal, e.g. "x3000", "b0101", "#-5", "12"

    Returns:
        The value truncated to 16 bits (negative values in two's complement)

    Raises:
        ParseConstantError: If the digits do not parse in the radix, or the
                            value is outside the 32-bit signed range
    """
    text = text.strip()
    radix = CONSTANT_PREFIXES.get(text[:1])
    digits = text[1:] if radix is not None else text
    radix = radix or 10

    # int() also takes '_', '0x' prefixes and non-ASCII digits; literals do not
    unsigned = digits[1:] if digits[:1] in ("-", "+") else digits
    if not unsigned or any(char not in RADIX_DIGITS[radix] for char in unsigned):
        raise ParseConstantError(f"invalid constant '{text}'")

    try:
        value = int(digits, radix)
    except ValueError:
        raise ParseConstantError(f"invalid constant '{text}'") from None

    if not _INT32_MIN <= value <= _INT32_MAX:
        raise ParseConstantError(f"constant '{text}' is out of range")

    return value & 0xFFFF


# =============================================================================
# Strings
# =============================================================================

ESCAPE_SEQUENCES = {
    "t": "\t",      # Tab
    "n": "\n",      # Newline
    "e": "\x1b",    # Escape
}


def decode_string(body: str) -> str:
    """
    Decode escape sequences in the body of a string literal.

    Only \\t, \\n and \\e are recognised; any other backslash pair is kept
    as written.
    """
    chars = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body) and body[i + 1] in ESCAPE_SEQUENCES:
            chars.append(ESCAPE_SEQUENCES[body[i + 1]])
            i += 2
            continue
        chars.append(char)
        i += 1
    return "".join(chars)


# =============================================================================
# Classification and Tokenization
# =============================================================================

def classify(lexeme: str, line: int = 0, filename: str = "<input>") -> Token:
    """
    Turn one bare lexeme into a token.

    Mnemonics, registers and directives are matched case-insensitively.
    Otherwise a lexeme starting with 'x', '#' or 'b' is a constant, one in
    double quotes is a string, and anything else is a label.

    Raises:
        ParseConstantError: If the lexeme looks like a constant but is not one
    """
    lexeme = lexeme.strip()
    upper = lexeme.upper()

    if upper in MNEMONICS:
        return Token(TokenType.OP, OpCode.parse(upper), line, filename)

    if upper in REGISTER_NAMES:
        return Token(TokenType.REG, Register.parse(upper), line, filename)

    if upper in DIRECTIVE_NAMES:
        return Token(TokenType.DIR, Directive.parse(upper), line, filename)

    if not lexeme:
        return Token(TokenType.INVALID, lexeme, line, filename)

    if lexeme[0] in CONSTANT_PREFIXES:
        return Token(TokenType.CONST, parse_constant(lexeme), line, filename)

    if lexeme.startswith('"'):
        if len(lexeme) < 2 or not lexeme.endswith('"'):
            return Token(TokenType.INVALID, lexeme, line, filename)
        return Token(TokenType.STR, decode_string(lexeme[1:-1]), line, filename)

    return Token(TokenType.LABEL, lexeme, line, filename)


def tokenize_line(
    text: str,
    line: int = 0,
    filename: str = "<input>",
) -> list[Token]:
    """
    Split one source line into tokens.

    Empty lines and comment lines produce an empty list. A trailing
    ';' comment is dropped. The first word decides how the rest of the
    line is split:

    - instruction: operands separated by commas
    - directive: the whole remainder is one operand (so strings may
      contain commas and spaces)
    - label: the remainder is tokenized as a line of its own

    Args:
        text: Raw source line
        line: Line number for diagnostics
        filename: Source file name for diagnostics

    Raises:
        AssemblerError: Classification errors, with the location attached
    """
    try:
        return _tokenize(text, line, filename)
    except AssemblerError as e:
        raise e.with_context(SourceLocation(filename, line), text)


def _tokenize(text: str, line: int, filename: str) -> list[Token]:
    text = text.strip()
    if not text or text.startswith(";"):
        return []

    text = text.split(";", 1)[0].strip()

    parts = text.split(None, 1)
    head = classify(parts[0], line, filename)
    tokens = [head]
    rest: Optional[str] = parts[1] if len(parts) > 1 else None

    if rest is None:
        return tokens

    if head.type is TokenType.OP:
        tokens.extend(classify(arg, line, filename) for arg in rest.split(","))
    elif head.type is TokenType.DIR:
        tokens.append(classify(rest, line, filename))
    elif head.type is TokenType.LABEL:
        tokens.extend(_tokenize(rest, line, filename))

    return tokens
