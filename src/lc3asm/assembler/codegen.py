"""
LC-3 Code Generator
===================

This module implements the two-pass assembly process.

Pass 1 (Symbol Collection)
--------------------------
- Tokenize every source line
- Track the location counter (LC) statement by statement
- Record each label at the LC of the statement it precedes
- Concatenate all line tokens into one immutable token stream
- Stop after the .END line

Pass 2 (Code Generation)
------------------------
- Replay the token stream with an index-based cursor
- Consume each statement's operands according to its grammar
- Resolve label operands and compute PC-relative offsets
- Range-check every field and encode it into 16-bit words

Both passes advance the LC with the same rules (one word per instruction
and per .FILL, n words for .BLKW n, len+1 words for .STRINGZ), so a
label's address always matches the LC the second pass sees at that label.

Object Word Sequence
--------------------
```
Index  Content
-----  -------
0      Origin address (.ORIG operand)
1..n   Program image, in source order
```
"""

from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence
import logging

from lc3asm.assembler.encoder import (
    encode_add,
    encode_add_imm,
    encode_and,
    encode_and_imm,
    encode_base_offset,
    encode_blkw,
    encode_br,
    encode_fill,
    encode_jmp,
    encode_jsr,
    encode_jsrr,
    encode_not,
    encode_orig,
    encode_pc_relative,
    encode_res,
    encode_ret,
    encode_rti,
    encode_stringz,
    encode_trap,
    stringz_length,
    verify_offset,
    verify_unsigned,
)
from lc3asm.assembler.lexer import Token, TokenType, tokenize_line
from lc3asm.assembler.opcodes import (
    BRANCH_INSTRUCTIONS,
    PC_OFFSET9_INSTRUCTIONS,
    TRAP_VECTORS,
    Directive,
    OpCode,
    Register,
)
from lc3asm.assembler.symbols import SymbolTable
from lc3asm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    InvalidTokenError,
    SourceLocation,
    UnexpectedEofError,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Token Cursor
# =============================================================================

_KIND_NAMES = {
    TokenType.LABEL: "label",
    TokenType.OP: "instruction",
    TokenType.DIR: "directive",
    TokenType.CONST: "constant",
    TokenType.REG: "register",
    TokenType.STR: "string",
    TokenType.INVALID: "invalid token",
}


def expect(token: Optional[Token], after: Token, *types: TokenType) -> Token:
    """
    Check that an operand token exists and has one of the given types.

    Args:
        token: The operand, or None if the stream/line ended
        after: The token the operand belongs to (for the EOF location)
        types: Accepted token types

    Raises:
        UnexpectedEofError: If token is None
        InvalidTokenError: If token is an INVALID token
        AssemblySyntaxError: If token has another type
    """
    if token is None:
        raise UnexpectedEofError(
            f"expected {' or '.join(_KIND_NAMES[t] for t in types)} "
            f"after {_describe(after)}",
            after.location,
        )
    if token.type is TokenType.INVALID and TokenType.INVALID not in types:
        raise InvalidTokenError(f"invalid operand {token.value!r}", token.location)
    if token.type not in types:
        raise AssemblySyntaxError(
            f"expected {' or '.join(_KIND_NAMES[t] for t in types)}, "
            f"found {_describe(token)}",
            token.location,
        )
    return token


def _describe(token: Token) -> str:
    value = token.value
    if isinstance(value, Register):
        value = value.name
    elif isinstance(value, (OpCode, Directive)):
        value = value.value
    elif token.type is TokenType.CONST:
        value = f"x{value:04X}"
    return f"{_KIND_NAMES[token.type]} '{value}'"


class TokenCursor:
    """
    Index-based reader over an immutable token sequence.

    Usage:
        cursor = TokenCursor(tokens)
        while (token := cursor.next()) is not None:
            reg = cursor.take_reg(token)
    """

    def __init__(self, tokens: Sequence[Token]):
        self._tokens = tuple(tokens)
        self._pos = 0

    @property
    def position(self) -> int:
        return self._pos

    def at_end(self) -> bool:
        """Check if all tokens have been consumed."""
        return self._pos >= len(self._tokens)

    def peek(self) -> Optional[Token]:
        """Look at the next token without consuming it."""
        if self.at_end():
            return None
        return self._tokens[self._pos]

    def next(self) -> Optional[Token]:
        """Consume and return the next token, or None at the end."""
        token = self.peek()
        if token is not None:
            self._pos += 1
        return token

    def take(self, after: Token, *types: TokenType) -> Token:
        """Consume the next token, which must have one of the given types."""
        return expect(self.next(), after, *types)

    def take_reg(self, after: Token) -> Register:
        return self.take(after, TokenType.REG).value

    def take_const(self, after: Token) -> int:
        return self.take(after, TokenType.CONST).value

    def take_str(self, after: Token) -> str:
        return self.take(after, TokenType.STR).value


# =============================================================================
# Pass 1: Symbol Collection
# =============================================================================

@dataclass(frozen=True)
class FirstPassResult:
    """
    Output of the first pass.

    Attributes:
        symbols: Label -> address table
        tokens: Every token of every line up to and including .END
        lines: The source lines, for error context in the second pass
        filename: Source file name
    """
    symbols: SymbolTable
    tokens: tuple[Token, ...]
    lines: tuple[str, ...]
    filename: str = "<input>"


class FirstPass:
    """
    Assigns addresses to labels and builds the token stream.

    Usage:
        result = FirstPass("prog.asm").run(lines)
        result.symbols.resolve("LOOP")
    """

    def __init__(self, filename: str = "<input>", log: Optional[logging.Logger] = None):
        self._filename = filename
        self._log = log or logger

    def run(self, lines: Iterable[str]) -> FirstPassResult:
        """
        Scan source lines once.

        Raises:
            AssemblerError: On the first lexical or syntax error
        """
        lines = tuple(lines)
        symbols = SymbolTable()
        stream: list[Token] = []
        lc = 0

        for line_number, text in enumerate(lines, start=1):
            try:
                tokens = tokenize_line(text, line_number, self._filename)
                if not tokens:
                    continue

                self._log.debug("[%x] %s", lc, " ".join(repr(t) for t in tokens))

                lc, finished = self._scan_statement(tokens, lc, symbols, text)
            except AssemblerError as e:
                raise e.with_context(SourceLocation(self._filename, line_number), text)

            stream.extend(tokens)
            if finished:
                break

        return FirstPassResult(symbols, tuple(stream), lines, self._filename)

    def _scan_statement(
        self,
        tokens: list[Token],
        lc: int,
        symbols: SymbolTable,
        text: str,
    ) -> tuple[int, bool]:
        """
        Define the line's label (if any) and advance the LC past its statement.

        Returns:
            (new LC, True if the line was .END)
        """
        idx = 0
        first = tokens[0]
        if first.type is TokenType.LABEL:
            symbols.define(first.value, lc, first.location, text)
            idx = 1
            if idx >= len(tokens):
                raise AssemblySyntaxError(
                    f"label '{first.value}' is not followed by a statement",
                    first.location,
                    hint="put the label on the same line as an instruction or directive",
                )

        head = tokens[idx]
        operand = tokens[idx + 1] if idx + 1 < len(tokens) else None

        if head.type is TokenType.LABEL:
            raise AssemblySyntaxError(
                f"unexpected second label '{head.value}' on one line",
                head.location,
            )

        if head.type is TokenType.DIR:
            directive = head.value
            if directive is Directive.ORIG:
                return expect(operand, head, TokenType.CONST).value, False
            if directive is Directive.BLKW:
                count = expect(operand, head, TokenType.CONST).value
                return (lc + count) & 0xFFFF, False
            if directive is Directive.STRINGZ:
                text_value = expect(operand, head, TokenType.STR).value
                return (lc + stringz_length(text_value)) & 0xFFFF, False
            if directive is Directive.END:
                return lc, True

        return (lc + 1) & 0xFFFF, False


def first_pass(
    lines: Iterable[str],
    filename: str = "<input>",
    log: Optional[logging.Logger] = None,
) -> FirstPassResult:
    """Convenience wrapper around FirstPass."""
    return FirstPass(filename, log).run(lines)


# =============================================================================
# Pass 2: Code Generation
# =============================================================================

class SecondPass:
    """
    Encodes the token stream into object words.

    Every instruction and directive has a handler that consumes exactly
    its operands from the cursor and returns the encoded words. The
    handler tables are keyed by OpCode/Directive member, one entry per
    member.

    Usage:
        words = SecondPass(result.symbols, result.lines).run(result.tokens)
    """

    def __init__(
        self,
        symbols: SymbolTable,
        lines: Sequence[str] = (),
        log: Optional[logging.Logger] = None,
    ):
        self._symbols = symbols
        self._lines = tuple(lines)
        self._log = log or logger
        self._cursor = TokenCursor(())
        self._lc = 0

        self.op_handlers: dict[OpCode, Callable[[Token], list[int]]] = {
            OpCode.ADD: self._emit_operate,
            OpCode.AND: self._emit_operate,
            OpCode.LDR: self._emit_base_offset,
            OpCode.STR: self._emit_base_offset,
            OpCode.NOT: self._emit_not,
            OpCode.JMP: self._emit_jmp,
            OpCode.RET: lambda token: encode_ret(),
            OpCode.JSR: self._emit_jsr,
            OpCode.JSRR: self._emit_jsrr,
            OpCode.RTI: lambda token: encode_rti(),
            OpCode.RES: lambda token: encode_res(),
            OpCode.TRAP: self._emit_trap,
        }
        self.op_handlers.update(dict.fromkeys(BRANCH_INSTRUCTIONS, self._emit_branch))
        self.op_handlers.update(dict.fromkeys(PC_OFFSET9_INSTRUCTIONS, self._emit_pc_relative))
        self.op_handlers.update(dict.fromkeys(TRAP_VECTORS, self._emit_trap_alias))

        self.directive_handlers: dict[Directive, Callable[[Token], list[int]]] = {
            Directive.ORIG: self._reject_orig,
            Directive.FILL: self._emit_fill,
            Directive.BLKW: self._emit_blkw,
            Directive.STRINGZ: self._emit_stringz,
            Directive.END: lambda token: [],
        }

    @property
    def location_counter(self) -> int:
        return self._lc

    def run(self, tokens: Sequence[Token]) -> list[int]:
        """
        Generate the object word sequence.

        Returns:
            [origin, word, word, ...]

        Raises:
            AssemblerError: On the first error
        """
        self._cursor = TokenCursor(tokens)

        first = self._cursor.next()
        try:
            if first is None or first.type is not TokenType.DIR or first.value is not Directive.ORIG:
                location = first.location if first else None
                raise AssemblySyntaxError(
                    "program must begin with .ORIG",
                    location,
                    hint="start the file with a line like '.ORIG x3000'",
                )
            origin = self._cursor.take_const(first)
        except AssemblerError as e:
            raise self._in_context(e, first)

        self._lc = origin
        words = encode_orig(origin)

        while (token := self._cursor.next()) is not None:
            try:
                if token.type is TokenType.DIR and token.value is Directive.END:
                    break
                emitted = self._statement(token)
            except AssemblerError as e:
                raise self._in_context(e, token)

            words.extend(emitted)
            self._lc = (self._lc + len(emitted)) & 0xFFFF

        return words

    def _in_context(self, error: AssemblerError, token: Optional[Token]) -> AssemblerError:
        if token is None:
            return error
        source_line = None
        if 0 < token.line <= len(self._lines):
            source_line = self._lines[token.line - 1]
        return error.with_context(token.location, source_line)

    def _statement(self, token: Token) -> list[int]:
        """Encode the statement that starts at token."""
        if token.type is TokenType.LABEL:
            self._check_label(token)
            return []

        if token.type is TokenType.OP:
            return self.op_handlers[token.value](token)

        if token.type is TokenType.DIR:
            return self.directive_handlers[token.value](token)

        if token.type is TokenType.INVALID:
            raise InvalidTokenError(f"invalid token {token.value!r}", token.location)

        raise AssemblySyntaxError(
            f"unexpected {_describe(token)}, expected an instruction or directive",
            token.location,
        )

    def _check_label(self, token: Token) -> None:
        """Labels emit nothing; their address must match the current LC."""
        address = self._symbols.resolve(token.value, token.location)
        if address != self._lc:
            raise AssemblerError(
                f"label '{token.value}' was assigned x{address:04X} in the first "
                f"pass but is reached at x{self._lc:04X}",
                token.location,
            )
        self._log.debug("%s = x%04X", token.value, address)

    # =========================================================================
    # Operand Helpers
    # =========================================================================

    def _pc_offset(self, after: Token, bit_count: int) -> int:
        """
        Read a label (or literal offset) operand and return the offset field.

        The offset is relative to the instruction that follows this one.
        """
        operand = self._cursor.take(after, TokenType.LABEL, TokenType.CONST)
        if operand.type is TokenType.CONST:
            offset = operand.value
        else:
            target = self._symbols.resolve(operand.value, operand.location)
            offset = (target - (self._lc + 1)) & 0xFFFF
        return verify_offset(offset, bit_count, operand.location)

    # =========================================================================
    # Instruction Handlers
    # =========================================================================

    def _emit_operate(self, token: Token) -> list[int]:
        """ADD/AND: DR, SR1, then SR2 or imm5."""
        dr = self._cursor.take_reg(token)
        sr1 = self._cursor.take_reg(token)
        last = self._cursor.take(token, TokenType.REG, TokenType.CONST)

        if last.type is TokenType.REG:
            encode = encode_add if token.value is OpCode.ADD else encode_and
            return encode(dr, sr1, last.value)

        imm5 = verify_offset(last.value, 5, last.location)
        encode = encode_add_imm if token.value is OpCode.ADD else encode_and_imm
        return encode(dr, sr1, imm5)

    def _emit_branch(self, token: Token) -> list[int]:
        return encode_br(token.value, self._pc_offset(token, 9))

    def _emit_pc_relative(self, token: Token) -> list[int]:
        """LD, LDI, ST, STI, LEA: register, then label."""
        reg = self._cursor.take_reg(token)
        return encode_pc_relative(token.value, reg, self._pc_offset(token, 9))

    def _emit_base_offset(self, token: Token) -> list[int]:
        """LDR/STR: register, base register, offset6."""
        reg = self._cursor.take_reg(token)
        base = self._cursor.take_reg(token)
        operand = self._cursor.take(token, TokenType.CONST)
        offset6 = verify_offset(operand.value, 6, operand.location)
        return encode_base_offset(token.value, reg, base, offset6)

    def _emit_not(self, token: Token) -> list[int]:
        dr = self._cursor.take_reg(token)
        sr = self._cursor.take_reg(token)
        return encode_not(dr, sr)

    def _emit_jmp(self, token: Token) -> list[int]:
        return encode_jmp(self._cursor.take_reg(token))

    def _emit_jsr(self, token: Token) -> list[int]:
        return encode_jsr(self._pc_offset(token, 11))

    def _emit_jsrr(self, token: Token) -> list[int]:
        return encode_jsrr(self._cursor.take_reg(token))

    def _emit_trap(self, token: Token) -> list[int]:
        operand = self._cursor.take(token, TokenType.CONST)
        return encode_trap(verify_unsigned(operand.value, 8, operand.location))

    def _emit_trap_alias(self, token: Token) -> list[int]:
        return encode_trap(TRAP_VECTORS[token.value])

    # =========================================================================
    # Directive Handlers
    # =========================================================================

    def _reject_orig(self, token: Token) -> list[int]:
        raise AssemblySyntaxError(
            "only one .ORIG is allowed per program",
            token.location,
        )

    def _emit_fill(self, token: Token) -> list[int]:
        """.FILL takes a constant or a label (its address)."""
        operand = self._cursor.take(token, TokenType.CONST, TokenType.LABEL)
        if operand.type is TokenType.LABEL:
            return encode_fill(self._symbols.resolve(operand.value, operand.location))
        return encode_fill(operand.value)

    def _emit_blkw(self, token: Token) -> list[int]:
        return encode_blkw(self._cursor.take_const(token))

    def _emit_stringz(self, token: Token) -> list[int]:
        return encode_stringz(self._cursor.take_str(token))


def second_pass(result: FirstPassResult, log: Optional[logging.Logger] = None) -> list[int]:
    """Convenience wrapper: run the second pass over a first-pass result."""
    return SecondPass(result.symbols, result.lines, log).run(result.tokens)
