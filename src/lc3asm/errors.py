"""
LC-3 Assembler Error Hierarchy
==============================

This module defines the exception hierarchy for the assembler. All
exceptions inherit from Lc3Error, allowing callers to catch every
assembler failure with a single except clause.

Exception Hierarchy
-------------------
Lc3Error (base)
└── AssemblerError
    ├── AssemblerIOError - source or artifact could not be read/written
    ├── ParseConstantError - numeric literal does not parse
    ├── ParseOpCodeError - unknown instruction mnemonic
    ├── ParseRegisterError - unknown register name
    ├── ParseDirectiveError - unknown directive name
    ├── InvalidTokenError - malformed token reached the generator
    ├── UnexpectedEofError - token stream ended mid-statement
    ├── MissingLabelError - operand references an undefined label
    ├── AssemblySyntaxError - grammar violation
    │   └── DuplicateLabelError - label defined twice
    └── OffsetRangeError - immediate/offset does not fit its field

Every class also carries a flat ``kind`` (an ErrorKind member), so callers
that only care about the category can switch on it:

    try:
        asm.assemble_file("prog.asm")
    except AssemblerError as e:
        if e.kind is ErrorKind.MISSING_LABEL_ERROR:
            ...

Error messages follow this format:
    filename:line: error: description
        source_line_text
    hint: suggestion for fixing (when available)

All errors are fatal: the first one raised aborts the run.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(Enum):
    """Flat classification of every assembler failure."""

    IO_ERROR = "io error"
    PARSE_CONSTANT_ERROR = "parse constant error"
    PARSE_OPCODE_ERROR = "parse op code error"
    PARSE_REGISTER_ERROR = "parse register error"
    PARSE_DIRECTIVE_ERROR = "parse directive error"
    INVALID_TOKEN_ERROR = "encountered invalid token while parsing"
    UNEXPECTED_EOF = "unexpectedly reached EOF"
    MISSING_LABEL_ERROR = "missing label"
    SYNTAX_ERROR = "invalid syntax"
    RANGE_ERROR = "invalid value"

    def __str__(self) -> str:
        return self.value


# =============================================================================
# Base Exception Class
# =============================================================================

class Lc3Error(Exception):
    """
    Base exception for all lc3asm errors.

        try:
            assembler.assemble_file("program.asm")
        except Lc3Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in a source file, used for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed, 0 when unknown)
        column: Column number (1-indexed, 0 when unknown)
    """
    filename: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        """Format as 'filename:line' or 'filename:line:column'."""
        if self.column > 0:
            return f"{self.filename}:{self.line}:{self.column}"
        return f"{self.filename}:{self.line}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Lc3Error):
    """
    Base exception for all assembler errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    kind: ErrorKind = ErrorKind.SYNTAX_ERROR

    def __init__(
        self,
        message: Optional[str] = None,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message if message is not None else str(self.kind)
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            loop.asm:7: error: undefined label 'LOPP'
                BRnzp LOPP
            hint: did you mean 'LOOP'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None:
            parts.append(f"    {self.source_line.strip()}")
            if self.location is not None and self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def with_context(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> "AssemblerError":
        """
        Attach location and source text if the error does not have them yet.

        Errors raised deep inside the lexer know nothing about the file
        being assembled; the pass that catches them fills the gaps before
        re-raising. Returns self so it can be used in a raise statement.
        """
        if self.location is None and location is not None:
            self.location = location
        if self.source_line is None and source_line is not None:
            self.source_line = source_line
        self.args = (self._format_message(),)
        return self


class AssemblerIOError(AssemblerError):
    """
    Reading the source or writing an output artifact failed.

    Wraps the underlying OSError, which stays available as __cause__.
    """

    kind = ErrorKind.IO_ERROR


class ParseConstantError(AssemblerError):
    """
    A numeric literal could not be parsed.

    Examples:
        - #bad (not decimal)
        - xG1 (not hexadecimal)
        - b102 (not binary)
        - #99999999999 (does not fit before truncation to 16 bits)
    """

    kind = ErrorKind.PARSE_CONSTANT_ERROR


class ParseOpCodeError(AssemblerError):
    """Name is not an instruction mnemonic."""

    kind = ErrorKind.PARSE_OPCODE_ERROR


class ParseRegisterError(AssemblerError):
    """Name is not one of R0..R7."""

    kind = ErrorKind.PARSE_REGISTER_ERROR


class ParseDirectiveError(AssemblerError):
    """Name is not one of .ORIG, .END, .FILL, .BLKW, .STRINGZ."""

    kind = ErrorKind.PARSE_DIRECTIVE_ERROR


class InvalidTokenError(AssemblerError):
    """
    A structurally invalid token reached the generator.

    The lexer produces Invalid tokens for empty operand fields
    ("ADD R0,,R1") and unterminated string literals.
    """

    kind = ErrorKind.INVALID_TOKEN_ERROR


class UnexpectedEofError(AssemblerError):
    """The token stream ended while an instruction still needed operands."""

    kind = ErrorKind.UNEXPECTED_EOF


class MissingLabelError(AssemblerError):
    """
    Reference to a label that was never defined.

    Raised during the second pass. Similarly-named labels are offered as a
    hint, which catches most typos.
    """

    kind = ErrorKind.MISSING_LABEL_ERROR

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        if not hint and self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class AssemblySyntaxError(AssemblerError):
    """
    Grammar violation in assembly source.

    Examples:
        - A label on a line by itself
        - An orphan constant, register or string where a statement belongs
        - Wrong operand kind (a string where a register is expected)
        - A second .ORIG
        - A program that does not start with .ORIG
    """

    kind = ErrorKind.SYNTAX_ERROR


class DuplicateLabelError(AssemblySyntaxError):
    """
    Label defined more than once.

    Includes the location of the original definition when known.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first defined at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class OffsetRangeError(AssemblerError):
    """
    An immediate or PC-relative offset does not fit its bit field.

    Field widths:
        - imm5 (ADD/AND): -16 to +15
        - offset6 (LDR/STR): -32 to +31
        - pcoffset9 (BR, LD, LDI, ST, STI, LEA): -256 to +255
        - pcoffset11 (JSR): -1024 to +1023
        - trapvect8 (TRAP): 0 to 255 (unsigned)
    """

    kind = ErrorKind.RANGE_ERROR

    def __init__(
        self,
        value: int,
        bit_count: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        signed: bool = True,
    ):
        self.value = value
        self.bit_count = bit_count

        if signed:
            low, high = -(1 << (bit_count - 1)), (1 << (bit_count - 1)) - 1
        else:
            low, high = 0, (1 << bit_count) - 1
        hint = f"a {bit_count}-bit field holds {low} to {high}"

        super().__init__(
            f"value {value} does not fit in {bit_count} bits",
            location=location,
            hint=hint,
            source_line=source_line,
        )
