"""
Symbol Table
============

Maps label names to 16-bit addresses. The first pass fills the table;
the second pass only reads it.

Labels are case-sensitive: 'Loop' and 'LOOP' are different symbols.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from lc3asm.errors import DuplicateLabelError, MissingLabelError, SourceLocation


# =============================================================================
# Symbol Table Entry
# =============================================================================

@dataclass(frozen=True)
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Label text as written in the source
        address: Address assigned by the first pass
        location: Where the label was defined
    """
    name: str
    address: int
    location: SourceLocation


# =============================================================================
# Symbol Table
# =============================================================================

class SymbolTable:
    """
    Label -> address mapping for one assembly run.

    Usage:
        table = SymbolTable()
        table.define("LOOP", 0x3002, location)
        table.resolve("LOOP")      # 0x3002
        table.sorted_by_address()  # [Symbol('LOOP', 0x3002, ...)]
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def define(
        self,
        name: str,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Record a label at an address.

        Raises:
            DuplicateLabelError: If the label is already defined
        """
        location = location or SourceLocation("<input>", 0)
        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateLabelError(
                name,
                location=location,
                original_location=existing.location,
                source_line=source_line,
            )

        symbol = Symbol(name, address & 0xFFFF, location)
        self._symbols[name] = symbol
        return symbol

    def get(self, name: str) -> Optional[int]:
        """Return the address of a label, or None if undefined."""
        symbol = self._symbols.get(name)
        return symbol.address if symbol else None

    def resolve(
        self,
        name: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ) -> int:
        """
        Return the address of a label.

        Raises:
            MissingLabelError: If the label is undefined. Similar names are
                               suggested in the error hint.
        """
        symbol = self._symbols.get(name)
        if symbol is None:
            raise MissingLabelError(
                name,
                location=location,
                source_line=source_line,
                similar_labels=self.find_similar(name),
            )
        return symbol.address

    def as_dict(self) -> dict[str, int]:
        """Return a plain name -> address mapping."""
        return {name: sym.address for name, sym in self._symbols.items()}

    def sorted_by_address(self) -> list[Symbol]:
        """Symbols in ascending address order; ties keep definition order."""
        return sorted(self._symbols.values(), key=lambda sym: sym.address)

    def find_similar(self, name: str, limit: int = 3) -> list[str]:
        """
        Suggest defined labels that look like a misspelling of name.

        Comparison ignores case. A label qualifies when its length is
        within one of name's and at most two single-character edits turn
        one into the other. Closest labels come first.
        """
        wanted = name.lower()
        ranked = []
        for label in self._symbols:
            if abs(len(label) - len(wanted)) > 1:
                continue
            distance = self._typo_distance(wanted, label.lower())
            if distance <= 2:
                ranked.append((distance, label))

        ranked.sort(key=lambda pair: pair[0])
        return [label for _, label in ranked[:limit]]

    @staticmethod
    def _typo_distance(a: str, b: str) -> int:
        """Insertions, deletions and substitutions needed to turn a into b."""
        previous = list(range(len(b) + 1))
        for row, char_a in enumerate(a, start=1):
            current = [row]
            for col, char_b in enumerate(b, start=1):
                substitute = previous[col - 1] + (char_a != char_b)
                current.append(min(previous[col] + 1, current[col - 1] + 1, substitute))
            previous = current
        return previous[-1]
