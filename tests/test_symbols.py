# =============================================================================
# test_symbols.py - Symbol Table Unit Tests
# =============================================================================
# Tests for label definition, lookup, ordering and "did you mean" hints.
# =============================================================================

import pytest
from lc3asm.assembler.symbols import SymbolTable
from lc3asm.errors import DuplicateLabelError, MissingLabelError


def table_with(*names: str) -> SymbolTable:
    table = SymbolTable()
    for address, name in enumerate(names, start=0x3000):
        table.define(name, address)
    return table


# =============================================================================
# Definition and Lookup Tests
# =============================================================================

class TestDefineResolve:
    """Test defining and resolving labels."""

    def test_resolve(self):
        assert table_with("LOOP").resolve("LOOP") == 0x3000

    def test_case_sensitive(self):
        table = table_with("Loop")
        assert "Loop" in table
        assert "LOOP" not in table

    def test_get_missing(self):
        assert SymbolTable().get("NOPE") is None

    def test_duplicate(self):
        table = table_with("LOOP")
        with pytest.raises(DuplicateLabelError):
            table.define("LOOP", 0x4000)

    def test_missing(self):
        with pytest.raises(MissingLabelError) as exc_info:
            table_with("LOOP").resolve("LOPP")
        assert exc_info.value.similar_labels == ["LOOP"]

    def test_sorted_by_address(self):
        table = SymbolTable()
        table.define("LATE", 0x3005)
        table.define("EARLY", 0x3001)
        assert [sym.name for sym in table.sorted_by_address()] == ["EARLY", "LATE"]


# =============================================================================
# Suggestion Tests
# =============================================================================

class TestFindSimilar:
    """Test misspelling suggestions for undefined labels."""

    def test_case_difference(self):
        assert table_with("Done").find_similar("DONE") == ["Done"]

    def test_one_substitution(self):
        assert table_with("LOOP").find_similar("LOPP") == ["LOOP"]

    def test_one_insertion(self):
        assert table_with("COUNT").find_similar("COUNTS") == ["COUNT"]

    def test_too_different(self):
        assert table_with("START").find_similar("FINISH") == []

    def test_length_gap_too_large(self):
        assert table_with("AB").find_similar("ABCD") == []

    def test_closest_first(self):
        table = table_with("LOOT", "LOOP")
        assert table.find_similar("LOOP2") == ["LOOP", "LOOT"]

    def test_limit(self):
        table = table_with("A1", "A2", "A3", "A4")
        assert len(table.find_similar("A0")) == 3
        assert table.find_similar("A0", limit=1) == ["A1"]
