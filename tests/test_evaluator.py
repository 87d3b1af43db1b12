"""
\\eval{} evaluator tests

Tests ternaries, operators without precedence, literals, variables and
the recursion limit.
"""

import pytest

from texguard.lib.evaluator import evaluate, SymbolTable, NOVALUE, MAX_SYMBOLS
from texguard.models import ParseContext


class TestTernary:
    """Test index ? branch : branch selection"""

    @pytest.mark.parametrize("term, expected", [
        ("1?10:20:30", 10),
        ("2?10:20:30", 20),
        ("3?10:20:30", 30),
        ("5?10:20:30", 30),
        ("0?10:20:30", 10),
        ("-4?10:20", 10),
    ])
    def test_branch_index_clamped(self, term, expected):
        """Branches are numbered from 1 and the index is clamped"""
        assert evaluate({}, term) == expected

    def test_computed_index(self):
        """The index is itself an expression"""
        assert evaluate({"fs": 2}, "fs?1:2:3") == 2

    def test_empty_branch(self):
        """An empty branch evaluates to 0"""
        assert evaluate({}, "1?:5") == 0

    def test_nested_ternary_in_parens(self):
        """A parenthesized ternary inside a branch"""
        assert evaluate({}, "2?1:(1?7:8)") == 7


class TestOperators:
    """Test binary operators split at the first one"""

    @pytest.mark.parametrize("term, expected", [
        ("2+3", 5),
        ("2+3*4", 14),
        ("2*3+4", 14),
        ("10-2-3", 11),
        ("(2*3)+4", 10),
        ("(1+2)*3", 9),
        ("7/2", 3),
        ("-7/2", -3),
        ("7%3", 1),
        ("+3", 3),
    ])
    def test_arithmetic(self, term, expected):
        """Right side is evaluated recursively, no precedence"""
        assert evaluate({}, term) == expected

    def test_division_by_zero(self):
        """Division and modulo by zero give 0"""
        assert evaluate({}, "4/0") == 0
        assert evaluate({}, "4%0") == 0


class TestOperands:
    """Test literals, variables and calls"""

    def test_literal_with_whitespace(self):
        """Surrounding whitespace is ignored"""
        assert evaluate({}, "  42 ") == 42

    def test_variable(self):
        """Identifiers are looked up in the store"""
        assert evaluate({"fs": 4}, "(fs+1)*2") == 10

    def test_missing_variable(self):
        """Unknown identifiers are 0"""
        assert evaluate({}, "nope+1") == 1

    def test_function_call(self):
        """Function calls are recognized and give 0"""
        assert evaluate({}, "max(1,2)") == 0

    def test_empty_and_none(self):
        """Empty term or missing store gives 0"""
        assert evaluate({}, "") == 0
        assert evaluate({}, None) == 0
        assert evaluate(None, "1+1") == 0


class TestRecursionLimit:
    """Test the recursion cap"""

    def test_exceeded(self):
        """Too deep an expression gives NOVALUE"""
        assert evaluate({}, "1+1", limit=1) == NOVALUE

    def test_propagates(self):
        """NOVALUE is not folded into arithmetic"""
        assert evaluate({}, "1+(((((2)))))", limit=4) == NOVALUE

    def test_within_limit(self):
        """The same term evaluates under a larger limit"""
        assert evaluate({}, "1+(((((2)))))", limit=20) == 3


class TestSymbolTable:
    """Test live symbol bindings"""

    def test_context_bindings(self):
        """fontsize and fs read the context's font size"""
        context = ParseContext(fontsize=6)
        table = SymbolTable.context_make(context)
        assert table["fs"] == 6
        assert table["fontsize"] == 6
        assert len(table) == 2

    def test_live_values(self):
        """Lookups see later changes"""
        context = ParseContext(fontsize=6)
        table = SymbolTable.context_make(context)
        context.fontsize = 2
        assert evaluate(table, "fs*10") == 20

    def test_identifier_whitespace(self):
        """Identifiers are compared trimmed"""
        context = ParseContext()
        table = SymbolTable([(" size ", context, "fontsize")])
        assert table["size"] == 4

    def test_capacity(self):
        """The table holds a bounded number of identifiers"""
        context = ParseContext()
        table = SymbolTable()
        for index in range(MAX_SYMBOLS):
            table.bind(f"v{index}", context, "fontsize")
        table.bind("v0", context, "fontsize")
        with pytest.raises(ValueError):
            table.bind("extra", context, "fontsize")
