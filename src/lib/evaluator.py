"""
\\eval{} expression evaluator

A tiny recursive evaluator over integer expressions, working directly on
substrings found with the balanced span scanner (no tokenizer, no tree):

    index ? branch1 : branch2 : ...     pick a branch (1-based, clamped)
    a + b, a - b, a * b, a / b, a % b   split at the FIRST top-level operator
    ( expr )                            grouping
    name(args)                          recognized, evaluates to 0
    -12, +3, 42                         integer literal
    fontsize                            variable looked up in the store

There is no operator precedence: the term is split at the first operator
outside parens and the right-hand side is evaluated recursively, so
"2*3+4" is 2*(3+4) = 14 and "10-2-3" is 10-(2-3) = 11. Use parens to
group explicitly.

Division and modulo truncate toward zero; by zero they yield 0. Nesting
deeper than the recursion limit yields NOVALUE, which propagates up.

Example:
    >>> evaluate({}, "1?10:20:30")
    10
    >>> evaluate({"fs": 4}, "(fs+1)*2")
    10
"""

import re
from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..config.settings import appsettings
from .spans import segment_scan, WHITESPACE
from .log import LOG

NOVALUE = -89123456
MAX_SYMBOLS = 100

NUMERIC_RE = re.compile(r"^\s*[+-]?\d*\s*$")


class SymbolTable(Mapping):
    """
    Read-only identifier -> int mapping over live attribute references

    Each entry names an (owner, attribute) pair, and lookups read the
    attribute at lookup time, so the table always reflects the current
    value. Identifiers are compared with surrounding whitespace removed.

    Example:
        >>> context = ParseContext(fontsize=6)
        >>> table = SymbolTable.context_make(context)
        >>> table["fs"]
        6
    """

    def __init__(self, entries: Optional[List[Tuple[str, Any, str]]] = None) -> None:
        self._entries: Dict[str, Tuple[Any, str]] = {}
        for identifier, owner, attribute in entries or []:
            self.bind(identifier, owner, attribute)

    def bind(self, identifier: str, owner: Any, attribute: str) -> None:
        """Add an entry; raises ValueError when the table is full"""
        identifier = identifier.strip()
        if identifier not in self._entries and len(self._entries) >= MAX_SYMBOLS:
            raise ValueError(f"Symbol table is limited to {MAX_SYMBOLS} entries")
        self._entries[identifier] = (owner, attribute)

    @classmethod
    def context_make(cls, context: Any) -> "SymbolTable":
        """Table exposing the parse context's font size as fontsize and fs"""
        return cls([("fontsize", context, "fontsize"), ("fs", context, "fontsize")])

    def __getitem__(self, identifier: str) -> int:
        owner, attribute = self._entries[identifier.strip()]
        return int(getattr(owner, attribute))

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


def _divide(left: int, right: int) -> int:
    """Integer division truncating toward zero"""
    quotient = abs(left) // abs(right)
    return quotient if (left < 0) == (right < 0) else -quotient


def _arithmetic_apply(op: str, left: int, right: int) -> int:
    if op == '+':
        return left + right
    if op == '-':
        return left - right
    if op == '*':
        return left * right
    if right == 0:
        return 0
    if op == '/':
        return _divide(left, right)
    return left - right * _divide(left, right)


def _branches_split(text: str) -> List[str]:
    """Split branch1:branch2:... at top-level colons"""
    branches: List[str] = []
    pos = 0
    while pos < len(text):
        scan = segment_scan(text, ":", pos)
        branches.append(scan.segment)
        pos = scan.stop + 1
    return branches


def _term_evaluate(store: Optional[Mapping], term: Optional[str], depth: int, limit: int) -> int:
    depth += 1
    if depth > limit:
        LOG(f"\\eval recursion deeper than {limit}", level=2)
        return NOVALUE
    if store is None or not term:
        return 0
    term = term.lstrip(WHITESPACE)
    if not term:
        return 0

    # index ? branch : branch : ...
    scan = segment_scan(term, "?")
    if scan.stop < len(term):
        index = 0
        if scan.segment:
            index = _term_evaluate(store, scan.segment, depth, limit)
            if index == NOVALUE:
                return NOVALUE
        branches = _branches_split(term[scan.stop + 1:])
        if not branches:
            return 0
        branch = branches[min(max(index, 1), len(branches)) - 1]
        return _term_evaluate(store, branch, depth, limit)

    # left op right
    scan = segment_scan(term, "/+-*%")
    if scan.stop < len(term):
        left = 0
        if scan.segment:
            left = _term_evaluate(store, scan.segment, depth, limit)
            if left == NOVALUE:
                return NOVALUE
        right = _term_evaluate(store, term[scan.stop + 1:], depth, limit)
        if right == NOVALUE:
            return NOVALUE
        return _arithmetic_apply(term[scan.stop], left, right)

    token = scan.segment
    if '(' in token:
        if token.endswith(')'):
            token = token[:-1]
        if token.startswith('('):
            return _term_evaluate(store, token[1:].strip(), depth, limit)
        LOG(f"\\eval function call {token}) not supported, using 0", level=2)
        return 0

    if not token:
        return 0
    if NUMERIC_RE.match(token):
        digits = token.strip()
        return int(digits) if digits.lstrip("+-") else 0
    return int(store.get(token.strip(), 0))


def evaluate(store: Optional[Mapping], term: Optional[str], limit: Optional[int] = None) -> int:
    """
    Evaluate an \\eval{} term.

    Args:
        store: Mapping of identifier -> int (a SymbolTable or a plain dict)
        term: Expression text
        limit: Recursion limit, defaults to the configured one

    Returns:
        Integer value, or NOVALUE if the recursion limit was exceeded
    """
    return _term_evaluate(store, term, 0, limit if limit is not None else appsettings.recursion_limit)
