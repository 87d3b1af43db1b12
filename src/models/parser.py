"""
Parser-specific data models

Type-safe structures for scanner and extractor return values.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, NamedTuple


class SegmentScan(NamedTuple):
    """
    Result of a balanced span scan

    Attributes:
        segment: Text scanned before the stop, trimmed of whitespace
        stop: Index of the stopping character (len(text) if none)

    Example:
        segment_scan("abc(---)def+++", "+-")
        SegmentScan(segment="abc(---)def", stop=11)
    """
    segment: str
    stop: int


class QuoteSpan(NamedTuple):
    """
    Result of a quote span scan

    Attributes:
        end: Index of the closing quote, len(text) if unterminated,
             or the start index if the text is not quoted
        token: The quoted token including its outer quotes ("" if not quoted)
    """
    end: int
    token: str


class TemplateMatch(NamedTuple):
    """
    Result of a flexible template match

    Attributes:
        start: Index of the first matched character
        length: Number of characters matched, embedded whitespace included
    """
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length


class ExtractStatus(Enum):
    """Outcome of one directive extraction"""
    FOUND = "found"
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"


@dataclass
class ArgumentSet:
    """
    Arguments captured by one directive extraction

    Filled in by Parser.directive_extract(). On a malformed match the
    arguments read before the failure stay here, and start/end describe
    the partial span that was not removed.

    Attributes:
        values: Required {args}, in order
        optional: Captured optional [args] (bounded, see noptional)
        noptional: Number of [args] seen, which may exceed len(optional)
        status: Outcome of the extraction
        start: Index of the directive name in the text
        end: Index just past the last consumed argument

    Example:
        For "\\newcommand{\\x}[1]{y}" extracted with nargs=2, optional_pos=1:
        ArgumentSet(values=["\\x", "y"], optional=["1"], noptional=1, ...)
    """
    values: List[str] = field(default_factory=list)
    optional: List[str] = field(default_factory=list)
    noptional: int = 0
    status: ExtractStatus = ExtractStatus.NOT_FOUND
    start: int = -1
    end: int = -1

    def reset(self) -> None:
        """Clear everything captured by a previous extraction"""
        self.values.clear()
        self.optional.clear()
        self.noptional = 0
        self.status = ExtractStatus.NOT_FOUND
        self.start = -1
        self.end = -1

    def arg(self, index: int) -> str:
        """Required argument at index, "" when absent"""
        if 0 <= index < len(self.values):
            return self.values[index]
        return ""

    def arg_store(self, index: int, value: str) -> None:
        while len(self.values) <= index:
            self.values.append("")
        self.values[index] = value

    @property
    def first(self) -> str:
        return self.arg(0)
