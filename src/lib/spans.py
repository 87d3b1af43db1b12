"""
Balanced and quoted span scanners

Two small scanners shared by the directive extractor and the \\eval{}
evaluator:

- segment_scan() finds the first "reject" character that lies outside all
  (), [], {} nesting (and optionally outside quoted substrings).
- quote_findClosing() finds the closing quote of a "..." or '...' token.

Both operate on immutable str slices and return indices into the text
they were given, never mutating anything.

Example:
    >>> segment_scan("abc(---)def+++", "+-")
    SegmentScan(segment='abc(---)def', stop=11)
    >>> quote_findClosing("'abc' tail")
    QuoteSpan(end=4, token="'abc'")
"""

from enum import IntEnum
from typing import Optional

from ..models.parser import SegmentScan, QuoteSpan

OPENERS = "([{"
CLOSERS = ")]}"
QUOTES = "\"'"
WHITESPACE = " \t\n\r\f\v"


class Unescape(IntEnum):
    """Which escaped quotes quote_findClosing() turns into plain quotes"""
    NONE = 0   # copy the token verbatim
    SAME = 1   # \" in a "token", \' in a 'token'
    BOTH = 2   # both \" and \'


def quote_findClosing(s: str, start: int = 0, unescape: Unescape = Unescape.NONE) -> QuoteSpan:
    r"""
    Find the matching closing quote of a quoted token.

    Leading whitespace is skipped. Backslash escapes are resolved one
    character at a time, so a backslash run keeps the escape active:
    in "a\\"b" the quote after the two backslashes does not close the
    token.

    Args:
        s: Text to scan
        start: Index to start scanning from
        unescape: Which escaped quotes to rewrite in the returned token

    Returns:
        QuoteSpan(end, token). end is the index of the closing quote,
        len(s) when the token is unterminated, or start when the text
        does not begin with a quote. token includes the outer quotes.
    """
    pos = start
    length = len(s)
    while pos < length and s[pos] in WHITESPACE:
        pos += 1
    if pos >= length or s[pos] not in QUOTES:
        return QuoteSpan(start, "")

    quote = s[pos]
    token = [quote]
    escaped = False

    for pos in range(pos + 1, length):
        ch = s[pos]
        if escaped:
            if ch != '\\':
                escaped = False
            keep_backslash = (
                unescape == Unescape.NONE
                or (unescape == Unescape.SAME and ch != quote)
                or (unescape == Unescape.BOTH and ch not in QUOTES)
            )
            if keep_backslash:
                token.append('\\')
            if not escaped:
                token.append(ch)
            continue
        if ch == '\\':
            escaped = True
            continue
        if ch == quote:
            token.append(quote)
            return QuoteSpan(pos, ''.join(token))
        token.append(ch)

    return QuoteSpan(length, ''.join(token))


def segment_scan(s: Optional[str], reject: Optional[str], start: int = 0) -> SegmentScan:
    """
    Find the first reject character outside all paren nesting.

    Paren depth goes up on ( [ { and down on ) ] }. A paren preceded by an
    unescaped backslash is ignored. Improper nesting such as (..[..)..] is
    not validated: any closer pops any opener.

    A " or ' in reject is not itself a stop character. Its presence turns
    on quote spanning instead, so reject characters inside a quoted
    substring are skipped over.

    With an empty reject set the scan stops at the first closer that brings
    the depth below one, i.e. the match of a leading opener, and that
    closer is included in the segment.

    Args:
        s: Text to scan
        reject: Stop characters
        start: Index to start scanning from

    Returns:
        SegmentScan(segment, stop). segment is everything scanned before
        the stop, trimmed of whitespace. stop is the index of the stopping
        character, or len(s) if no stop condition was met.

    Example:
        >>> segment_scan("a?(b?c):d", "?")
        SegmentScan(segment='a', stop=1)
        >>> segment_scan("{x{y}z} tail", "")
        SegmentScan(segment='{x{y}z}', stop=6)
    """
    if not s:
        return SegmentScan("", 0)

    reject = reject or ""
    span_quotes = any(ch in QUOTES for ch in reject)
    stops = ''.join(ch for ch in reject if ch not in QUOTES)

    length = len(s)
    pos = start
    depth = 0
    escaped = False

    while pos < length:
        ch = s[pos]
        span = 1
        if not escaped:
            if ch in OPENERS:
                depth += 1
            elif ch in CLOSERS:
                depth -= 1
        if depth < 1:
            if span_quotes and ch in QUOTES and not escaped:
                closing = quote_findClosing(s, pos)
                if closing.end != pos and closing.end < length and s[closing.end] == ch:
                    span = closing.end - pos + 1
            if stops:
                if ch in stops:
                    break
            elif ch in CLOSERS and not escaped:
                return SegmentScan(s[start:pos + 1].strip(), pos)
        escaped = ch == '\\' and not escaped
        pos += span

    return SegmentScan(s[start:pos].strip(), min(pos, length))
