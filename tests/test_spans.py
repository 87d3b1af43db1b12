"""
Span scanner tests

Tests balanced segment scanning and quoted token matching.
"""

import pytest

from texguard.lib.spans import segment_scan, quote_findClosing, Unescape


class TestSegmentScan:
    """Test stopping at reject characters outside nesting"""

    def test_stop_outside_parens(self):
        """Reject characters inside parens are skipped"""
        scan = segment_scan("abc(---)def+++", "+-")
        assert scan.segment == "abc(---)def"
        assert scan.stop == 11

    def test_first_stop_wins(self):
        """Scan stops at the first top-level reject character"""
        scan = segment_scan("a?(b?c):d", "?")
        assert scan == ("a", 1)

    def test_no_stop_returns_length(self):
        """Without a stop the whole text is the segment"""
        scan = segment_scan("abc", "+")
        assert scan.segment == "abc"
        assert scan.stop == 3

    def test_segment_is_trimmed(self):
        """Whitespace around the segment is removed"""
        scan = segment_scan("  ab  +c", "+")
        assert scan.segment == "ab"
        assert scan.stop == 6

    def test_start_offset(self):
        """Scanning can begin at an offset"""
        scan = segment_scan("a+b+c", "+", 2)
        assert scan == ("b", 3)

    def test_empty_text(self):
        """Empty or None text yields an empty segment at 0"""
        assert segment_scan("", "+") == ("", 0)
        assert segment_scan(None, "+") == ("", 0)

    def test_escaped_paren_ignored(self):
        """A backslash-escaped paren does not change depth"""
        scan = segment_scan(r"a\(b+c", "+")
        assert scan.segment == r"a\(b"
        assert scan.stop == 4


class TestMatchingCloser:
    """Test the empty reject set, used for brace matching"""

    def test_matching_brace(self):
        """Stops at the closer matching the leading opener"""
        scan = segment_scan("{x{y}z} tail", "")
        assert scan.segment == "{x{y}z}"
        assert scan.stop == 6

    def test_unterminated(self):
        """No matching closer runs off the end"""
        scan = segment_scan("{x{y}z", "")
        assert scan.stop == 6

    def test_mixed_brackets(self):
        """Any closer pops any opener"""
        scan = segment_scan("[a(b]c) d", "")
        assert scan.stop == 6


class TestQuoteSpanning:
    """Test reject sets that contain a quote character"""

    def test_quoted_stop_skipped(self):
        """A quote in reject makes quoted substrings opaque"""
        scan = segment_scan("'a+b'+c", "+'")
        assert scan.segment == "'a+b'"
        assert scan.stop == 5

    def test_quotes_not_spanned_by_default(self):
        """Without a quote in reject, quotes are ordinary characters"""
        scan = segment_scan("'a+b'+c", "+")
        assert scan.stop == 2


class TestQuoteFindClosing:
    """Test quoted token matching"""

    def test_single_quoted(self):
        """Closing quote index and the token with its quotes"""
        assert quote_findClosing("'abc' tail") == (4, "'abc'")

    def test_leading_whitespace_skipped(self):
        """Whitespace before the opening quote is skipped"""
        span = quote_findClosing('  "ab" x')
        assert span.end == 5
        assert span.token == '"ab"'

    def test_not_quoted(self):
        """Text that does not start with a quote returns the start index"""
        assert quote_findClosing("abc") == (0, "")

    def test_unterminated(self):
        """An unterminated token runs to the end"""
        span = quote_findClosing('"abc')
        assert span.end == 4
        assert span.token == '"abc'

    def test_escaped_quote_kept(self):
        """An escaped quote does not close the token"""
        span = quote_findClosing(r'"a\"b" x')
        assert span.end == 5
        assert span.token == r'"a\"b"'

    def test_escaped_quote_unescaped(self):
        """Unescape.SAME rewrites escaped quotes of the token's kind"""
        span = quote_findClosing(r'"a\"b" x', unescape=Unescape.SAME)
        assert span.end == 5
        assert span.token == '"a"b"'

    def test_other_quote_kept_with_same(self):
        """Unescape.SAME keeps escapes of the other quote kind"""
        span = quote_findClosing(r'"a\'b"', unescape=Unescape.SAME)
        assert span.token == r'"a\'b"'

    def test_other_quote_unescaped_with_both(self):
        """Unescape.BOTH rewrites escapes of both quote kinds"""
        span = quote_findClosing(r'"a\'b"', unescape=Unescape.BOTH)
        assert span.token == '"a\'b"'
