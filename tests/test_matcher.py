"""
Template matcher tests

Tests elastic-whitespace matching as used for HTML tag recognition.
"""

import pytest

from texguard.lib.matcher import template_find, whitespace_parse, DEFAULT_WHITESPACE


class TestWhitespaceParse:
    """Test splitting the whitespace argument"""

    def test_default(self):
        """No argument selects the default set, case-sensitive"""
        assert whitespace_parse(None) == (DEFAULT_WHITESPACE, True)

    def test_case_flag_only(self):
        """A lone i flag keeps the default set and ignores case"""
        assert whitespace_parse("i") == (DEFAULT_WHITESPACE, False)

    def test_custom_set(self):
        """Custom whitespace characters with the flag removed"""
        assert whitespace_parse(" _I") == (" _", False)


class TestTemplateFind:
    """Test flexible template matching"""

    def test_leading_template_whitespace(self):
        """Template whitespace at the search start counts as satisfied"""
        match = template_find("c   d", "  c d")
        assert match == (0, 5)

    def test_missing_whitespace_allowed(self):
        """A single template blank also matches no blank at all"""
        match = template_find("abcdef", "c d")
        assert match.start == 2
        assert match.length == 2
        assert match.end == 4

    def test_case_insensitive_tag(self):
        """The i flag matches tags regardless of case"""
        match = template_find("x <BR/> y", "< br / >", white="i")
        assert match == (2, 5)

    def test_case_sensitive_mismatch(self):
        """Without the i flag the case must match"""
        assert template_find("x <BR/> y", "< br / >") is None

    def test_extra_whitespace_inside_match(self):
        """Whitespace where the template has none is a mismatch"""
        assert template_find("a b", "ab") is None

    def test_spaced_tag(self):
        """Generously spaced tags still match"""
        match = template_find("a < br > b", "< br >")
        assert match == (2, 6)

    def test_not_found(self):
        """No occurrence returns None"""
        assert template_find("abc", "xyz") is None

    def test_empty_inputs(self):
        """Empty text or missing template returns None"""
        assert template_find("", "a") is None
        assert template_find("abc", None) is None

    def test_start_offset(self):
        """Searching begins at the given start index"""
        match = template_find("ab ab", "ab", start=1)
        assert match.start == 3
