"""
Document text tests

Tests the splice primitives and the mutable DocumentText buffer.
"""

import pytest

from texguard.lib.document import (
    DocumentText,
    char_isLetter,
    string_change,
    string_replace,
    text_find,
)


class TestStringChange:
    """Test splicing at a position"""

    def test_replace_middle(self):
        """Replace one character with three"""
        assert string_change("12345678", 3, 1, "ABC") == "123ABC5678"

    def test_delete(self):
        """None or empty replacement deletes"""
        assert string_change("abcdef", 1, 2, None) == "adef"
        assert string_change("abcdef", 1, 2, "") == "adef"

    def test_insert(self):
        """Zero-length change inserts"""
        assert string_change("ad", 1, 0, "bc") == "abcd"


class TestStringReplace:
    """Test replace-all with directive prefix protection"""

    def test_directive_prefix_skipped(self):
        """A directive followed by a letter is a longer directive"""
        assert string_replace(r"\cache\cachedir\cache", r"\cache", "") == (r"\cachedir", 2)

    def test_case_insensitive(self):
        """Case-insensitive replacement"""
        assert string_replace("A a", "a", "b", case_sensitive=False) == ("b b", 2)

    def test_case_sensitive(self):
        """Case-sensitive replacement leaves other cases alone"""
        assert string_replace("A a", "a", "b") == ("A b", 1)

    def test_max_count(self):
        """At most max_count replacements"""
        assert string_replace("aaa", "a", "b", max_count=2) == ("bba", 2)

    def test_replacement_not_rescanned(self):
        """Inserted text is never matched again"""
        assert string_replace("aa", "a", "aa") == ("aaaa", 2)

    def test_no_match(self):
        """No occurrence leaves the string and counts zero"""
        assert string_replace("abc", "x", "y") == ("abc", 0)

    def test_invalid_calls(self):
        """None string, or empty old with no count, is invalid"""
        assert string_replace(None, "a", "b") == (None, -1)
        assert string_replace("abc", "", "x") == ("abc", -1)

    def test_empty_old_inserts(self):
        """Empty old with a count inserts at the front"""
        assert string_replace("abc", "", "x", max_count=1) == ("xabc", 1)

    def test_non_letter_after_directive(self):
        """A directive followed by a digit or brace is replaced"""
        assert string_replace(r"\png1 \png{}", r"\png", "") == ("1 {}", 2)


class TestHelpers:
    """Test character class and search helpers"""

    def test_char_isLetter(self):
        """ASCII letters only"""
        assert char_isLetter("a")
        assert char_isLetter("Z")
        assert not char_isLetter("1")
        assert not char_isLetter("é")
        assert not char_isLetter("")

    def test_text_find(self):
        """Case-sensitive and insensitive search"""
        assert text_find("aXbx", "x") == 3
        assert text_find("aXbx", "x", case_sensitive=False) == 1
        assert text_find("abc", "x") == -1


class TestDocumentText:
    """Test the mutable expression buffer"""

    def test_change_in_place(self):
        """change() edits the text and returns the end of the insertion"""
        doc = DocumentText("abcdef")
        end = doc.change(1, 2, "XYZ")
        assert doc.text == "aXYZdef"
        assert end == 4

    def test_replace_in_place(self):
        """replace() edits in place and returns the count"""
        doc = DocumentText(r"x \cache y")
        assert doc.replace(r"\cache", "") == 1
        assert doc.text == "x  y"

    def test_truncated_on_entry(self):
        """Input longer than max_size is truncated"""
        doc = DocumentText("abcdef", max_size=3)
        assert doc.text == "abc"
        assert doc.truncated

    def test_edits_may_grow(self):
        """Later edits are not bounded by max_size"""
        doc = DocumentText("abc", max_size=3)
        doc.change(3, 0, "def")
        assert doc.text == "abcdef"

    def test_none_is_empty(self):
        """None becomes an empty document"""
        doc = DocumentText(None)
        assert doc.is_empty()
        assert len(doc) == 0

    def test_coerce(self):
        """coerce() wraps a str and passes a document through"""
        doc = DocumentText("a")
        assert DocumentText.coerce(doc) is doc
        assert DocumentText.coerce("b").text == "b"

    def test_equality(self):
        """Documents compare equal to documents and strings with the same text"""
        assert DocumentText("a") == DocumentText("a")
        assert DocumentText("a") == "a"
        assert DocumentText("a") != "b"

    def test_trim_and_contains(self):
        """trim() strips whitespace; contains() searches"""
        doc = DocumentText("  \\Large x  ")
        doc.trim()
        assert str(doc) == "\\Large x"
        assert doc.contains("large", case_sensitive=False)
        assert not doc.contains("large")
