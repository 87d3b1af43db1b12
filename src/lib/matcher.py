"""
Flexible whitespace template matcher

Matches a template against text where whitespace in the template is
elastic: a run of n whitespace characters in the template matches at
least n-1 whitespace characters in the text (so a single template space
also matches no space at all). Non-whitespace runs must match exactly,
optionally case-insensitively.

Used by the entity preprocessor to recognize tags such as "< br / >"
however the submitter spaced them.

Example:
    >>> template_find("x <BR/> y", "< br / >", white="i")
    TemplateMatch(start=2, length=5)
"""

from typing import Optional, Tuple

from ..models.parser import TemplateMatch

DEFAULT_WHITESPACE = " \t\n\r\f\v"


def whitespace_parse(white: Optional[str]) -> Tuple[str, bool]:
    """
    Split a whitespace argument into its character set and case flag.

    An i or I anywhere in white selects case-insensitive matching and is
    removed from the set. If nothing is left, the default set is used.

    Returns:
        (whitespace characters, case_sensitive)
    """
    if not white:
        return DEFAULT_WHITESPACE, True
    case_sensitive = 'i' not in white and 'I' not in white
    whitespace = white.replace('i', '').replace('I', '')
    return (whitespace or DEFAULT_WHITESPACE), case_sensitive


def _span(text: str, pos: int, chars: str) -> int:
    """Length of the run of chars in text starting at pos"""
    end = pos
    while end < len(text) and text[end] in chars:
        end += 1
    return end - pos


def _cspan(text: str, pos: int, chars: str) -> int:
    """Length of the run of characters not in chars starting at pos"""
    end = pos
    while end < len(text) and text[end] not in chars:
        end += 1
    return end - pos


def template_find(
    string: Optional[str], template: Optional[str], white: Optional[str] = None, start: int = 0
) -> Optional[TemplateMatch]:
    """
    Find the first position in string that matches template.

    Rules, applied step by step over alternating whitespace/word runs:
      - A template whitespace run of length n needs at least n-1 string
        whitespace characters, except at the search start, which counts
        as if preceded by blanks.
      - Once inside the match, string whitespace where the template has
        none is a mismatch.
      - Each template word must be a prefix of the string word at the
        same point (exact, or case-insensitive if white contains i/I).

    Whitespace before the first matched word is not part of the match.
    Whitespace matched inside it is, so the reported length can differ
    from len(template).

    Args:
        string: Text to search
        template: Pattern with elastic whitespace
        white: Whitespace characters, optionally including an i/I flag
        start: Index to start searching from

    Returns:
        TemplateMatch(start, length), or None if there is no match

    Example:
        >>> template_find("c   d", "  c d")
        TemplateMatch(start=0, length=5)
        >>> template_find("abcdef", "c d")
        TemplateMatch(start=2, length=2)
    """
    if not string or template is None:
        return None

    whitespace, case_sensitive = whitespace_parse(white)

    nstring = len(string)
    ntemplate = len(template)

    for candidate in range(start, nstring):
        pos = candidate
        tpos = 0
        leading = 0
        matched = True

        while tpos < ntemplate:
            if pos >= nstring:
                matched = False
                break

            nsubwhite = _span(template, tpos, whitespace)
            nstrwhite = _span(string, pos, whitespace)
            nminwhite = max(0, nsubwhite - 1)

            if pos != start and nstrwhite < nminwhite:
                matched = False
                break
            if pos == candidate:
                leading = nstrwhite
            if tpos != 0 and nstrwhite > 0 and nsubwhite < 1:
                matched = False
                break

            tpos += nsubwhite
            pos += nstrwhite

            nsubchars = _cspan(template, tpos, whitespace)
            nstrchars = _cspan(string, pos, whitespace)
            if nstrchars < nsubchars:
                matched = False
                break
            word = string[pos:pos + nsubchars]
            expected = template[tpos:tpos + nsubchars]
            if not case_sensitive:
                word, expected = word.lower(), expected.lower()
            if word != expected:
                matched = False
                break

            tpos += nsubchars
            pos += nsubchars

        if matched:
            found = candidate + leading
            return TemplateMatch(found, pos - found)

    return None
