"""
Entity and delimiter preprocessor

First stage of the pipeline. Expressions usually arrive from an HTML page
or a URL, so before anything else:

1. Matching outer math delimiters are removed and select the math mode:
   $...$ is text style, $$...$$ display style, $$$...$$$ paragraph mode,
   and \\[...\\] display style.
2. HTML character entities (&lt; &amp; &#62; ...) become their LaTeX
   equivalents.
3. Stray HTML tags (<br>, <p>, <tex>, ...) are removed, however they are
   spaced or capitalized.

Example:
    >>> doc = preprocess_entities("$$ a &lt; b<BR/>c $$")
    >>> doc.text
    'a < b c'
"""

import string
from typing import Dict, Optional, Tuple, Union

from ..models.context import MathMode, ParseContext
from .document import DocumentText, char_isLetter
from .matcher import template_find
from .log import LOG

# (entity, optional terminator, replacement)
ENTITY_TABLE: Tuple[Tuple[str, str, str], ...] = (
    ("&quot", ";", '"'),
    ("&amp", ";", "&"),
    ("&lt", ";", "<"),
    ("&gt", ";", ">"),
    ("&backslash", ";", "\\"),
    ("&nbsp", ";", " "),
    ("&iexcl", ";", "{\\mbox{!`}}"),
    ("&brvbar", ";", "|"),
    ("&plusmn", ";", "\\pm"),
    ("&sup2", ";", "{{}^2}"),
    ("&sup3", ";", "{{}^3}"),
    ("&micro", ";", "\\mu"),
    ("&sup1", ";", "{{}^1}"),
    ("&frac14", ";", "{\\frac14}"),
    ("&frac12", ";", "{\\frac12}"),
    ("&frac34", ";", "{\\frac34}"),
    ("&iquest", ";", "{\\mbox{?`}}"),
    ("&Acirc", ";", "{\\rm\\hat A}"),
    ("&Atilde", ";", "{\\rm\\tilde A}"),
    ("&Auml", ";", "{\\rm\\ddot A}"),
    ("&Aring", ";", "{\\overset{o}{\\rm A}}"),
    ("&atilde", ";", "{\\rm\\tilde a}"),
    ("&yuml", ";", "{\\rm\\ddot y}"),
    ("&#", ";", "{[\\&\\#nnn?]}"),    # numeric entities not in NUMERIC_ENTITIES
)

# (tag template, replacement); template whitespace is elastic
TAG_TABLE: Tuple[Tuple[str, str], ...] = (
    ("< br >", " "),
    ("< br / >", " "),
    ("< dd >", " "),
    ("< / dd >", " "),
    ("< dl >", " "),
    ("< / dl >", " "),
    ("< p >", " "),
    ("< / p >", " "),
    ("< tex >", ""),
    ("< / tex >", ""),
)

NUMERIC_ENTITIES: Dict[int, str] = {
    9: " ", 10: " ", 13: " ", 32: " ",
    **{code: chr(code) for code in range(33, 48)},
    **{code: chr(code) for code in range(58, 65)},
    **{code: chr(code) for code in range(91, 97)},
    **{code: chr(code) for code in range(123, 127)},
    160: "~",
    166: "|",
    173: "-",
    177: "{\\pm}",
    215: "{\\times}",
}

MAX_ENTITY_DIGITS = 11

DOLLAR_MODES = {1: MathMode.TEXT, 2: MathMode.DISPLAY, 3: MathMode.PARAGRAPH}


def delimiters_strip(
    document: Union[DocumentText, str], context: Optional[ParseContext] = None
) -> Optional[MathMode]:
    """
    Remove matching outer $ pairs or a \\[...\\] wrapper.

    Args:
        document: Expression, edited in place
        context: Receives the math mode selected by the delimiters

    Returns:
        The selected MathMode, or None if there were no outer delimiters
    """
    document = DocumentText.coerce(document)
    text = document.text
    ndollars = 0
    while len(text) > 2 and text[0] == '$' and text[-1] == '$':
        text = text[1:-1]
        ndollars += 1

    mode = DOLLAR_MODES.get(ndollars)
    if ndollars == 0 and len(text) > 4 and text.startswith("\\[") and text.endswith("\\]"):
        text = text[2:-2]
        mode = MathMode.DISPLAY

    document.text = text
    if mode is not None and context is not None:
        context.mathmode = mode
    return mode


def _entity_translate(document: DocumentText, entity: str, terminator: str, latex: str) -> int:
    """Replace every occurrence of one &entity; and return the count"""
    count = 0
    pos = 0
    while True:
        text = document.text
        found = text.find(entity, pos)
        if found < 0:
            break
        toklen = len(entity)
        prevchar = ' ' if found == pos else text[found - 1]
        if prevchar == '\\':
            pos = found + toklen
            continue
        after = found + toklen
        if after < len(text) and char_isLetter(text[after]):
            # prefix of a longer entity name
            pos = after
            continue

        replacement = latex
        if entity == "&#":
            digits = ""
            while (
                found + toklen < len(text)
                and text[found + toklen] in string.digits
                and len(digits) < MAX_ENTITY_DIGITS
            ):
                digits += text[found + toklen]
                toklen += 1
            number = int(digits) if digits else 0
            replacement = NUMERIC_ENTITIES.get(number, latex.replace("nnn", digits, 1))

        if found + toklen < len(text) and text[found + toklen] in terminator:
            toklen += 1

        document.change(found, toklen, replacement)
        pos = found + len(replacement)
        count += 1
    return count


def _tag_translate(document: DocumentText, tag: str, latex: str) -> int:
    """Replace every occurrence of one <tag> and return the count"""
    count = 0
    pos = 0
    while True:
        match = template_find(document.text, tag, "i", pos)
        if match is None:
            break
        prevchar = ' ' if match.start == pos else document.text[match.start - 1]
        if prevchar == '\\':
            pos = match.end
            continue
        document.change(match.start, match.length, latex)
        pos = match.start + len(latex)
        count += 1
    return count


def preprocess_entities(
    document: Union[DocumentText, str], context: Optional[ParseContext] = None
) -> DocumentText:
    """
    Strip outer delimiters and translate HTML entities and tags.

    An entity preceded by a backslash, or followed by a letter (so it is
    only the prefix of some longer name), is left alone. The ; terminator
    is optional. Numeric entities &#nnn; map to their character where that
    is safe, and otherwise to a visible [&#nnn?] marker.

    Args:
        document: Expression, edited in place (a str is wrapped)
        context: Receives the math mode selected by outer delimiters

    Returns:
        The preprocessed DocumentText, trimmed of outer whitespace
    """
    document = DocumentText.coerce(document)
    if document.is_empty():
        return document

    delimiters_strip(document, context)

    translated = 0
    for entity, terminator, latex in ENTITY_TABLE:
        translated += _entity_translate(document, entity, terminator, latex)
    for tag, latex in TAG_TABLE:
        translated += _tag_translate(document, tag, latex)

    document.trim()
    if translated:
        LOG(f"Translated {translated} HTML entit(y/ies) and tag(s)", level=2)
    return document
