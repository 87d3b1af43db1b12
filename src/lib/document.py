"""
Mutable document text and splice primitives

DocumentText is the single mutable holder of the expression while it is
being rewritten. Every stage receives the same instance and edits it in
place through change() and replace(). The maximum expression size is
enforced once, when the document is created; later edits may grow it.

The pure functions string_change() and string_replace() do the actual
splicing on immutable str values and are usable on their own.
"""

import re
from typing import Optional, Tuple, Union

from loguru import logger

from ..config.settings import appsettings


def char_isLetter(ch: str) -> bool:
    """True for an ASCII letter, the characters of a TeX control word"""
    return len(ch) == 1 and ch.isascii() and ch.isalpha()


def text_find(text: str, sub: str, start: int = 0, case_sensitive: bool = True) -> int:
    """
    Find sub in text from start, optionally ignoring case.

    Returns:
        Index of the first occurrence, or -1
    """
    if case_sensitive:
        return text.find(sub, start)
    match = re.compile(re.escape(sub), re.IGNORECASE).search(text, start)
    return match.start() if match else -1


def string_change(string: str, pos: int, nfirst: int, to: Optional[str]) -> str:
    """
    Replace nfirst characters of string at pos with to.

    Example:
        >>> string_change("12345678", 3, 1, "ABC")
        '123ABC5678'
    """
    return string[:pos] + (to or "") + string[pos + nfirst:]


def string_replace(
    string: Optional[str],
    old: Optional[str],
    new: Optional[str],
    case_sensitive: bool = True,
    max_count: int = 0,
) -> Tuple[Optional[str], int]:
    r"""
    Replace occurrences of old in string with new.

    Searching resumes just past each inserted replacement, so new is never
    rescanned. When old looks like a directive (a backslash followed by at
    least one more character), an occurrence immediately followed by a
    letter is the prefix of a longer directive and is skipped: replacing
    \cache leaves \cachedir alone.

    Args:
        string: Text to edit
        old: Text to find; "" inserts new at the current position
        new: Replacement text
        case_sensitive: Match old exactly or ignoring case
        max_count: Maximum replacements, <= 0 for all

    Returns:
        (edited string, count). count is -1 for an invalid call: string is
        None, or old is empty with an unbounded count.

    Example:
        >>> string_replace(r"\cache\cachedir\cache", r"\cache", "")
        ('\\cachedir', 2)
    """
    old = old or ""
    new = new or ""
    if string is None or (not old and max_count <= 0):
        return string, -1

    is_command = len(old) >= 2 and old[0] == '\\'
    count = 0
    pos = 0
    while max_count < 1 or count < max_count:
        found = text_find(string, old, pos, case_sensitive) if old else pos
        if found < 0:
            break
        after = found + len(old)
        if is_command and after < len(string) and char_isLetter(string[after]):
            pos = after
            continue
        string = string_change(string, found, len(old), new)
        count += 1
        pos = found + len(new)
        if pos >= len(string):
            break
    return string, count


class DocumentText:
    r"""
    Growable, mutable expression buffer

    Attributes:
        text: Current contents
        max_size: Size limit applied when the document was created
        truncated: True if the input exceeded max_size

    Example:
        >>> doc = DocumentText(r"x \cache y")
        >>> doc.replace(r"\cache", "")
        1
        >>> doc.text
        'x  y'
    """

    def __init__(self, text: Optional[str] = "", max_size: Optional[int] = None) -> None:
        self.max_size = max_size if max_size is not None else appsettings.max_expression_size
        text = text or ""
        self.truncated = len(text) > self.max_size
        if self.truncated:
            logger.warning(
                f"Expression of {len(text)} characters truncated to {self.max_size}"
            )
            text = text[:self.max_size]
        self.text = text

    @classmethod
    def coerce(cls, value: Union["DocumentText", str, None]) -> "DocumentText":
        """Wrap a str (or None) in a DocumentText, pass documents through"""
        if isinstance(value, DocumentText):
            return value
        return cls(value)

    def change(self, pos: int, nfirst: int, to: Optional[str]) -> int:
        """
        Replace nfirst characters at pos with to, in place.

        Returns:
            Index just past the inserted text
        """
        self.text = string_change(self.text, pos, nfirst, to)
        return pos + len(to or "")

    def replace(
        self,
        old: Optional[str],
        new: Optional[str],
        case_sensitive: bool = True,
        max_count: int = 0,
    ) -> int:
        """Replace occurrences of old in place; see string_replace()"""
        text, count = string_replace(self.text, old, new, case_sensitive, max_count)
        if count > 0 and text is not None:
            self.text = text
        return count

    def find(self, sub: str, start: int = 0, case_sensitive: bool = True) -> int:
        return text_find(self.text, sub, start, case_sensitive)

    def contains(self, sub: str, case_sensitive: bool = True) -> bool:
        return self.find(sub, 0, case_sensitive) >= 0

    def trim(self) -> None:
        """Strip leading and trailing whitespace in place"""
        self.text = self.text.strip()

    def is_empty(self) -> bool:
        return not self.text

    def __str__(self) -> str:
        return self.text

    def __len__(self) -> int:
        return len(self.text)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DocumentText):
            return self.text == other.text
        if isinstance(other, str):
            return self.text == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DocumentText({self.text!r})"
