"""
Directive extractor for \\directive{arg}... syntax

Finds a named directive in the document text, reads its arguments and
removes the directive together with its arguments from the text.

Arguments are read one at a time according to a per-argument format:
- LATEX: a {braced} field (or [bracketed] at the optional position), whose
  matching close is found with the balanced span scanner; any other
  character is taken as a single-character argument.
- ALPHA: a control word, i.e. letters after an optional backslash.
- UNTIL_BRACE: everything up to the next { (the \\def\\name{...} style).
- UNTIL_WHITESPACE: everything up to the next whitespace character.

A [bracketed] argument at the optional position goes to the optional
argument list of the ArgumentSet instead of the required ones, and
several consecutive [args] may appear there.

Malformed occurrences (text ends before all arguments are read, or an
opening brace has no matching close) are reported but NOT removed: the
extractor returns None, ArgumentSet.status is MALFORMED, and the
arguments read so far stay in the ArgumentSet.

Example:
    >>> doc = DocumentText(r"x \\dpi{300} y")
    >>> args = ArgumentSet()
    >>> Parser(doc).directive_extract(r"\\dpi", nargs=1, args=args)
    2
    >>> doc.text, args.first
    ('x  y', '300')
"""

from typing import Optional, Union

from ..config.settings import appsettings
from ..models.directives import ArgFormat, Validity, FormatCode, argformat_decode
from ..models.parser import ArgumentSet, ExtractStatus
from .document import DocumentText, char_isLetter, text_find
from .spans import segment_scan, WHITESPACE
from .log import LOG

NUMERIC_CHARS = " +-.0123456789"


def numeric_truncate(field: str) -> str:
    """Cut field at the first character that cannot be part of a number"""
    for index, ch in enumerate(field):
        if ch not in NUMERIC_CHARS:
            return field[:index]
    return field


class Parser:
    r"""
    Extracts directives from a DocumentText

    Handles:
    - Prefix collisions (\s never matches inside \sin)
    - {braced}, [optional] and single-character LaTeX arguments
    - Plain-TeX argument styles for \def and friends
    - Numeric validity truncation of argument fields
    """

    def __init__(self, document: Union[DocumentText, str], max_optional: Optional[int] = None):
        """
        Initialize parser with a document

        Args:
            document: Text to extract from; a str is wrapped in a DocumentText
            max_optional: Number of [args] stored per occurrence

        Attributes:
            document: The DocumentText being edited in place
            max_optional: Storage bound for optional arguments
        """
        self.document = DocumentText.coerce(document)
        self.max_optional = (
            max_optional if max_optional is not None else appsettings.max_optional_args
        )

    @property
    def text(self) -> str:
        return self.document.text

    def directive_find(self, directive: str, start: int = 0, case_sensitive: bool = True) -> Optional[int]:
        r"""
        Find the next occurrence of a directive name

        When the name ends in a letter, an occurrence followed by another
        letter is part of a longer control word and is skipped.

        Args:
            directive: Literal directive name, e.g. "\\usepackage"
            start: Index to search from
            case_sensitive: Match exactly or ignoring case

        Returns:
            Index of the directive, or None if not found

        Example:
            For text "\sin x \s{1}" and directive "\s":
            Returns 7 (the \sin at 0 is skipped)
        """
        if not directive:
            return None
        name_is_word = char_isLetter(directive[-1])
        text = self.text
        pos = start
        while pos < len(text):
            found = text_find(text, directive, pos, case_sensitive)
            if found < 0:
                return None
            after = found + len(directive)
            if not name_is_word or after >= len(text) or not char_isLetter(text[after]):
                return found
            pos = after
        return None

    def brace_findMatching(self, start_pos: int) -> Optional[int]:
        """
        Find the close matching the { or [ at start_pos

        Depth is tracked over all of ( [ { with the balanced span scanner,
        so braces inside the field nest properly and escaped braces are
        ignored.

        Args:
            start_pos: Position of the opening { or [

        Returns:
            Position of the matching close, or None if there is none

        Example:
            For text "{a{b}c} d" at position 0:
            Returns 6
        """
        text = self.text
        closing = '}' if text[start_pos] == '{' else ']'
        if text.find(closing, start_pos) < 0:
            return None
        scan = segment_scan(text, "", start_pos)
        if scan.stop >= len(text):
            return None
        return scan.stop

    def directive_extract(
        self,
        directive: str,
        *,
        case_sensitive: bool = True,
        validity: Validity = Validity.NONE,
        nargs: int = 0,
        args: Optional[ArgumentSet] = None,
        optional_pos: Optional[int] = 0,
        arg_format: FormatCode = 0,
        start: int = 0,
    ) -> Optional[int]:
        r"""
        Extract the first occurrence of directive at or after start and remove it

        Args:
            directive: Literal directive name including its backslash
            case_sensitive: Match the name exactly or ignoring case
            validity: Per-field check; NUMERIC truncates at non-numeric chars
            nargs: Required argument count (negative is read as its abs)
            args: ArgumentSet filled with the arguments (reset first)
            optional_pos: Argument index where [args] may appear, None for never
            arg_format: Legacy digit code (e.g. 20) or tuple of ArgFormat
            start: Index to search from

        Returns:
            Index of the first character after the removed span (which is
            where the directive started), or None if the directive was not
            found or was malformed.
        """
        if args is None:
            args = ArgumentSet()
        args.reset()

        first = self.directive_find(directive, start, case_sensitive)
        if first is None:
            LOG(f"{directive} not found", level=3)
            return None

        text = self.text
        length = len(text)
        nargs = abs(nargs)
        formats = argformat_decode(arg_format, nargs)
        args.start = first
        last = first + len(directive)
        malformed = False

        iarg = 0
        while iarg < nargs + args.noptional:
            karg = iarg - args.noptional
            fmt = formats[karg]

            pos = last
            while pos < length and text[pos] in WHITESPACE:
                pos += 1
            if pos >= length:
                malformed = True
                break

            bracketed = False
            if fmt == ArgFormat.LATEX:
                accepts_optional = optional_pos is not None and iarg == optional_pos + args.noptional
                openers = "{[" if accepts_optional else "{"
                if text[pos] not in openers:
                    field = text[pos]
                    last = pos + 1
                else:
                    close = self.brace_findMatching(pos)
                    if close is None:
                        malformed = True
                        break
                    bracketed = text[pos] == '['
                    field = text[pos + 1:close].strip()
                    last = close + 1
            else:
                last = pos
                if text[last] == '\\':
                    last += 1
                if fmt == ArgFormat.UNTIL_BRACE:
                    brace = text.find('{', last)
                    last = brace if brace >= 0 else last + 1
                elif fmt == ArgFormat.UNTIL_WHITESPACE:
                    while last < length and text[last] not in WHITESPACE:
                        last += 1
                else:
                    while last < length and char_isLetter(text[last]):
                        last += 1
                field = text[pos:last].strip()

            if validity == Validity.NUMERIC:
                field = numeric_truncate(field)

            if bracketed:
                if len(args.optional) < self.max_optional:
                    args.optional.append(field)
                args.noptional += 1
            else:
                args.arg_store(karg, field)
            iarg += 1

        args.end = last
        if malformed:
            args.status = ExtractStatus.MALFORMED
            LOG(f"{directive} at {first} is malformed, left in place", level=2)
            return None

        self.document.change(first, last - first, "")
        args.status = ExtractStatus.FOUND
        LOG(f"{directive} extracted from {first}:{last} args={args.values} optional={args.optional}", level=3)
        return first


def extract_directive(
    document: Union[DocumentText, str],
    directive: str,
    case_sensitive: bool = True,
    validity: Validity = Validity.NONE,
    nargs: int = 0,
    args: Optional[ArgumentSet] = None,
    optional_pos: Optional[int] = 0,
    arg_format: FormatCode = 0,
    start: int = 0,
) -> Optional[int]:
    """
    Extract one directive occurrence from document

    Convenience wrapper around Parser.directive_extract(). Pass a
    DocumentText to observe the edit; a str is wrapped in a temporary one.
    """
    return Parser(document).directive_extract(
        directive,
        case_sensitive=case_sensitive,
        validity=validity,
        nargs=nargs,
        args=args,
        optional_pos=optional_pos,
        arg_format=arg_format,
        start=start,
    )
