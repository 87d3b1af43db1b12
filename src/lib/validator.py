"""
Denylist validator

Neutralizes directives that could make the typesetting run read or write
files, redefine macros, or loop forever (\\input, \\def, \\write, ...).
Each occurrence is removed and replaced in place by a visible, harmless
"not permitted" notice built from the defanged directive and arguments.

The validator is idempotent: the notices it inserts never contain a
denylisted directive, so validating its own output finds nothing.
"""

from typing import Iterable, List, Optional, Union

from ..models.context import ParseContext
from ..models.directives import ArgFormat, DenyAction, DirectiveSpec
from ..models.parser import ArgumentSet, ExtractStatus
from .defang import defang
from .denylist import denylist_default
from .document import DocumentText, string_replace
from .parser import Parser
from .log import LOG


def optional_render(args: ArgumentSet) -> str:
    """Render captured optional arguments as [opt1][opt2]..., skipping empty ones"""
    return "".join(f"[{defang(option)}]" for option in args.optional if option)


def display_render(spec: DirectiveSpec, args: ArgumentSet) -> str:
    r"""
    Build the replacement shown in place of a denylisted directive

    Without a custom template the notice is
        \mbox{~\underline{<name>[opts]\{arg1\}\{arg2\}~not~permitted}~}
    where the name and every argument are defanged, brace-format arguments
    are wrapped in \{ \}, and optional arguments appear at the row's
    optional position. Rendering stops at the first empty argument.

    A custom template substitutes #1..#n with the defanged arguments and
    [#0] with the optional arguments (or nothing if there are none).

    Args:
        spec: Denylist row that matched
        args: Arguments captured for this occurrence

    Returns:
        Display string to splice into the document
    """
    nargs = abs(spec.nargs)
    options = optional_render(args)
    has_options = args.noptional > 0

    if not spec.display:
        parts: List[str] = ["\\mbox{~\\underline{", defang(spec.name)]
        for iarg in range(nargs):
            if iarg == spec.optional_pos and has_options:
                parts.append(options)
            value = args.arg(iarg)
            if not value:
                break
            if spec.arg_formats[iarg] == ArgFormat.LATEX:
                parts.append("\\{" + defang(value) + "\\}")
            else:
                parts.append(defang(value))
        parts.append("~not~permitted}~}")
        return "".join(parts)

    display = spec.display
    if not has_options:
        display, _ = string_replace(display, "[#0]", "", case_sensitive=False)
    for iarg in range(nargs):
        if iarg == spec.optional_pos and has_options:
            display, _ = string_replace(display, "[#0]", options, case_sensitive=False)
        value = args.arg(iarg)
        if not value:
            break
        display, _ = string_replace(display, f"#{iarg + 1}", defang(value), case_sensitive=False)
    return display or ""


def validate(
    document: Union[DocumentText, str],
    denylist: Optional[Iterable[DirectiveSpec]] = None,
    context: Optional[ParseContext] = None,
) -> int:
    r"""
    Neutralize every denylisted directive in document

    For each row whose action is APPLY or ABORT, the directive is
    extracted repeatedly until no occurrence is left, and each occurrence
    is replaced by its display string. The search resumes after the
    inserted display, so a notice is never scanned by its own row. A
    malformed occurrence (say an unterminated \input{...) cannot be
    extracted, so the partial span the extractor reports is replaced
    instead; the directive never survives.

    Args:
        document: Text to validate, edited in place (a str is wrapped)
        denylist: Rows to check, in order; defaults to the built-in table
                  plus any rows from the configured denylist file
        context: Receives illegal_count and abort_requested

    Returns:
        Number of denylisted directives neutralized
    """
    document = DocumentText.coerce(document)
    if document.is_empty():
        return 0
    if denylist is None:
        denylist = denylist_default()

    parser = Parser(document)
    args = ArgumentSet()
    ninvalid = 0

    for spec in denylist:
        if spec.action == DenyAction.IGNORE:
            continue
        resume = 0
        while True:
            found = parser.directive_extract(
                spec.name,
                case_sensitive=True,
                nargs=spec.nargs,
                args=args,
                optional_pos=spec.optional_pos,
                arg_format=spec.arg_formats,
                start=resume,
            )
            if found is None and args.status != ExtractStatus.MALFORMED:
                break
            display = display_render(spec, args)
            if found is None:
                # malformed: replace the partial span that was left in place
                document.change(args.start, args.end - args.start, display)
                resume = args.start + len(display)
            else:
                document.change(found, 0, display)
                resume = found + len(display)
            ninvalid += 1
            LOG(f"Neutralized {spec.name} ({args.status.value}) args={args.values}", level=2)
            if spec.action == DenyAction.ABORT and context is not None:
                context.abort_requested = True

    if context is not None:
        context.illegal_count += ninvalid
    if ninvalid:
        LOG(f"{ninvalid} denylisted directive(s) neutralized", level=1)
    return ninvalid
