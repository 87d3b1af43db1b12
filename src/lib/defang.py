"""
Defang LaTeX-reserved characters for display

Turns text that would otherwise be interpreted by LaTeX into its literal,
printable form, so a neutralized directive can be shown to the submitter.
"""

from typing import Optional, Tuple

# Backslash first; backslashes introduced by replacements are never escaped again
DEFANG_TABLE: Tuple[Tuple[str, str], ...] = (
    ("\\", "\\textbackslash "),
    ("_", "\\textunderscore "),
    ("<", "\\textlangle "),
    (">", "\\textrangle "),
    ("$", "\\textdollar "),
    ("&", "\\&"),
    ("%", "\\%"),
    ("#", "\\#"),
    ("~", "\\~"),
    ("{", "\\{"),
    ("}", "\\}"),
    ("^", "\\ensuremath{\\widehat{~}}"),
)

_REPLACEMENTS = dict(DEFANG_TABLE)


def defang(s: Optional[str]) -> str:
    r"""
    Return s with every LaTeX-reserved character made printable.

    Example:
        >>> defang(r"\input{a_b}")
        '\\textbackslash input\\{a\\textunderscore b\\}'
    """
    if not s:
        return ""
    return "".join(_REPLACEMENTS.get(ch, ch) for ch in s)
