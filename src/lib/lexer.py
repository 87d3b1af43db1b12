"""
Custom Pygments lexer for LaTeX math expressions

Used by the CLI to echo a sanitized expression with highlighting at the
highest verbosity.

Token types:
- Keyword: Directives handled by texguard itself (\\eval, \\usepackage, ...)
- Name.Function: Any other control word (\\frac, \\alpha, ...)
- Name.Decorator: Not-permitted notices inserted by the validator
- Punctuation: Braces and brackets
- String.Backtick: Math shift ($)
- Number: Integer and decimal literals
- Comment: % to end of line
"""

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Keyword,
    Operator,
    Comment,
    Number,
)

DRIVER_WORDS = (
    r"\eval", r"\usepackage", r"\message", r"\density", r"\dpi",
    r"\gammacorrection", r"\depth", r"\nodepth", r"\png", r"\gif",
    r"\latex", r"\pdflatex", r"\dvipng", r"\dvips", r"\cache", r"\nocache",
    r"\quiet", r"\noquiet", r"\nquiet", r"\convertpath",
)


class MathTexLexer(RegexLexer):
    """
    Lexer for LaTeX math as texguard sees it

    Example:
        \\frac{a}{b} + \\eval{fs+1}

    Tokens:
        \\frac → Name.Function
        { → Punctuation
        a → Text
        \\eval → Keyword
        1 → Number
    """

    name = 'MathTeX'
    aliases = ['mathtex', 'texguard']
    filenames = ['*.mtex']

    tokens = {
        'root': [
            (r'%.*?$', Comment.Single),

            # validator notices
            (r'(\\mbox)(\{~\\underline\{)', bygroups(Name.Decorator, Punctuation), 'notice'),

            (words(DRIVER_WORDS, suffix=r'(?![a-zA-Z])'), Keyword),
            (r'\\[a-zA-Z]+', Name.Function),
            (r'\\.', String.Escape),

            (r'\$+', String.Backtick),
            (r'[{}\[\]]', Punctuation),
            (r'\d+(\.\d+)?', Number),
            (r'[-+*/=<>^_&|!?:]', Operator),

            (r'[^\\%${}\[\]\d\-+*/=<>^_&|!?:]+', Text),
        ],

        'notice': [
            (r'~not~permitted\}~\}', Name.Decorator, '#pop'),
            (r'[^~]+', Name.Decorator),
            (r'~', Name.Decorator),
        ],
    }


def get_lexer() -> MathTexLexer:
    """
    Get the MathTexLexer instance

    Returns:
        MathTexLexer instance ready for use with Pygments
    """
    return MathTexLexer()
