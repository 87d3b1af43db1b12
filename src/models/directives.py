"""
Directive specification and metadata models

Defines the table rows that describe recognized directives: how many
arguments follow the directive name, where an optional [arg] may appear,
how each argument is terminated, and (for denylist rows) what happens
when the directive is found.
"""

from enum import Enum, IntEnum
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple, Union


class ArgFormat(IntEnum):
    """
    How a single directive argument is terminated

    LATEX accepts {arg}, [arg] at the optional position, or a single
    character. The others are plain-TeX styles used by \\def and friends.
    """
    LATEX = 0             # {arg}, [arg] or one char
    ALPHA = 1             # control word: letters only
    UNTIL_BRACE = 2       # up to the next {
    UNTIL_WHITESPACE = 8  # up to the next whitespace


class DenyAction(Enum):
    """What the validator does with a denylist row"""
    IGNORE = "ignore"
    APPLY = "apply"
    ABORT = "abort"    # neutralize like APPLY, and flag the context


class Validity(Enum):
    """Post-extraction check applied to each argument field"""
    NONE = 0
    NUMERIC = 1


class DirectiveCategory(Enum):
    """
    Categories of driver directives

    Used to group the DirectiveRegistry rows for logging and listing.
    """
    MESSAGE = "message"      # \message{}
    MODE = "mode"            # picture, \displaystyle, \depth ...
    SIZE = "size"            # \tiny ... \Huge
    PACKAGE = "package"      # \usepackage{}
    FORMAT = "format"        # \png, \gif, \density{} ...
    RENDERER = "renderer"    # \latex, \dvipng, \convertpath{} ...
    EVAL = "eval"            # \eval{}


FormatCode = Union[int, Tuple[ArgFormat, ...]]


def argformat_decode(code: FormatCode, nargs: int) -> Tuple[ArgFormat, ...]:
    """
    Decode a decimal digit-per-argument format code.

    The most significant digit describes the first argument. Arguments
    beyond the digits given use ArgFormat.LATEX. Digits that are not an
    ArgFormat value are read as ArgFormat.ALPHA.

    Args:
        code: Legacy integer code (e.g. 20) or an explicit tuple of formats
        nargs: Number of required arguments

    Returns:
        Tuple with one ArgFormat per required argument

    Example:
        >>> argformat_decode(20, 2)
        (<ArgFormat.UNTIL_BRACE: 2>, <ArgFormat.LATEX: 0>)
    """
    nargs = abs(nargs)
    if isinstance(code, tuple):
        formats = list(code[:nargs])
    else:
        digits = str(abs(code)) if code else ""
        formats = []
        for digit in digits[:nargs]:
            value = int(digit)
            formats.append(ArgFormat(value) if value in ArgFormat._value2member_map_ else ArgFormat.ALPHA)
    while len(formats) < nargs:
        formats.append(ArgFormat.LATEX)
    return tuple(formats)


@dataclass(frozen=True)
class DirectiveSpec:
    """
    Specification for one denylist (or driver) directive row

    Attributes:
        name: Literal directive name, including the leading backslash
        nargs: Number of required arguments (negative is read as abs)
        optional_pos: Argument index where [arg] may appear, None for never
        arg_formats: One ArgFormat per required argument
        action: What the validator does when the directive is found
        display: Custom replacement template with #1..#n and [#0], or None
        description: Human-readable description
    """
    name: str
    nargs: int = 0
    optional_pos: Optional[int] = None
    arg_formats: Tuple[ArgFormat, ...] = field(default_factory=tuple)
    action: DenyAction = DenyAction.APPLY
    display: Optional[str] = None
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Directive name must not be empty")
        if abs(self.nargs) > 9:
            raise ValueError(f"{self.name}: at most 9 arguments are supported, got {self.nargs}")
        if self.optional_pos is not None and not 0 <= self.optional_pos <= abs(self.nargs):
            raise ValueError(
                f"{self.name}: optional position {self.optional_pos} outside 0..{abs(self.nargs)}"
            )
        if len(self.arg_formats) > abs(self.nargs):
            raise ValueError(f"{self.name}: {len(self.arg_formats)} formats given for {self.nargs} arguments")
        for fmt in self.arg_formats:
            if not isinstance(fmt, ArgFormat):
                raise ValueError(f"{self.name}: invalid argument format {fmt!r}")
        if not isinstance(self.action, DenyAction):
            raise ValueError(f"{self.name}: invalid action {self.action!r}")
        # pad formats so every argument has one
        object.__setattr__(self, "arg_formats", argformat_decode(self.arg_formats, self.nargs))

    @classmethod
    def row_make(
        cls,
        name: str,
        nargs: int = 0,
        optional_pos: Optional[int] = None,
        fmt: FormatCode = 0,
        action: DenyAction = DenyAction.APPLY,
        display: Optional[str] = None,
        description: str = "",
    ) -> "DirectiveSpec":
        """Build a row from a legacy integer format code"""
        return cls(
            name=name,
            nargs=nargs,
            optional_pos=optional_pos,
            arg_formats=argformat_decode(fmt, nargs),
            action=action,
            display=display,
            description=description,
        )


_ZERO_ARG_DENIED = (
    r"\loop", r"\csname", r"\catcode", r"\output",
    r"\everycr", r"\everypar", r"\everymath", r"\everyhbox", r"\everyvbox", r"\everyjob",
    r"\openin", r"\read", r"\openout", r"\write",
    "^^",
)

# Built-in denylist, checked in this order
DENYLIST: Tuple[DirectiveSpec, ...] = (
    DirectiveSpec.row_make(r"\newcommand", 2, 1, description="define a macro"),
    DirectiveSpec.row_make(r"\providecommand", 2, 1, description="define a macro if undefined"),
    DirectiveSpec.row_make(r"\renewcommand", 2, 1, description="redefine a macro"),
    DirectiveSpec.row_make(r"\input", 1, description="read a file"),
    DirectiveSpec.row_make(r"\def", 2, fmt=20, description="plain TeX macro definition"),
    DirectiveSpec.row_make(r"\edef", 2, fmt=20, description="expanded macro definition"),
    DirectiveSpec.row_make(r"\gdef", 2, fmt=20, description="global macro definition"),
    DirectiveSpec.row_make(r"\xdef", 2, fmt=20, description="global expanded macro definition"),
) + tuple(
    DirectiveSpec.row_make(name, description="primitive with side effects") for name in _ZERO_ARG_DENIED
)


@dataclass
class DriverSpec:
    """
    Specification for a driver directive handled after validation

    Attributes:
        name: Directive (or trigger substring) this row reacts to
        category: Category for organization
        description: Human-readable description
        handler: Function (document, context) -> bool, True if it fired
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
