"""
Request-scoped parse context

ParseContext carries the rendering flags that the driver directives set
(math mode, font size, image format, packages, ...). One context is created
per expression and threaded explicitly through every stage that reads or
writes these flags.
"""

from enum import Enum, IntEnum
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


class MathMode(IntEnum):
    """How the expression is wrapped in the LaTeX document"""
    DISPLAY = 0      # $\displaystyle ... $
    TEXT = 1         # $ ... $
    PARAGRAPH = 2    # no math delimiters


class ImageType(IntEnum):
    GIF = 1
    PNG = 2


class LatexMethod(IntEnum):
    LATEX = 1
    PDFLATEX = 2


class ImageMethod(IntEnum):
    DVIPNG = 1
    CONVERT = 2


class FontSize(Enum):
    """Size directives, indexed by their numeric fontsize"""
    TINY = r"\tiny"
    SCRIPTSIZE = r"\scriptsize"
    FOOTNOTESIZE = r"\footnotesize"
    SMALL = r"\small"
    NORMALSIZE = r"\normalsize"
    LARGE_1 = r"\large"
    LARGE_2 = r"\Large"
    LARGE_3 = r"\LARGE"
    HUGE_1 = r"\huge"
    HUGE_2 = r"\Huge"


SIZE_DIRECTIVES: Tuple[str, ...] = tuple(size.value for size in FontSize)

GAMMA_DVIPNG = "2.5"
GAMMA_CONVERT = "0.5"


@dataclass
class ParseContext:
    """
    Mutable flags collected while the driver scans an expression.

    Attributes:
        mathmode: Wrapping mode for the expression
        fontsize: Index into SIZE_DIRECTIVES (0..9)
        imagetype: Requested output image type
        latex_method: latex or pdflatex
        image_method: dvipng or dvips/convert
        density: Rendering density, kept as text for the renderer
        gamma: Gamma correction, kept as text for the renderer
        gamma_explicit: True once gamma was set by settings or \\gammacorrection
        quiet: Renderer quiet level
        caching: Whether the rendered image may be cached
        depth: Use the depth-reporting wrapper
        picture: Expression uses the picture environment
        packages: (name, options) pairs for extra \\usepackage lines
        convert_path: Path to the convert program, from \\convertpath
        message_number: Set by \\message{n}; suppresses rendering
        illegal_count: Number of denylisted directives neutralized
        abort_requested: A denylist row with action ABORT fired
        verbosity: Logging verbosity (used by LOG)
    """

    mathmode: MathMode = MathMode.DISPLAY
    fontsize: int = 4
    imagetype: ImageType = ImageType.PNG
    latex_method: LatexMethod = LatexMethod.LATEX
    image_method: ImageMethod = ImageMethod.DVIPNG
    density: str = "120"
    gamma: str = GAMMA_DVIPNG
    gamma_explicit: bool = False
    quiet: int = 3
    caching: bool = True
    depth: bool = False
    picture: bool = False
    packages: List[Tuple[str, str]] = field(default_factory=list)
    convert_path: Optional[str] = None
    message_number: Optional[int] = None
    illegal_count: int = 0
    abort_requested: bool = False
    verbosity: int = 1

    def gamma_default(self) -> str:
        """Gamma the current image method uses when none was given"""
        if self.image_method == ImageMethod.CONVERT:
            return GAMMA_CONVERT
        return GAMMA_DVIPNG

    def package_has(self, name: str) -> bool:
        """True if a declared package name contains name (xcolor provides color)"""
        return any(name in package for package, _ in self.packages)

    @property
    def size_directive(self) -> str:
        """The \\tiny ... \\Huge directive for the current fontsize"""
        index = min(max(self.fontsize, 0), len(SIZE_DIRECTIVES) - 1)
        return SIZE_DIRECTIVES[index]

    def summary_make(self) -> dict:
        """JSON-friendly view of the flags, used by the CLI report"""
        return {
            "mathmode": self.mathmode.name.lower(),
            "fontsize": self.fontsize,
            "imagetype": self.imagetype.name.lower(),
            "latex_method": self.latex_method.name.lower(),
            "image_method": self.image_method.name.lower(),
            "density": self.density,
            "gamma": self.gamma,
            "quiet": self.quiet,
            "caching": self.caching,
            "depth": self.depth,
            "picture": self.picture,
            "packages": [{"name": name, "options": options} for name, options in self.packages],
            "convert_path": self.convert_path,
            "message_number": self.message_number,
            "illegal_count": self.illegal_count,
            "abort_requested": self.abort_requested,
        }
