"""
Driver directive implementations for texguard

After validation, the expression is scanned for directives that do not
typeset anything but steer the rendering: math mode, font size, image
format, packages, renderer choice, caching and \\eval{}. Each one is
removed from the expression and recorded in the ParseContext.

Every handler is built from the same two primitives, the directive
extractor and the splice/replace functions, so a new directive is one
more registered row.
"""

import re
from typing import Callable, Dict, List, Optional

from ..config.settings import appsettings
from ..models.context import (
    GAMMA_CONVERT,
    GAMMA_DVIPNG,
    SIZE_DIRECTIVES,
    ImageMethod,
    ImageType,
    LatexMethod,
    MathMode,
    ParseContext,
)
from ..models.directives import DirectiveCategory, DriverSpec, Validity
from ..models.parser import ArgumentSet
from .document import DocumentText
from .evaluator import SymbolTable, evaluate
from .parser import Parser
from .log import LOG

LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def atoi(text: str) -> int:
    """Leading integer of text, 0 if there is none"""
    match = LEADING_INT_RE.match(text or "")
    return int(match.group(1)) if match else 0


def eval_resolve(document: DocumentText, context: ParseContext) -> int:
    r"""
    Replace every \eval{term} in document with the term's decimal value.

    Args:
        document: Text to edit in place (the expression or the wrapper)
        context: Supplies the symbol table values

    Returns:
        Number of \eval{} directives resolved
    """
    parser = Parser(document)
    args = ArgumentSet()
    symbols = SymbolTable.context_make(context)
    count = 0
    while True:
        found = parser.directive_extract(r"\eval", nargs=1, args=args)
        if found is None:
            break
        value = evaluate(symbols, args.first) if args.first else 0
        document.change(found, 0, str(value))
        LOG(f"\\eval{{{args.first}}} = {value}", level=2)
        count += 1
    return count


class DirectiveRegistry:
    """
    Registry of driver directive specifications and handlers

    Rows are kept in registration order, which is the order they are
    applied in: the picture row must run before the image method rows,
    and the implied-package row must run last.
    """

    def __init__(self, max_packages: Optional[int] = None) -> None:
        """Initialize the registry and register all built-in driver directives"""
        self.specs: Dict[str, DriverSpec] = {}
        self.max_packages = max_packages if max_packages is not None else appsettings.max_packages
        self.messageDirectives_register()
        self.modeDirectives_register()
        self.sizeDirectives_register()
        self.packageDirectives_register()
        self.rendererDirectives_register()
        self.formatDirectives_register()
        self.evalDirectives_register()
        self.impliedPackages_register()

    def register(self, spec: DriverSpec) -> None:
        """Register a driver directive specification"""
        self.specs[spec.name] = spec

    def get(self, name: str) -> Optional[Callable[[DocumentText, ParseContext], bool]]:
        """Get a directive handler by name, or None"""
        spec = self.specs.get(name)
        return spec.handler if spec else None

    def spec_get(self, name: str) -> Optional[DriverSpec]:
        """Get full directive specification by name"""
        return self.specs.get(name)

    def directives_listByCategory(self, category: DirectiveCategory) -> List[DriverSpec]:
        """Get all directives in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def directives_apply(self, document: DocumentText, context: ParseContext) -> List[str]:
        """
        Run every registered handler over document, in order.

        Stops early once a \\message{} request was found, since a message
        replaces the rendering altogether.

        Args:
            document: Validated expression, edited in place
            context: Receives the flags the directives set

        Returns:
            Names of the rows that fired
        """
        fired: List[str] = []
        for spec in self.specs.values():
            if spec.handler(document, context):
                fired.append(spec.name)
                LOG(f"Applied {spec.name}", level=2)
            if context.message_number is not None:
                break
        return fired

    def messageDirectives_register(self) -> None:
        """Register \\message{n}"""

        def message_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\message{n} - request canned message n instead of rendering"""
            args = ArgumentSet()
            if Parser(document).directive_extract(r"\message", nargs=1, args=args) is None:
                return False
            context.message_number = atoi(args.first)
            return True

        self.register(DriverSpec(
            name=r"\message",
            category=DirectiveCategory.MESSAGE,
            description="Emit canned message n instead of rendering",
            handler=message_handler,
        ))

    def modeDirectives_register(self) -> None:
        """Register math mode and environment directives"""

        def picture_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle picture environments and \\nopicture"""
            if document.contains("picture"):
                context.picture = True
            if document.replace(r"\nopicture", "", case_sensitive=False) >= 1:
                context.picture = False
            if not context.picture:
                return False
            context.image_method = ImageMethod.CONVERT
            context.mathmode = MathMode.PARAGRAPH
            context.depth = False
            if not context.gamma_explicit:
                context.gamma = GAMMA_CONVERT
            return True

        def environment_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle gather and eqnarray, which need paragraph mode"""
            if document.contains("gather") or document.contains("eqnarray"):
                context.mathmode = MathMode.PARAGRAPH
                return True
            return False

        def mathstyle_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\displaystyle, \\textstyle, \\parstyle and \\parmode"""
            fired = False
            for directive, mode in (
                (r"\displaystyle", MathMode.DISPLAY),
                (r"\textstyle", MathMode.TEXT),
                (r"\parstyle", MathMode.PARAGRAPH),
                (r"\parmode", MathMode.PARAGRAPH),
            ):
                if document.replace(directive, "", case_sensitive=False) >= 1:
                    context.mathmode = mode
                    fired = True
            return fired

        def depth_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\depth and \\nodepth"""
            fired = False
            if document.replace(r"\depth", "", case_sensitive=False) >= 1:
                # depth requests arrive with blanks encoded as tildes
                document.replace("~", " ")
                context.depth = True
                fired = True
            if document.replace(r"\nodepth", "", case_sensitive=False) >= 1:
                context.depth = False
                fired = True
            return fired

        self.register(DriverSpec(
            name="picture",
            category=DirectiveCategory.MODE,
            description="Picture environment: convert, paragraph mode, no depth",
            handler=picture_handler,
        ))
        self.register(DriverSpec(
            name="gather/eqnarray",
            category=DirectiveCategory.MODE,
            description="Multi-line environments force paragraph mode",
            handler=environment_handler,
        ))
        self.register(DriverSpec(
            name=r"\displaystyle",
            category=DirectiveCategory.MODE,
            description="Select display, text or paragraph math mode",
            handler=mathstyle_handler,
        ))
        self.register(DriverSpec(
            name=r"\depth",
            category=DirectiveCategory.MODE,
            description="Use the depth-reporting wrapper document",
            handler=depth_handler,
        ))

    def sizeDirectives_register(self) -> None:
        """Register \\tiny ... \\Huge"""

        def fontsize_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle size directives; the last one found wins"""
            parser = Parser(document)
            fired = False
            for index, size in enumerate(SIZE_DIRECTIVES):
                if parser.directive_find(size) is None:
                    continue
                if context.mathmode != MathMode.PARAGRAPH:
                    document.replace(size, "", case_sensitive=True)
                context.fontsize = index
                fired = True
            return fired

        self.register(DriverSpec(
            name="fontsize",
            category=DirectiveCategory.SIZE,
            description="Font size \\tiny ... \\Huge, removed unless in paragraph mode",
            handler=fontsize_handler,
        ))

    def packageDirectives_register(self) -> None:
        """Register \\usepackage[options]{name}"""

        def usepackage_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\usepackage - move the package into the wrapper preamble"""
            parser = Parser(document)
            args = ArgumentSet()
            fired = False
            while len(context.packages) < self.max_packages:
                if parser.directive_extract(r"\usepackage", nargs=-1, args=args, optional_pos=0) is None:
                    break
                options = args.optional[0] if args.optional else ""
                context.packages.append((args.first, options))
                fired = True
            return fired

        self.register(DriverSpec(
            name=r"\usepackage",
            category=DirectiveCategory.PACKAGE,
            description="Extra package for the wrapper preamble",
            handler=usepackage_handler,
        ))

    def rendererDirectives_register(self) -> None:
        """Register renderer selection directives"""

        def quiet_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\quiet, \\noquiet and \\nquiet{n}"""
            fired = False
            if document.replace(r"\quiet", "", case_sensitive=False) >= 1:
                context.quiet = 64
                fired = True
            if document.replace(r"\noquiet", "", case_sensitive=False) >= 1:
                context.quiet = 0
                fired = True
            args = ArgumentSet()
            if Parser(document).directive_extract(r"\nquiet", nargs=1, args=args) is not None:
                context.quiet = atoi(args.first)
                fired = True
            return fired

        def convertpath_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\convertpath{path} - path to (or directory of) convert"""
            args = ArgumentSet()
            if Parser(document).directive_extract(r"\convertpath", nargs=1, args=args) is None:
                return False
            path = args.first
            if "convert" not in path:
                if not path.endswith("/"):
                    path += "/"
                path += "convert"
            context.convert_path = path
            return True

        def latexmethod_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\latex (case-sensitive, \\LaTeX is a logo) and \\pdflatex"""
            fired = False
            if document.replace(r"\latex", "", case_sensitive=True) >= 1:
                context.latex_method = LatexMethod.LATEX
                fired = True
            if document.replace(r"\pdflatex", "", case_sensitive=False) >= 1:
                context.latex_method = LatexMethod.PDFLATEX
                fired = True
            return fired

        def imagemethod_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\dvipng and \\dvips"""
            fired = False
            if document.replace(r"\dvipng", "", case_sensitive=False) >= 1:
                context.image_method = ImageMethod.DVIPNG
                if not context.gamma_explicit:
                    context.gamma = GAMMA_DVIPNG
                fired = True
            if document.replace(r"\dvips", "", case_sensitive=False) >= 1:
                context.image_method = ImageMethod.CONVERT
                if not context.gamma_explicit:
                    context.gamma = GAMMA_CONVERT
                fired = True
            return fired

        for name, description, handler in (
            (r"\quiet", "Renderer quiet level", quiet_handler),
            (r"\convertpath", "Path to the convert program", convertpath_handler),
            (r"\latex", "Select latex or pdflatex", latexmethod_handler),
            (r"\dvipng", "Select dvipng or dvips/convert", imagemethod_handler),
        ):
            self.register(DriverSpec(
                name=name,
                category=DirectiveCategory.RENDERER,
                description=description,
                handler=handler,
            ))

    def formatDirectives_register(self) -> None:
        """Register output format directives"""

        def version_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\version - removed"""
            return document.replace(r"\version", "", case_sensitive=False) >= 1

        def imagetype_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\png and \\gif"""
            fired = False
            if document.replace(r"\png", "", case_sensitive=False) >= 1:
                context.imagetype = ImageType.PNG
                fired = True
            if document.replace(r"\gif", "", case_sensitive=False) >= 1:
                context.imagetype = ImageType.GIF
                fired = True
            return fired

        def density_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\density{n}, or \\dpi{n} when there is no \\density"""
            parser = Parser(document)
            args = ArgumentSet()
            found = parser.directive_extract(r"\density", validity=Validity.NUMERIC, nargs=1, args=args)
            if found is None:
                found = parser.directive_extract(r"\dpi", validity=Validity.NUMERIC, nargs=1, args=args)
            if found is None:
                return False
            if args.first.strip():
                context.density = args.first.strip()
            return True

        def gamma_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\gammacorrection{n}"""
            args = ArgumentSet()
            found = Parser(document).directive_extract(
                r"\gammacorrection", validity=Validity.NUMERIC, nargs=1, args=args
            )
            if found is None:
                return False
            if args.first.strip():
                context.gamma = args.first.strip()
                context.gamma_explicit = True
            return True

        def cache_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\cache and \\nocache"""
            fired = False
            if document.replace(r"\cache", "", case_sensitive=False) >= 1:
                context.caching = True
                fired = True
            if document.replace(r"\nocache", "", case_sensitive=False) >= 1:
                context.caching = False
                fired = True
            return fired

        for name, description, handler in (
            (r"\version", "Removed", version_handler),
            (r"\png", "Select png or gif output", imagetype_handler),
            (r"\density", "Rendering density in dpi", density_handler),
            (r"\gammacorrection", "Gamma correction", gamma_handler),
            (r"\cache", "Enable or disable caching", cache_handler),
        ):
            self.register(DriverSpec(
                name=name,
                category=DirectiveCategory.FORMAT,
                description=description,
                handler=handler,
            ))

    def evalDirectives_register(self) -> None:
        """Register \\eval{term}"""

        def eval_handler(document: DocumentText, context: ParseContext) -> bool:
            """Handle \\eval{term} - replaced by its integer value"""
            return eval_resolve(document, context) > 0

        self.register(DriverSpec(
            name=r"\eval",
            category=DirectiveCategory.EVAL,
            description="Replaced by the value of an integer expression",
            handler=eval_handler,
        ))

    def impliedPackages_register(self) -> None:
        """Register packages implied by the expression"""

        def implied_handler(document: DocumentText, context: ParseContext) -> bool:
            """Add color, eepic, pict2e and preview where the expression needs them"""
            added: List[str] = []
            if (
                len(context.packages) < self.max_packages
                and not context.package_has("color")
                and document.contains(r"\color")
            ):
                context.packages.append(("color", ""))
                added.append("color")
            if len(context.packages) < self.max_packages and context.picture:
                if context.latex_method == LatexMethod.LATEX and not context.package_has("eepic"):
                    context.packages.append(("eepic", ""))
                    added.append("eepic")
                if (
                    context.latex_method == LatexMethod.PDFLATEX
                    and len(context.packages) < self.max_packages - 1
                ):
                    if not context.package_has("pict2e"):
                        context.packages.append(("pict2e", ""))
                        added.append("pict2e")
                    if not context.package_has("preview"):
                        context.packages.append(("preview", "active,tightpage"))
                        added.append("preview")
            if added:
                LOG(f"Implied packages: {', '.join(added)}", level=2)
            return bool(added)

        self.register(DriverSpec(
            name="implied packages",
            category=DirectiveCategory.PACKAGE,
            description="color for \\color; eepic or pict2e+preview for pictures",
            handler=implied_handler,
        ))
