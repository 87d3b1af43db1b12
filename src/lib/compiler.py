"""
Compiler for texguard expressions

Runs one expression through the whole sanitizing pipeline and assembles
the LaTeX wrapper document the renderer would typeset.
"""

import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.settings import AppSettings, appsettings
from ..models.context import LatexMethod, MathMode, ParseContext
from .directives import DirectiveRegistry, eval_resolve
from .document import DocumentText
from .entities import preprocess_entities
from .validator import validate
from .log import LOG, state_connectToLogger

EMPTY_REASON = "Expression empty after preprocessing"

DEFAULT_WRAPPER = "\n".join((
    r"\documentclass[%%dclassoptions%%]{%%dclass%%}",
    r"\usepackage{amsmath}",
    r"\usepackage{amsfonts}",
    r"\usepackage{amssymb}",
    r"%%usepackage%%",
    r"%%pagestyle%%",
    r"%%previewenviron%%",
    r"\begin{document}",
    r"\setlength{\parindent}{0pt}",
    r"%%fontsize%%",
    r"%%setlength%%",
    r"%%beginmath%%",
    r"%%expression%%",
    r"%%endmath%%",
    r"\end{document}",
)) + "\n"

# Writes the rendered box's depth, height and width to <jobname>.info
DEPTH_WRAPPER = "\n".join((
    r"\documentclass[10pt]{article}",
    r"\usepackage{amsmath}",
    r"\usepackage{amsfonts}",
    r"\usepackage{amssymb}",
    r"%%%\usepackage{calc}",
    r"%%usepackage%%",
    r"\newcommand{\amsatop}[2]{\genfrac{}{}{0pt}{1}{#1}{#2}}",
    r"\newcommand{\twolines}[2]{{\amsatop{\mbox{#1}}{\mbox{#2}}}}",
    r"\newcommand{\fs}{{\eval{fs}}}",
    r"%%pagestyle%%",
    r"%%previewenviron%%",
    r"\newsavebox{\mybox}",
    r"\newlength{\mywidth}",
    r"\newlength{\myheight}",
    r"\newlength{\mydepth}",
    r"\setlength{\parindent}{0pt}",
    r"%%fontsize%%",
    r"%%setlength%%",
    r"\begin{lrbox}{\mybox}",
    r"%%beginmath%%",
    r"%%expression%%",
    r"%%endmath%%",
    r"\end{lrbox}",
    r"\settowidth{\mywidth}{\usebox{\mybox}}",
    r"\settoheight{\myheight}{\usebox{\mybox}}",
    r"\settodepth{\mydepth}{\usebox{\mybox}}",
    r"\newwrite\foo",
    r"\immediate\openout\foo=\jobname.info",
    r"\immediate\write\foo{depth = \the\mydepth}",
    r"\immediate\write\foo{height = \the\myheight}",
    r"\addtolength{\myheight}{\mydepth}",
    r"\immediate\write\foo{totalheight = \the\myheight}",
    r"\immediate\write\foo{width = \the\mywidth}",
    r"\closeout\foo",
    r"\begin{document}",
    r"\usebox{\mybox}",
    r"\end{document}",
)) + "\n"

BEGIN_MATH = {
    MathMode.DISPLAY: r" \noindent $\displaystyle ",
    MathMode.TEXT: r" \noindent $ ",
    MathMode.PARAGRAPH: " ",
}

END_MATH = {
    MathMode.DISPLAY: " $ ",
    MathMode.TEXT: " $ ",
    MathMode.PARAGRAPH: " ",
}


@dataclass
class CompileResult:
    """
    Outcome of sanitizing one expression

    Attributes:
        expression: Sanitized expression, ready for the wrapper
        context: Flags collected by the driver directives
        cache_key: md5 hex digest of the validated expression
        wrapper: Complete LaTeX wrapper document ("" if not renderable)
        illegal_count: Number of denylisted directives neutralized
        renderable: False for a \\message{} request or an empty expression
        reason: Why the result is not renderable
        applied: Names of the driver rows that fired
    """
    expression: str
    context: ParseContext
    cache_key: str
    wrapper: str = ""
    illegal_count: int = 0
    renderable: bool = True
    reason: Optional[str] = None
    applied: List[str] = field(default_factory=list)

    def summary_make(self) -> Dict[str, Any]:
        """JSON-friendly view, written by the CLI next to the .tex file"""
        return {
            "expression": self.expression,
            "cache_key": self.cache_key,
            "illegal_count": self.illegal_count,
            "renderable": self.renderable,
            "reason": self.reason,
            "applied": self.applied,
            "context": self.context.summary_make(),
        }


class Compiler:
    """
    Sanitizes an expression and builds its wrapper document

    Stages, in order:
    - entity and delimiter preprocessing
    - denylist validation
    - cache key computation
    - driver directives (mode, size, packages, renderer, \\eval{} ...)
    - wrapper document assembly
    """

    def __init__(
        self,
        expression: str,
        settings: Optional[AppSettings] = None,
        verbosity: int = 1,
    ) -> None:
        """
        Initialize compiler

        Args:
            expression: Raw expression as submitted
            settings: Configuration, defaults to the appsettings singleton
            verbosity: Output verbosity level (0-3)
        """
        self.settings = settings or appsettings
        self.context = self.settings.context_make(verbosity)
        self.document = DocumentText(expression, self.settings.max_expression_size)
        self.directives = DirectiveRegistry(self.settings.max_packages)

    def compile(self) -> CompileResult:
        """
        Run the pipeline over the expression

        Returns:
            CompileResult with the sanitized expression and wrapper
        """
        state_connectToLogger(self.context)
        LOG("Sanitizing expression...", level=1)

        preprocess_entities(self.document, self.context)
        illegal_count = validate(self.document, context=self.context)

        cache_key = self.cacheKey_make(self.document.text)
        LOG(f"Cache key: {cache_key}", level=2)

        applied = self.directives.directives_apply(self.document, self.context)
        # removed driver directives can join their neighbours into a denylisted one
        illegal_count += validate(self.document, context=self.context)
        self.document.trim()

        result = CompileResult(
            expression=self.document.text,
            context=self.context,
            cache_key=cache_key,
            illegal_count=illegal_count,
            applied=applied,
        )

        if self.context.message_number is not None:
            result.renderable = False
            result.reason = f"Message {self.context.message_number} requested"
        elif self.document.is_empty():
            result.renderable = False
            result.reason = EMPTY_REASON

        if result.renderable:
            result.wrapper = self.wrapper_build(self.document.text)
            LOG("Wrapper document assembled", level=2)
        else:
            LOG(f"Not renderable: {result.reason}", level=1)
        return result

    @staticmethod
    def cacheKey_make(expression: str) -> str:
        """md5 hex digest of expression, naming the cached image"""
        return hashlib.md5(expression.encode("utf-8")).hexdigest()

    def usepackage_render(self) -> str:
        """One \\usepackage line per declared package"""
        lines = []
        for name, options in self.context.packages:
            if options:
                lines.append(f"\\usepackage[{options}]{{{name}}}\n")
            else:
                lines.append(f"\\usepackage{{{name}}}\n")
        return "".join(lines)

    def wrapper_build(self, expression: str) -> str:
        """
        Fill the wrapper template around expression

        The depth template is used when \\depth was requested. \\eval{}
        directives in the template itself (such as \\fs) are resolved
        before the placeholders are filled, so the expression is never
        rescanned.

        Args:
            expression: Sanitized expression

        Returns:
            Complete LaTeX document
        """
        context = self.context
        template = DocumentText(DEPTH_WRAPPER if context.depth else DEFAULT_WRAPPER)
        eval_resolve(template, context)

        pdf_picture = context.picture and context.latex_method == LatexMethod.PDFLATEX
        setlength = ""
        if context.picture and "\\unitlength" not in expression:
            setlength = "\\setlength{\\unitlength}{1.0in}"

        fills = (
            ("%%dclassoptions%%", self.settings.class_options),
            ("%%dclass%%", self.settings.document_class),
            ("%%usepackage%%", self.usepackage_render()),
            ("%%pagestyle%%", "" if pdf_picture else "\\pagestyle{empty}"),
            ("%%previewenviron%%", "\\PreviewEnvironment{picture}" if pdf_picture else ""),
            ("%%fontsize%%", context.size_directive),
            ("%%setlength%%", setlength),
            ("%%beginmath%%", BEGIN_MATH[context.mathmode]),
            ("%%endmath%%", END_MATH[context.mathmode]),
        )
        for placeholder, value in fills:
            template.replace(placeholder, value, max_count=1)
        # expression last, so nothing inside it is taken for a placeholder
        template.replace("%%expression%%", expression, max_count=1)
        return template.text
