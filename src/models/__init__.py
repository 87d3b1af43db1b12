"""
Models package for texguard

Contains data structures and type definitions for the sanitizing pipeline.
"""

from .state import ProgramState, pipeline
from .context import ParseContext, MathMode, ImageType, LatexMethod, ImageMethod, SIZE_DIRECTIVES
from .directives import (
    ArgFormat,
    DenyAction,
    Validity,
    DirectiveCategory,
    DirectiveSpec,
    DriverSpec,
    DENYLIST,
    argformat_decode,
)
from .parser import SegmentScan, QuoteSpan, TemplateMatch, ExtractStatus, ArgumentSet

__all__ = [
    "ProgramState",
    "pipeline",
    "ParseContext",
    "MathMode",
    "ImageType",
    "LatexMethod",
    "ImageMethod",
    "SIZE_DIRECTIVES",
    "ArgFormat",
    "DenyAction",
    "Validity",
    "DirectiveCategory",
    "DirectiveSpec",
    "DriverSpec",
    "DENYLIST",
    "argformat_decode",
    "SegmentScan",
    "QuoteSpan",
    "TemplateMatch",
    "ExtractStatus",
    "ArgumentSet",
]
