"""
texguard - LaTeX expression sanitizer

Neutralizes dangerous directives in user-submitted LaTeX math and collects
the rendering directives that steer how it is typeset.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .document import DocumentText, string_change, string_replace
from .parser import Parser, extract_directive
from .entities import preprocess_entities
from .validator import validate
from .evaluator import evaluate, SymbolTable, NOVALUE
from .denylist import DenylistError, denylist_load
from .directives import DirectiveRegistry
from .compiler import Compiler, CompileResult
from .log import LOG, state_connectToLogger

__all__ = [
    "DocumentText",
    "string_change",
    "string_replace",
    "Parser",
    "extract_directive",
    "preprocess_entities",
    "validate",
    "evaluate",
    "SymbolTable",
    "NOVALUE",
    "DenylistError",
    "denylist_load",
    "DirectiveRegistry",
    "Compiler",
    "CompileResult",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
