"""
texguard - LaTeX expression sanitizer

Makes user-submitted LaTeX math safe to typeset and assembles the wrapper
document around it.
"""

__version__ = "1.0.0"
__author__ = "Rudolph Pienaar"
__email__ = "rudolph.pienaar@gmail.com"

from .lib import (
    Compiler,
    CompileResult,
    DirectiveRegistry,
    DocumentText,
    preprocess_entities,
    validate,
    extract_directive,
    evaluate,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Compiler",
    "CompileResult",
    "DirectiveRegistry",
    "DocumentText",
    "preprocess_entities",
    "validate",
    "extract_directive",
    "evaluate",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
