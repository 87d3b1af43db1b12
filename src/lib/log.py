"""
Centralized logging using Loguru with context-aware verbosity.

This module provides a LOG() function that respects the current state's
verbosity level without requiring explicit state passing. The state is
either the CLI ProgramState or a ParseContext when the engine is driven
as a library.

Usage:
    from texguard.lib.log import LOG, state_connectToLogger

    # At start of a pipeline stage or compile:
    state_connectToLogger(state)

    # Anywhere in that context:
    LOG("Pipeline milestone", level=1)
    LOG("Directive \\dpi{300} recognized", level=2)
    LOG("Scanner trace", level=3)
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current state
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

# Configure loguru with texguard-specific format
logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <7}</level> │ "
    "<cyan>{function: <22}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a state object to the logging context.

    Args:
        state: ProgramState or ParseContext with a verbosity attribute

    Example:
        def expression_sanitize(inputstate: ProgramState) -> ProgramState:
            state = inputstate.copy()
            state_connectToLogger(state)
            LOG("Sanitizing expression...", level=1)
    """
    _program_state.set(state)


def verbosity_get() -> int:
    """Verbosity of the connected state, 0 when nothing is connected"""
    state = _program_state.get()
    return getattr(state, 'verbosity', 0) if state is not None else 0


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=debug)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Pipeline milestones (default)
        2 = Every directive recognized or neutralized (-v)
        3 = Scanner traces (-vv or higher)
    """
    if verbosity_get() >= level:
        logger.opt(depth=1).debug(message, **kwargs)
