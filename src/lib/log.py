"""
Centralized logging using Loguru with context-aware verbosity.

LOG() respects the verbosity of the ProgramState connected to the current
context, so interpreter, glob and bundle code can log without having the
state passed to them. With no state connected (library use, tests) nothing
is logged.

Usage:
    from rucksack.lib.log import LOG, state_connectToLogger

    # At start of the CLI pipeline:
    state_connectToLogger(state)

    LOG("Interpreting manifest", level=1)        # normal
    LOG("Added page ui (12 images)", level=2)    # -v
    LOG("state: TEXTURE_PROP, string: 'images'", level=3)  # -vv
"""

from loguru import logger
from typing import Any, Optional
from contextvars import ContextVar
import sys

# Context variable to hold current ProgramState
_program_state: ContextVar[Optional[Any]] = ContextVar('program_state', default=None)

logger_format = (
    "<green>{time:HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<cyan>{module: <12}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

logger.remove()  # Remove default handler
logger.add(sys.stderr, format=logger_format, level="DEBUG")


def state_connectToLogger(state: Any) -> None:
    """
    Connect a ProgramState to the logging context.

    Args:
        state: Object with a verbosity attribute (normally ProgramState)
    """
    _program_state.set(state)


def LOG(message: str, level: int = 1, **kwargs: Any) -> None:
    """
    Log message if current state's verbosity allows.

    Args:
        message: Log message to display
        level: Minimum verbosity level required (1=normal, 2=verbose, 3=trace)
        **kwargs: Additional loguru metadata

    Verbosity levels:
        1 = Progress (default)
        2 = Every commit and glob (-v)
        3 = Every manifest event and state (-vv)
    """
    state = _program_state.get()

    if state and hasattr(state, 'verbosity') and state.verbosity >= level:
        logger.opt(depth=1).debug(message, **kwargs)
