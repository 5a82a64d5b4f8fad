"""
Loguru helpers: nested log contexts with optional timing, and sink setup.

Library code only emits records; handlers are installed by ``setup_logger``,
which the command-line runner calls.
"""

import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from loguru import logger

_context_stack: ContextVar[tuple[str, ...]] = ContextVar("_context_stack", default=())


def current_context() -> str:
    return " | ".join(_context_stack.get())


@contextmanager
def log_context(name: str, timed: bool = True) -> Iterator[None]:
    """
    Add ``name`` to the context of every record logged inside the block.

    Contexts nest and are rendered as ``outer | inner``. With ``timed`` the exit
    is logged together with the elapsed time.

    Example:
        >>> with log_context("projection"):
        ...     logger.debug("Expanding rent")
        # Starting projection
        # Expanding rent   (context: projection)
        # Ending projection in 0.01 seconds
    """
    start_time = time.perf_counter()
    token = _context_stack.set((*_context_stack.get(), name))

    with logger.contextualize(context=current_context()):
        logger.debug(f"Starting {name}")
        try:
            yield
        finally:
            if timed:
                logger.debug(f"Ending {name} in {time.perf_counter() - start_time:.2f} seconds")
            _context_stack.reset(token)


def _format_with_context(record: Any) -> str:
    context = record["extra"].get("context", "")
    context_prefix = "<cyan>{extra[context]}</cyan> | " if context else ""
    return (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
        + context_prefix
        + "<level>{message}</level>\n{exception}"
    )


def setup_logger(level: str = "INFO") -> None:
    """Replace loguru's default handler with a single stderr sink showing the log context."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=_format_with_context, colorize=True)
