from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

DebugLogger = Callable[[str], None]

_CONFIGURED_AS: tuple[str, int] | None = None


def setup_logging(filename: str | Path | None = None, *, verbose: bool = False) -> structlog.BoundLogger:
    """Set up structured logging for the code_to_prompt package.

    Calling it again with the same arguments is a no-op; a different destination
    or verbosity reconfigures both stdlib logging and structlog.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        verbose: Lower the threshold to DEBUG so per-path decisions are reported.

    Returns:
        A structlog logger instance configured for the code_to_prompt package.
    """
    global _CONFIGURED_AS  # noqa: PLW0603
    level = logging.DEBUG if verbose else logging.INFO
    wanted = (str(filename or ""), level)
    if wanted != _CONFIGURED_AS:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=level,
            handlers=handlers,
            format="%(message)s",
            force=True,
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )
        _CONFIGURED_AS = wanted

    return structlog.get_logger("code_to_prompt")


def noop_debug(_message: str) -> None:
    """Discard a debug message."""


logger = setup_logging()
