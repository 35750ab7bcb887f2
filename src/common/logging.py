"""Route the `settings` and `common` loggers through structlog.

The modules log with the standard library; `configure_logging` installs a
structlog formatter on one stream handler, rendering either console lines or
JSON lines.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

import structlog


LOGGER_NAMES = ("settings", "common")


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
    stream: Optional[IO[str]] = None,
) -> logging.Handler:
    """Attach a structlog-rendering handler to the package loggers.

    Args:
        verbose: DEBUG output when True, else WARNING+.
        log_json: JSON lines instead of console lines.
        stream: where to write; defaults to stderr.

    Returns the installed handler. Calling again replaces it.
    """
    stream = stream or sys.stderr
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    handler.set_name("settings-structlog")

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        for old in [h for h in logger.handlers if h.get_name() == "settings-structlog"]:
            logger.removeHandler(old)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
        logger.propagate = False
    return handler
