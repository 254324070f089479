"""Logger factory and structured log setup."""

import logging
import sys
from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from orbit.config.schemas import LoggingConfig

ROOT_LOGGER_NAME = "orbit"

_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger.

    Loggers live under the ``orbit`` namespace so a single call to
    ``setup_logging`` configures every module of the package.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def _shared_processors() -> list:
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def setup_logging(config: Optional["LoggingConfig"] = None) -> logging.Logger:
    """
    Attach a structlog-rendered handler to the ``orbit`` logger.

    Records emitted through standard ``logging`` calls, including their
    ``extra`` context, are rendered as JSON lines or as coloured console
    output depending on ``config.format``. Calling it again replaces the
    previously installed handler.

    Args:
        config: Logging configuration; defaults are used when omitted.

    Returns:
        The configured ``orbit`` logger.
    """
    global _handler

    if config is None:
        from orbit.config.schemas import LoggingConfig

        config = LoggingConfig()

    if config.format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _handler is not None:
        root.removeHandler(_handler)

    if config.file:
        handler: logging.Handler = logging.FileHandler(config.file)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root.addHandler(handler)
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    root.propagate = config.propagate
    _handler = handler

    return root
