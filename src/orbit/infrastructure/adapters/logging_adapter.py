"""Logging adapter implementing LoggingPort."""

from typing import Any

from orbit.domain.base.ports.logging_port import LoggingPort
from orbit.infrastructure.logging.logger import get_logger


class LoggingAdapter(LoggingPort):
    """
    Routes LoggingPort calls to a package logger.

    Context bound at construction (or through ``bind``) is merged into the
    ``extra`` of every record, so the structlog renderer emits it as fields.
    Keys passed in a call's own ``extra`` take precedence.
    """

    def __init__(self, name: str = "session", **context: Any) -> None:
        self._logger = get_logger(name)
        self._context = context

    @property
    def name(self) -> str:
        return self._logger.name

    @property
    def context(self) -> dict[str, Any]:
        return dict(self._context)

    def bind(self, **context: Any) -> "LoggingAdapter":
        """Return an adapter for the same logger with extra bound context."""
        return LoggingAdapter(self._logger.name, **{**self._context, **context})

    def _prepare_kwargs(self, kwargs: dict[str, Any]) -> dict[str, Any]:
        if self._context:
            kwargs["extra"] = {**self._context, **(kwargs.get("extra") or {})}
        kwargs.setdefault("stacklevel", 2)
        return kwargs

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **self._prepare_kwargs(kwargs))

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **self._prepare_kwargs(kwargs))

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **self._prepare_kwargs(kwargs))

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **self._prepare_kwargs(kwargs))

    def exception(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.exception(message, *args, **self._prepare_kwargs(kwargs))
