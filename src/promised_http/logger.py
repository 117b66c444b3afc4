"""Level-filtered logging wrapper shared by the executor and transports."""

from __future__ import annotations

import logging
from typing import Any, Callable, Literal, Protocol

LogLevel = Literal["trace", "debug", "info", "warn", "error"]

TRACE_LEVEL = 5
logging.addLevelName(TRACE_LEVEL, "TRACE")

DEFAULT_LOGGER_NAME = "promised_http"


class LoggerProtocol(Protocol):
    """Loggers with a generic ``log`` entry point, such as ``logging.Logger``."""

    def log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None: ...


class LevelLoggerProtocol(Protocol):
    """Loggers exposing one method per level.

    ``trace`` and ``warn`` are looked up too when present; without them
    trace records go to ``debug`` and ``warn`` is only tried after ``warning``.
    """

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None: ...

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None: ...


# method names probed on a LevelLoggerProtocol logger, in order
LEVEL_METHODS: dict[int, tuple[str, ...]] = {
    TRACE_LEVEL: ("trace", "debug"),
    logging.DEBUG: ("debug",),
    logging.INFO: ("info",),
    logging.WARNING: ("warning", "warn"),
    logging.ERROR: ("error",),
}


LOG_LEVEL_PRIORITY: dict[LogLevel, int] = {
    "trace": 0,
    "debug": 1,
    "info": 2,
    "warn": 3,
    "error": 4,
}


class BoundLogger:
    """Wraps a ``logging.Logger`` (or duck-typed object) with a minimum level."""

    def __init__(
        self,
        logger: LoggerProtocol | LevelLoggerProtocol | None = None,
        *,
        level: LogLevel = "info",
    ) -> None:
        if level not in LOG_LEVEL_PRIORITY:
            raise ValueError(f"Unknown log level: {level!r}")
        self._logger = logger or _default_logger()
        self._level = level

    @property
    def level(self) -> LogLevel:
        return self._level

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("trace"):
            self._log(TRACE_LEVEL, msg, *args, **kwargs)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("debug"):
            self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("info"):
            self._log(logging.INFO, msg, *args, **kwargs)

    def warn(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("warn"):
            self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self._enabled("error"):
            self._log(logging.ERROR, msg, *args, **kwargs)

    def child(self, name: str) -> "BoundLogger":
        """Scope the logger under ``name``, keeping the same minimum level."""
        if isinstance(self._logger, logging.Logger):
            base = self._logger.getChild(name)
        else:
            base = self._logger
        return BoundLogger(base, level=self._level)

    def _enabled(self, level: LogLevel) -> bool:
        return LOG_LEVEL_PRIORITY[level] >= LOG_LEVEL_PRIORITY[self._level]

    def _log(self, level: int, msg: str, *args: Any, **kwargs: Any) -> None:
        try:
            if hasattr(self._logger, "log"):
                self._logger.log(level, msg, *args, **kwargs)
                return
            handler = self._level_method(level)
            if handler is not None:
                handler(msg, *args, **kwargs)
        except Exception:
            # Never let logging failures bubble up into request handling
            pass

    def _level_method(self, level: int) -> Callable[..., Any] | None:
        for name in LEVEL_METHODS.get(level, ()):
            method = getattr(self._logger, name, None)
            if callable(method):
                return method
        return None


def _default_logger() -> logging.Logger:
    logger = logging.getLogger(DEFAULT_LOGGER_NAME)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(TRACE_LEVEL)
    return logger


def create_logger(*, logger: Any | None = None, level: LogLevel = "info") -> BoundLogger:
    if isinstance(logger, BoundLogger):
        return logger
    return BoundLogger(logger, level=level)


__all__ = ["BoundLogger", "LevelLoggerProtocol", "LogLevel", "LoggerProtocol", "create_logger"]
