"""
Structured logging for fieri.

Loggers accept keyword fields alongside the message; every record passes
through a ``SensitiveDataMasker`` so credentials never reach the output.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TextIO

from fieri.config import LOG_FORMAT_ENV, LOG_LEVEL_ENV

_REDACTED = "***REDACTED***"

# Fields attached to every record emitted inside one call
_call_context: ContextVar[dict[str, Any] | None] = ContextVar("fieri_call_context", default=None)


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        return getattr(logging, self.value)

    @classmethod
    def parse(cls, value: str | LogLevel) -> LogLevel:
        """Parse a case-insensitive level name.

        Raises:
            ValueError: If the name is not a known level
        """
        if isinstance(value, LogLevel):
            return value
        try:
            return cls(value.strip().upper())
        except ValueError:
            names = ", ".join(level.value.lower() for level in cls)
            raise ValueError(f"unknown log level {value!r} (expected one of: {names})") from None


@dataclass
class CallContext:
    """Per-call logging fields.

    Attributes:
        method: HTTP method of the call
        path: Endpoint path relative to the base URL
        model: Model named by the request, when any
        extra: Additional fields
    """

    method: str | None = None
    path: str | None = None
    model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.method:
            result["method"] = self.method
        if self.path:
            result["path"] = self.path
        if self.model:
            result["model"] = self.model
        result.update(self.extra)
        return result


def get_call_context() -> CallContext:
    """Get the logging context of the current call."""
    data = _call_context.get()
    if not data:
        return CallContext()
    known = {k: data[k] for k in ("method", "path", "model") if k in data}
    extra = {k: v for k, v in data.items() if k not in known}
    return CallContext(**known, extra=extra)


def set_call_context(context: CallContext) -> None:
    """Set the logging context for the current async task."""
    _call_context.set(context.to_dict())


def clear_call_context() -> None:
    _call_context.set(None)


class SensitiveDataMasker:
    """Masks credentials in log messages and structured fields."""

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        # Secret keys
        (r"sk-[A-Za-z0-9_\-]{8,}", "sk-" + _REDACTED),
        (r"(api[_-]?key[\"']?\s*[:=]\s*[\"']?)([^\"'\s,}]+)", r"\1" + _REDACTED),
        (r"(Bearer\s+)([^\s\"',}]+)", r"\1" + _REDACTED),
        (r"(Authorization[\"']?\s*[:=]\s*[\"']?)(?!Bearer\s)([^\"'\s,}]+)", r"\1" + _REDACTED),
        (r"(OPENAI_API_KEY=)([^\s]+)", r"\1" + _REDACTED),
    ]

    SENSITIVE_KEYS: ClassVar[tuple[str, ...]] = ("key", "token", "secret", "password", "auth")

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        self._patterns = [
            (re.compile(p, re.IGNORECASE), r)
            for p, r in (patterns or self.DEFAULT_PATTERNS)
        ]

    def mask(self, text: str) -> str:
        """Mask sensitive data in text.

        Args:
            text: Text to mask

        Returns:
            Masked text
        """
        result = text
        for pattern, replacement in self._patterns:
            result = pattern.sub(replacement, result)
        return result

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive values in a dictionary, recursively.

        Values under keys that look like credentials are replaced outright.
        """
        result: dict[str, Any] = {}
        for key, value in data.items():
            if any(s in key.lower() for s in self.SENSITIVE_KEYS):
                result[key] = _REDACTED
            elif isinstance(value, str):
                result[key] = self.mask(value)
            elif isinstance(value, dict):
                result[key] = self.mask_dict(value)
            elif isinstance(value, list):
                result[key] = [
                    self.mask_dict(v) if isinstance(v, dict)
                    else self.mask(v) if isinstance(v, str)
                    else v
                    for v in value
                ]
            else:
                result[key] = value
        return result


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__()
        self._masker = masker or SensitiveDataMasker()

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime(record.created))
            + f".{int(record.msecs):03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": self._masker.mask(record.getMessage()),
        }

        if context := get_call_context().to_dict():
            log_data["context"] = self._masker.mask_dict(context)

        extra = getattr(record, "extra_fields", None)
        if extra:
            log_data.update(self._masker.mask_dict(extra))

        if record.exc_info:
            log_data["exception"] = self._masker.mask(self.formatException(record.exc_info))

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable single-line formatter with ``key=value`` fields."""

    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._masker = masker or SensitiveDataMasker()

    def format(self, record: logging.LogRecord) -> str:
        fields = {**get_call_context().to_dict(), **(getattr(record, "extra_fields", None) or {})}
        result = self._masker.mask(super().format(record))
        if fields:
            masked = self._masker.mask_dict(fields)
            result = f"{result} | " + " ".join(f"{k}={v}" for k, v in masked.items())
        return result


class FieriLogger:
    """Logger with structured keyword fields.

    Example:
        >>> logger = FieriLogger.get_logger("fieri.client")
        >>> logger.debug("request sent", path="chat/completions", status=200)
    """

    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[LogLevel] = LogLevel.WARNING
    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(
        cls,
        level: LogLevel | str = LogLevel.WARNING,
        format: str = "text",
        stream: TextIO | None = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Configure every fieri logger.

        Args:
            level: Minimum level to emit
            format: Output format ('json' or 'text')
            stream: Output stream (default: stderr)
            masker: Sensitive data masker

        Raises:
            ValueError: On an unknown level or format
        """
        if format not in ("json", "text"):
            raise ValueError(f"unknown log format {format!r} (expected 'json' or 'text')")
        cls._level = LogLevel.parse(level)

        formatter: logging.Formatter = (
            JsonFormatter(masker=masker) if format == "json" else TextFormatter(masker=masker)
        )
        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(formatter)

        for logger in cls._loggers.values():
            cls._attach(logger)

    @classmethod
    def configure_from_env(cls, level: LogLevel | str | None = None) -> None:
        """Configure from FIERI_LOG_LEVEL / FIERI_LOG_FORMAT.

        An explicit ``level`` wins over the environment.
        """
        cls.configure(
            level=level or os.getenv(LOG_LEVEL_ENV) or LogLevel.WARNING,
            format=(os.getenv(LOG_FORMAT_ENV) or "text").lower(),
        )

    @classmethod
    def get_logger(cls, name: str) -> FieriLogger:
        """Get or create a logger.

        Args:
            name: Logger name

        Returns:
            Logger instance
        """
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            logger.propagate = False
            cls._loggers[name] = logger
            cls._attach(logger)
        return cls(cls._loggers[name])

    @classmethod
    def _attach(cls, logger: logging.Logger) -> None:
        logger.setLevel(cls._level.to_logging_level())
        logger.handlers.clear()
        if cls._handler is None:
            cls._handler = logging.StreamHandler(sys.stderr)
            cls._handler.setFormatter(TextFormatter())
        logger.addHandler(cls._handler)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: LogLevel) -> bool:
        return self._logger.isEnabledFor(level.to_logging_level())

    def _log(self, level: int, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = {"extra_fields": kwargs} if kwargs else {}
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an error with the active traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)


def get_logger(name: str) -> FieriLogger:
    """Get a logger instance.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    return FieriLogger.get_logger(name)
