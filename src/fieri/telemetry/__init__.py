"""
Telemetry module for fieri.

Provides structured logging with credential masking.
"""

from fieri.telemetry.logger import (
    CallContext,
    FieriLogger,
    JsonFormatter,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    clear_call_context,
    get_call_context,
    get_logger,
    set_call_context,
)

__all__ = [
    "CallContext",
    "FieriLogger",
    "JsonFormatter",
    "LogLevel",
    "SensitiveDataMasker",
    "TextFormatter",
    "clear_call_context",
    "get_call_context",
    "get_logger",
    "set_call_context",
]
