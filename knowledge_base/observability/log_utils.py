"""
Logging utilities for safe structured logging.

Converts arbitrary values into short log-safe strings and keeps credentials
carried on bot configurations (API keys, system prompts) out of log records.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any

REDACTED_KEYS = frozenset({"api_key", "bot_api_key", "system_prompt"})
REDACTED = "***"


def safe_log_value(value: Any, max_length: int = 200) -> str:
    """
    Convert any value to a bounded string for logging.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    if value is None:
        return "None"
    if isinstance(value, (bytes, bytearray)):
        return f"bytes({len(value)})"
    if isinstance(value, (list, tuple, set)):
        return f"{type(value).__name__}({len(value)} items)"
    if isinstance(value, dict):
        return f"dict({len(value)} keys)"

    val_str = value if isinstance(value, str) else repr(value)
    if len(val_str) > max_length:
        return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
    return val_str


def safe_context(**context: Any) -> dict[str, str]:
    """
    Build a logging extra dict with credentials masked.

    Args:
        **context: Arbitrary key-value pairs

    Returns:
        dict[str, str]: Log-safe values keyed as given
    """
    return {
        key: REDACTED if key in REDACTED_KEYS and val else safe_log_value(val)
        for key, val in context.items()
    }


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: BaseException,
    **context: Any,
) -> None:
    """
    Log an exception with its traceback and masked context.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        **context: Additional context
    """
    extra = safe_context(**context)
    extra.update({"error_type": type(exc).__name__, "error_msg": safe_log_value(str(exc))})
    logger.error(message, extra=extra, exc_info=exc)
