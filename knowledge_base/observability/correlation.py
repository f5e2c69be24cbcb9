"""
Correlation IDs for request tracing.

The current ID lives in a ContextVar, so it follows a request through
awaits and into asyncio.to_thread workers (which copy the context).

Dependencies: contextvars
System role: Request tracing across service boundaries
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Current correlation ID, or '' outside a request."""
    return correlation_id_ctx.get()


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """
    Bind a correlation ID for the duration of a block.

    The previous value is restored on exit, so scopes nest.

    Args:
        correlation_id: Caller-supplied ID (a new UUID4 if empty)

    Yields:
        str: The bound correlation ID
    """
    value = (correlation_id or "").strip() or str(uuid.uuid4())
    token = correlation_id_ctx.set(value)
    try:
        yield value
    finally:
        correlation_id_ctx.reset(token)
