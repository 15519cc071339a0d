"""Correlation ids tying a callback, its Laybuy requests and its audit entries together.

An id arriving on an inbound request is reused only when it looks like an
id; anything else (oversized, control characters, query fragments) is
replaced so it never reaches the logs, the audit trail or Laybuy.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

CORRELATION_HEADER = "X-Correlation-Id"
CORRELATION_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,64}")

_current: ContextVar[Optional[str]] = ContextVar("laybuy_correlation_id", default=None)


def new_correlation_id() -> str:
    return f"lb_{uuid.uuid4().hex[:16]}"


def bind_correlation_id(inbound: Optional[str] = None) -> str:
    """Bind the id for the current task: ``inbound`` if acceptable, else a new one."""
    if inbound is None or not CORRELATION_ID_PATTERN.fullmatch(inbound):
        inbound = new_correlation_id()
    _current.set(inbound)
    return inbound


def current_correlation_id() -> str:
    return _current.get() or bind_correlation_id()
