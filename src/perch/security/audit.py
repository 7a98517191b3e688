"""Access-control audit trail.

Middleware reports notable decisions (a login redirect, a guest bounced
home) with ``emit_security_event``. Each event goes to the
``perch.security`` logger at DEBUG and, when the application installed
one, to a sink callable::

    set_security_event_sink(lambda event: metrics.incr(event.name))
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any, TypeAlias

logger = logging.getLogger("perch.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    name: str
    path: str | None = None
    method: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time)


SecurityEventSink: TypeAlias = Callable[[SecurityEvent], None]

_lock = threading.Lock()
_sinks: list[SecurityEventSink] = []


def set_security_event_sink(sink: SecurityEventSink | None) -> None:
    """Install *sink* for the whole process, replacing any previous one.

    ``None`` turns delivery off; logging continues regardless.
    """
    with _lock:
        _sinks[:] = [] if sink is None else [sink]


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Record *name* for *request* (anything with ``path``/``method``)."""
    event = SecurityEvent(
        name=name,
        path=getattr(request, "path", None),
        method=getattr(request, "method", None),
        details=dict(details or {}),
    )
    logger.debug("%s %s %s %s", event.name, event.method, event.path, event.details)
    with _lock:
        sinks = tuple(_sinks)
    for sink in sinks:
        sink(event)
