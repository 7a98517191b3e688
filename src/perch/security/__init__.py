"""Security helpers: access-control audit events."""

from perch.security.audit import SecurityEvent, emit_security_event, set_security_event_sink

__all__ = [
    "SecurityEvent",
    "emit_security_event",
    "set_security_event_sink",
]
