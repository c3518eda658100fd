"""Audit trail — append-only record of every marketplace transaction."""

from marketplace.audit.event_log import EventKind, EventLog, EventRecord

__all__ = ["EventKind", "EventLog", "EventRecord"]
