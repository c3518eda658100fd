"""Append-only audit trail of marketplace transactions.

Every successful operation on the Transaction Engine appends one or more
event records here. Records are immutable once written and carry a hash
of their canonical JSON body so the trail can be checked for tampering.
Failed operations append nothing.

The log lives in memory for the lifetime of the engine. ``to_jsonl``
renders it for export; there is no loader.
"""

from __future__ import annotations

import enum
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional


class EventKind(str, enum.Enum):
    """Classification of marketplace events."""
    PARTICIPANT_REGISTERED = "participant_registered"
    PROJECT_POSTED = "project_posted"
    BID_SUBMITTED = "bid_submitted"
    FREELANCER_HIRED = "freelancer_hired"
    PROJECT_COMPLETED = "project_completed"
    REVIEW_ADDED = "review_added"
    REPUTATION_RECOMPUTED = "reputation_recomputed"


def _canonical_hash(
    event_id: str,
    event_kind: str,
    timestamp_utc: str,
    actor_id: str,
    payload: dict[str, Any],
) -> str:
    canonical = json.dumps(
        {
            "event_id": event_id,
            "event_kind": event_kind,
            "timestamp_utc": timestamp_utc,
            "actor_id": actor_id,
            "payload": payload,
        },
        sort_keys=True,
        ensure_ascii=False,
        default=str,
    ).encode("utf-8")
    return f"sha256:{hashlib.sha256(canonical).hexdigest()}"


@dataclass(frozen=True)
class EventRecord:
    """A single immutable event in the audit trail."""
    event_id: str
    event_kind: EventKind
    timestamp_utc: str
    actor_id: str
    payload: dict[str, Any]
    event_hash: str

    @staticmethod
    def create(
        event_id: str,
        event_kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
        timestamp_utc: Optional[datetime] = None,
    ) -> EventRecord:
        """Create a new event record with computed hash."""
        ts = timestamp_utc or datetime.now(timezone.utc)
        ts_str = ts.strftime("%Y-%m-%dT%H:%M:%SZ")
        return EventRecord(
            event_id=event_id,
            event_kind=event_kind,
            timestamp_utc=ts_str,
            actor_id=actor_id,
            payload=payload,
            event_hash=_canonical_hash(
                event_id, event_kind.value, ts_str, actor_id, payload,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_kind": self.event_kind.value,
            "timestamp_utc": self.timestamp_utc,
            "actor_id": self.actor_id,
            "payload": self.payload,
            "event_hash": self.event_hash,
        }


class EventLog:
    """Append-only event log.

    Events can only be appended, never modified or deleted.
    """

    def __init__(self) -> None:
        self._events: list[EventRecord] = []
        self._event_ids: set[str] = set()

    def append(self, event: EventRecord) -> None:
        """Append an event to the log.

        Raises ValueError if event_id is a duplicate.
        """
        if event.event_id in self._event_ids:
            raise ValueError(f"Duplicate event ID: {event.event_id}")
        self._events.append(event)
        self._event_ids.add(event.event_id)

    def events(self, kind: Optional[EventKind] = None) -> list[EventRecord]:
        """Return events, optionally filtered by kind."""
        if kind is None:
            return list(self._events)
        return [e for e in self._events if e.event_kind == kind]

    def event_hashes(self, kind: Optional[EventKind] = None) -> list[str]:
        return [e.event_hash for e in self.events(kind)]

    def verify(self) -> list[str]:
        """Recompute every hash. Returns integrity errors (empty = intact)."""
        errors: list[str] = []
        for position, event in enumerate(self._events, 1):
            expected = _canonical_hash(
                event.event_id,
                event.event_kind.value,
                event.timestamp_utc,
                event.actor_id,
                event.payload,
            )
            if event.event_hash != expected:
                errors.append(
                    f"Integrity check failed (position {position}): event "
                    f"{event.event_id} stored hash {event.event_hash} != computed {expected}"
                )
        return errors

    def to_jsonl(self) -> str:
        """Render the log as JSON lines, one event per line."""
        return "".join(
            json.dumps(e.to_dict(), sort_keys=True, ensure_ascii=False, default=str) + "\n"
            for e in self._events
        )

    @property
    def count(self) -> int:
        return len(self._events)

    @property
    def last_event(self) -> Optional[EventRecord]:
        return self._events[-1] if self._events else None
