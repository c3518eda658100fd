"""Identity store — registry of clients and freelancers.

Pure data: insertion and lookup only. Participants are never deleted and
their role never changes. A freelancer's reputation starts as None and is
written only by the Transaction Engine after a review is recorded.

Thread-safety: this class is not thread-safe. The caller must
synchronise access if used from multiple threads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from marketplace.errors import NotFound, ValidationError
from marketplace.models.identity import Participant, Role
from marketplace.sequence import IdSequence


def coerce_role(role: Role | str) -> Role:
    """Accept a Role or its exact string value; anything else is invalid."""
    if isinstance(role, Role):
        return role
    if isinstance(role, str):
        for candidate in Role:
            if candidate.value == role:
                return candidate
    raise ValidationError(
        f"Unrecognised role: {role!r}. Expected one of: "
        + ", ".join(r.value for r in Role)
    )


class IdentityStore:
    """Holds every registered participant, keyed by id."""

    def __init__(
        self,
        id_prefix: str = "U",
        default_freelancer_title: Optional[str] = None,
    ) -> None:
        self._participants: dict[str, Participant] = {}
        self._ids = IdSequence(id_prefix)
        self._default_freelancer_title = default_freelancer_title

    def register(
        self,
        name: str,
        role: Role | str,
        title: Optional[str] = None,
    ) -> Participant:
        """Register a new participant under a fresh id.

        Raises ValidationError if name is blank, role is unrecognised, or
        title is given but is not text.
        """
        clean_name = name.strip() if isinstance(name, str) else ""
        if not clean_name:
            raise ValidationError("Participant name must not be empty")
        resolved_role = coerce_role(role)

        if title is not None and not isinstance(title, str):
            raise ValidationError(f"title must be text, got {title!r}")
        clean_title = title.strip() if title and title.strip() else None
        if clean_title is None and resolved_role == Role.FREELANCER:
            clean_title = self._default_freelancer_title

        participant = Participant(
            participant_id=self._ids.next_id(),
            name=clean_name,
            role=resolved_role,
            title=clean_title,
            reputation=None,
            registered_utc=datetime.now(timezone.utc),
        )
        self._participants[participant.participant_id] = participant
        return participant

    def find_by_id(self, participant_id: str) -> Optional[Participant]:
        """Look up a participant. Returns None when the id is unknown."""
        return self._participants.get(participant_id)

    def get(self, participant_id: str) -> Participant:
        """Look up a participant, raising NotFound when the id is unknown."""
        participant = self._participants.get(participant_id)
        if participant is None:
            raise NotFound(f"Participant not found: {participant_id}")
        return participant

    def all_participants(self, role: Optional[Role] = None) -> list[Participant]:
        """Return participants in registration order, optionally by role."""
        if role is None:
            return list(self._participants.values())
        return [p for p in self._participants.values() if p.role == role]

    def set_reputation(self, participant_id: str, score: Optional[float]) -> None:
        """Overwrite a freelancer's displayed reputation."""
        participant = self.get(participant_id)
        if not participant.is_freelancer:
            raise ValidationError(
                f"Reputation applies to freelancers only: {participant_id}"
            )
        participant.reputation = score

    @property
    def count(self) -> int:
        return len(self._participants)

    def count_by_role(self) -> dict[str, int]:
        counts = {r.value: 0 for r in Role}
        for p in self._participants.values():
            counts[p.role.value] += 1
        return counts
