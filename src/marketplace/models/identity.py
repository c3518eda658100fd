"""Participant models — the two closed roles and the participant record.

Role is fixed at creation. Reputation is only meaningful for freelancers
and stays None ("no rating yet") until the first review lands; it is never
defaulted to 0, so "unrated" cannot be mistaken for "rated 0".
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class Role(str, enum.Enum):
    """Closed set of participant roles."""
    CLIENT = "Client"
    FREELANCER = "Freelancer"


@dataclass
class Participant:
    """A registered client or freelancer.

    Only the Transaction Engine writes to ``reputation``; every other
    field is set once at registration.
    """
    participant_id: str
    name: str
    role: Role
    title: Optional[str] = None
    reputation: Optional[float] = None
    registered_utc: Optional[datetime] = None

    @property
    def is_client(self) -> bool:
        return self.role == Role.CLIENT

    @property
    def is_freelancer(self) -> bool:
        return self.role == Role.FREELANCER
