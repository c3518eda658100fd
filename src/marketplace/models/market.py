"""Project and bid models.

Project lifecycle: OPEN → IN_PROGRESS → COMPLETED
Bids are immutable once submitted and are never deleted; after a hire the
remaining bids stay on record but the project is closed to bidding.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional


class ProjectStatus(str, enum.Enum):
    """Lifecycle state of a project."""
    OPEN = "Open"
    IN_PROGRESS = "InProgress"
    COMPLETED = "Completed"


@dataclass
class Project:
    """A piece of work posted by a client.

    Invariant: hired_freelancer_id is None iff status is OPEN. It is set
    exactly once, on the OPEN → IN_PROGRESS transition.
    """
    project_id: str
    title: str
    description: str
    budget: Decimal
    client_id: str
    skills: list[str] = field(default_factory=list)
    status: ProjectStatus = ProjectStatus.OPEN
    hired_freelancer_id: Optional[str] = None
    created_utc: Optional[datetime] = None
    hired_utc: Optional[datetime] = None
    completed_utc: Optional[datetime] = None

    @property
    def accepting_bids(self) -> bool:
        return self.status == ProjectStatus.OPEN


@dataclass(frozen=True)
class Bid:
    """A freelancer's proposal (price + text) against one open project."""
    bid_id: str
    project_id: str
    freelancer_id: str
    amount: Decimal
    proposal: str = ""
    submitted_utc: Optional[datetime] = None
