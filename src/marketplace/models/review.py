"""Review and reputation models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Review:
    """A client's rating of the freelancer who completed their project.

    At most one review exists per project.
    """
    review_id: str
    project_id: str
    freelancer_id: str
    rating: int
    comment: str = ""
    created_utc: Optional[datetime] = None


@dataclass(frozen=True)
class ReputationSummary:
    """Aggregate reputation for one freelancer.

    score is None when review_count is 0.
    """
    freelancer_id: str
    score: Optional[float]
    review_count: int
