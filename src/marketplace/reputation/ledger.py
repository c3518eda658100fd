"""Review ledger and reputation aggregation.

Reputation model:
  reputation = round(mean(ratings), decimal_places)

Invariants enforced:
- Only COMPLETED projects can be reviewed.
- At most one review per project.
- Ratings are integers in [1, 5].
- A freelancer with no reviews has no reputation (None, never 0).
- Reputation is recomputed in full from every stored review each time,
  so it does not depend on the order reviews arrived in.
- Rounding is half away from zero: 4.25 → 4.3, 4.35 → 4.4.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from marketplace.errors import Conflict, InvalidTransition, ValidationError
from marketplace.models.market import Project, ProjectStatus
from marketplace.models.review import ReputationSummary, Review
from marketplace.policy.resolver import RATING_MAX, RATING_MIN
from marketplace.sequence import IdSequence


def compute_reputation(
    ratings: Iterable[int],
    decimal_places: int = 1,
) -> Optional[float]:
    """Mean of ``ratings`` rounded half away from zero.

    Returns None for an empty collection. Summation is over integers and
    the division is done in Decimal, so the result is exact before
    rounding and independent of input order.
    """
    values = list(ratings)
    if not values:
        return None
    mean = Decimal(sum(values)) / Decimal(len(values))
    quantum = Decimal(1).scaleb(-decimal_places)
    return float(mean.quantize(quantum, rounding=ROUND_HALF_UP))


def validate_rating(rating: object) -> int:
    """Return rating if it is an int in [1, 5], else raise ValidationError."""
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(f"Rating must be an integer, got {rating!r}")
    if not (RATING_MIN <= rating <= RATING_MAX):
        raise ValidationError(
            f"Rating must be in [{RATING_MIN}, {RATING_MAX}], got {rating}"
        )
    return rating


class ReviewLedger:
    """Holds every review and derives freelancer reputation from them."""

    def __init__(self, id_prefix: str = "R", decimal_places: int = 1) -> None:
        self._reviews: dict[str, Review] = {}  # project_id → review
        self._ids = IdSequence(id_prefix)
        self._decimal_places = decimal_places

    def add_review(self, project: Project, rating: int, comment: str = "") -> Review:
        """Record the review of a completed project's hired freelancer.

        Raises:
            InvalidTransition: the project is not COMPLETED.
            Conflict: the project already has a review.
            ValidationError: the rating is not an integer in [1, 5].
        """
        if project.status != ProjectStatus.COMPLETED:
            raise InvalidTransition(
                f"Project {project.project_id} cannot be reviewed "
                f"(status: {project.status.value})"
            )
        if project.project_id in self._reviews:
            raise Conflict(f"Project {project.project_id} already has a review")
        value = validate_rating(rating)
        if comment is not None and not isinstance(comment, str):
            raise ValidationError(f"comment must be text, got {comment!r}")
        if project.hired_freelancer_id is None:
            raise InvalidTransition(
                f"Project {project.project_id} has no hired freelancer to review"
            )

        review = Review(
            review_id=self._ids.next_id(),
            project_id=project.project_id,
            freelancer_id=project.hired_freelancer_id,
            rating=value,
            comment=(comment or "").strip(),
            created_utc=datetime.now(timezone.utc),
        )
        self._reviews[project.project_id] = review
        return review

    def for_project(self, project_id: str) -> Optional[Review]:
        return self._reviews.get(project_id)

    def for_freelancer(self, freelancer_id: str) -> list[Review]:
        """Every review of this freelancer, most recent first."""
        reviews = [r for r in self._reviews.values() if r.freelancer_id == freelancer_id]
        return list(reversed(reviews))

    def reputation(self, freelancer_id: str) -> Optional[float]:
        """Recompute the freelancer's reputation from all stored reviews."""
        return compute_reputation(
            (r.rating for r in self._reviews.values() if r.freelancer_id == freelancer_id),
            self._decimal_places,
        )

    def summary(self, freelancer_id: str) -> ReputationSummary:
        ratings = [r.rating for r in self._reviews.values() if r.freelancer_id == freelancer_id]
        return ReputationSummary(
            freelancer_id=freelancer_id,
            score=compute_reputation(ratings, self._decimal_places),
            review_count=len(ratings),
        )

    @property
    def count(self) -> int:
        return len(self._reviews)
