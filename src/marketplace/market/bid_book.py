"""Bid book — proposals submitted against open projects.

Bids are immutable and never deleted. At most one bid exists per
(project, freelancer) pair; a repeat submission is rejected rather than
merged. Once a project leaves OPEN its bids stay on record for history
but no new bid is accepted.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from marketplace.errors import Conflict, Forbidden, InvalidTransition, ValidationError
from marketplace.market.money import positive_amount
from marketplace.models.identity import Participant
from marketplace.models.market import Bid, Project
from marketplace.sequence import IdSequence


class BidBook:
    """Owns every bid, indexed by project and by (project, freelancer)."""

    def __init__(self, id_prefix: str = "B") -> None:
        self._bids: dict[str, list[Bid]] = {}
        self._by_pair: dict[tuple[str, str], Bid] = {}
        self._ids = IdSequence(id_prefix)

    def submit(
        self,
        project: Project,
        freelancer: Participant,
        amount: Decimal | int | float | str,
        proposal: str = "",
    ) -> Bid:
        """Record a freelancer's bid on an OPEN project.

        Raises:
            Forbidden: the bidder is not a freelancer.
            InvalidTransition: the project is no longer OPEN.
            Conflict: this freelancer already bid on this project.
            ValidationError: amount is not a positive number.
        """
        if not freelancer.is_freelancer:
            raise Forbidden(
                f"Only freelancers may bid: {freelancer.participant_id} "
                f"is a {freelancer.role.value}"
            )
        if not project.accepting_bids:
            raise InvalidTransition(
                f"Project {project.project_id} is not accepting bids "
                f"(status: {project.status.value})"
            )
        key = (project.project_id, freelancer.participant_id)
        if key in self._by_pair:
            raise Conflict(
                f"Freelancer {freelancer.participant_id} already has a bid "
                f"on project {project.project_id}"
            )
        value = positive_amount(amount, "amount")
        if proposal is not None and not isinstance(proposal, str):
            raise ValidationError(f"proposal must be text, got {proposal!r}")

        bid = Bid(
            bid_id=self._ids.next_id(),
            project_id=project.project_id,
            freelancer_id=freelancer.participant_id,
            amount=value,
            proposal=(proposal or "").strip(),
            submitted_utc=datetime.now(timezone.utc),
        )
        self._bids.setdefault(project.project_id, []).append(bid)
        self._by_pair[key] = bid
        return bid

    def list_for_project(self, project_id: str) -> list[Bid]:
        """Return the project's bids, most recent first.

        A fresh list on every call; the caller may mutate it freely.
        """
        return list(reversed(self._bids.get(project_id, [])))

    def find(self, project_id: str, freelancer_id: str) -> Optional[Bid]:
        """Return the bid this freelancer placed on this project, if any."""
        return self._by_pair.get((project_id, freelancer_id))

    def by_freelancer(self, freelancer_id: str) -> list[Bid]:
        """Return every bid a freelancer placed, most recent first."""
        bids = [b for b in self._by_pair.values() if b.freelancer_id == freelancer_id]
        return list(reversed(bids))

    @property
    def count(self) -> int:
        return len(self._by_pair)
