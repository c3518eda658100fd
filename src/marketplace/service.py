"""Transaction engine — unified facade for the marketplace core.

This is the primary interface for programmatic access to the marketplace.
It orchestrates the four stores:
- Identity store (register, lookup)
- Project ledger (post, hire, complete)
- Bid book (submit, list)
- Review ledger (review, reputation)

The engine is the only writer to any store. It validates cross-store
preconditions (a hire needs a matching bid, a review needs a completed
project) before mutating anything, so a failed call leaves every store
as it was. All failures are raised as typed MarketplaceError subclasses.
Every successful mutation is recorded in the audit event log.

Execution is single-threaded and synchronous: each call runs to
completion before the next begins, and the invariants on projects, bids
and reviews hold after every call.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional

from marketplace import __version__
from marketplace.audit.event_log import EventKind, EventLog, EventRecord
from marketplace.errors import Forbidden, NotFound, ValidationError
from marketplace.identity.store import IdentityStore, coerce_role
from marketplace.market.bid_book import BidBook
from marketplace.market.ledger import ProjectLedger
from marketplace.models.identity import Participant, Role
from marketplace.models.market import Bid, Project, ProjectStatus
from marketplace.models.review import ReputationSummary, Review
from marketplace.policy.resolver import PolicyResolver
from marketplace.reputation.ledger import ReviewLedger


class TransactionEngine:
    """Marketplace lifecycle coordinator.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        engine = TransactionEngine(resolver)

        ada = engine.register("Ada", Role.CLIENT)
        lin = engine.register("Lin", Role.FREELANCER)
        project = engine.post_project(ada.participant_id, "Logo", "...", 500, ["design"])
        engine.submit_bid(project.project_id, lin.participant_id, 450, "I can do it")
        engine.hire(project.project_id, lin.participant_id)
        engine.complete(project.project_id, ada.participant_id)
        engine.add_review(project.project_id, 4, "Great work")
        engine.reputation_of(lin.participant_id)  # 4.0
    """

    def __init__(
        self,
        resolver: Optional[PolicyResolver] = None,
        event_log: Optional[EventLog] = None,
    ) -> None:
        self._resolver = resolver or PolicyResolver.default()
        self._identities = IdentityStore(
            id_prefix=self._resolver.id_prefix("participant"),
            default_freelancer_title=self._resolver.default_freelancer_title(),
        )
        self._projects = ProjectLedger(id_prefix=self._resolver.id_prefix("project"))
        self._bids = BidBook(id_prefix=self._resolver.id_prefix("bid"))
        self._reviews = ReviewLedger(
            id_prefix=self._resolver.id_prefix("review"),
            decimal_places=self._resolver.reputation_decimal_places(),
        )
        self._event_log = event_log if event_log is not None else EventLog()
        self._event_counter = self._event_log.count

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def register(
        self,
        name: str,
        role: Role | str,
        title: Optional[str] = None,
    ) -> Participant:
        """Sign up a new client or freelancer."""
        participant = self._identities.register(name, role, title)
        self._record_event(
            EventKind.PARTICIPANT_REGISTERED,
            participant.participant_id,
            {
                "participant_id": participant.participant_id,
                "role": participant.role.value,
            },
        )
        return participant

    def find_by_id(self, participant_id: str) -> Optional[Participant]:
        """Look up a participant. Returns None when the id is unknown.

        The record is the stored one; treat it as read-only and change it
        through the engine.
        """
        return self._identities.find_by_id(participant_id)

    def list_participants(self, role: Role | str | None = None) -> list[Participant]:
        """All participants, newest first, optionally filtered by role."""
        resolved = coerce_role(role) if role is not None else None
        return list(reversed(self._identities.all_participants(resolved)))

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def post_project(
        self,
        client_id: str,
        title: str,
        description: str,
        budget: Decimal | int | float | str,
        skills: Iterable[str] | str,
    ) -> Project:
        """Post a new OPEN project on behalf of a client."""
        client = self._identities.get(client_id)
        project = self._projects.post(client, title, description, budget, skills)
        self._record_event(
            EventKind.PROJECT_POSTED,
            client.participant_id,
            {
                "project_id": project.project_id,
                "budget": str(project.budget),
                "skills": list(project.skills),
            },
        )
        return project

    def get_project(self, project_id: str) -> Project:
        """Retrieve a project by id, raising NotFound if absent.

        The record is the stored one; status and hired freelancer change
        only through hire and complete.
        """
        return self._projects.get(project_id)

    def search_projects(
        self,
        term: str = "",
        status: ProjectStatus | str | None = None,
        limit: Optional[int] = None,
    ) -> list[Project]:
        """Case-insensitive title search, newest first."""
        resolved: Optional[ProjectStatus] = None
        if status is not None:
            resolved = _coerce_status(status)
        if limit is None:
            limit = self._resolver.search_default_limit()
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError(f"limit must be an integer, got {limit!r}")
        if limit <= 0:
            raise ValidationError(f"limit must be > 0, got {limit}")
        return self._projects.search(term, resolved, limit)

    def projects_for(self, participant_id: str) -> list[Project]:
        """Dashboard view: owned projects for a client, hired ones for a freelancer."""
        participant = self._identities.get(participant_id)
        if participant.is_client:
            return self._projects.owned_by(participant_id)
        return self._projects.hired_on(participant_id)

    # ------------------------------------------------------------------
    # Bids and hiring
    # ------------------------------------------------------------------

    def submit_bid(
        self,
        project_id: str,
        freelancer_id: str,
        amount: Decimal | int | float | str,
        proposal: str = "",
    ) -> Bid:
        """Submit a freelancer's bid on an OPEN project."""
        project = self._projects.get(project_id)
        freelancer = self._identities.get(freelancer_id)
        bid = self._bids.submit(project, freelancer, amount, proposal)
        self._record_event(
            EventKind.BID_SUBMITTED,
            freelancer.participant_id,
            {
                "bid_id": bid.bid_id,
                "project_id": project.project_id,
                "amount": str(bid.amount),
            },
        )
        return bid

    def list_bids(self, project_id: str) -> list[Bid]:
        """Bids on a project, most recent first. Read-only and uncached."""
        self._projects.get(project_id)
        return self._bids.list_for_project(project_id)

    def hire(
        self,
        project_id: str,
        freelancer_id: str,
        actor_id: Optional[str] = None,
    ) -> Project:
        """Accept a freelancer's bid: OPEN → IN_PROGRESS.

        Raises InvalidTransition unless the project is OPEN, and NotFound
        if the freelancer never bid on it. When ``actor_id`` is given it
        must be the owning client.
        """
        project = self._projects.get(project_id)
        freelancer = self._identities.get(freelancer_id)
        if actor_id is not None:
            self._require_owner(project, actor_id, "hire on")

        self._projects.ensure_can_hire(project)
        bid = self._bids.find(project.project_id, freelancer.participant_id)
        if bid is None:
            raise NotFound(
                f"Freelancer {freelancer.participant_id} has no bid on "
                f"project {project.project_id}"
            )

        self._projects.hire(project, freelancer)
        self._record_event(
            EventKind.FREELANCER_HIRED,
            project.client_id,
            {
                "project_id": project.project_id,
                "freelancer_id": freelancer.participant_id,
                "bid_id": bid.bid_id,
            },
        )
        return project

    def complete(self, project_id: str, actor_id: str) -> Project:
        """Mark work done: IN_PROGRESS → COMPLETED, owner only."""
        project = self._projects.get(project_id)
        actor = self._identities.get(actor_id)
        self._projects.complete(project, actor)
        self._record_event(
            EventKind.PROJECT_COMPLETED,
            actor.participant_id,
            {
                "project_id": project.project_id,
                "freelancer_id": project.hired_freelancer_id,
            },
        )
        return project

    # ------------------------------------------------------------------
    # Reviews and reputation
    # ------------------------------------------------------------------

    def add_review(
        self,
        project_id: str,
        rating: int,
        comment: str = "",
        actor_id: Optional[str] = None,
    ) -> Review:
        """Review the freelancer who completed a project.

        Recomputes the freelancer's reputation from every stored review
        before returning.
        """
        project = self._projects.get(project_id)
        if actor_id is not None:
            self._require_owner(project, actor_id, "review")

        review = self._reviews.add_review(project, rating, comment)
        self._record_event(
            EventKind.REVIEW_ADDED,
            project.client_id,
            {
                "review_id": review.review_id,
                "project_id": project.project_id,
                "freelancer_id": review.freelancer_id,
                "rating": review.rating,
            },
        )

        previous = self._identities.get(review.freelancer_id).reputation
        score = self._reviews.reputation(review.freelancer_id)
        self._identities.set_reputation(review.freelancer_id, score)
        self._record_event(
            EventKind.REPUTATION_RECOMPUTED,
            review.freelancer_id,
            {
                "freelancer_id": review.freelancer_id,
                "previous_score": previous,
                "new_score": score,
            },
        )
        return review

    def reputation_of(self, freelancer_id: str) -> Optional[float]:
        """A freelancer's reputation, or None if never reviewed."""
        freelancer = self._require_freelancer(freelancer_id)
        return freelancer.reputation

    def reputation_summary(self, freelancer_id: str) -> ReputationSummary:
        self._require_freelancer(freelancer_id)
        return self._reviews.summary(freelancer_id)

    def reviews_for(self, freelancer_id: str) -> list[Review]:
        self._require_freelancer(freelancer_id)
        return self._reviews.for_freelancer(freelancer_id)

    def review_for_project(self, project_id: str) -> Optional[Review]:
        self._projects.get(project_id)
        return self._reviews.for_project(project_id)

    # ------------------------------------------------------------------
    # Status and queries
    # ------------------------------------------------------------------

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    def status(self) -> dict[str, Any]:
        """Return a marketplace-wide status summary."""
        return {
            "version": __version__,
            "participants": {
                "total": self._identities.count,
                "by_role": self._identities.count_by_role(),
            },
            "projects": {
                "total": self._projects.count,
                "by_status": self._projects.count_by_status(),
            },
            "bids": {"total": self._bids.count},
            "reviews": {"total": self._reviews.count},
            "audit": {"events": self._event_log.count},
        }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_owner(self, project: Project, actor_id: str, action: str) -> None:
        actor = self._identities.get(actor_id)
        if actor.participant_id != project.client_id:
            raise Forbidden(
                f"Only the owning client may {action} project {project.project_id}"
            )

    def _require_freelancer(self, freelancer_id: str) -> Participant:
        participant = self._identities.get(freelancer_id)
        if not participant.is_freelancer:
            raise ValidationError(
                f"Reputation applies to freelancers only: {freelancer_id} "
                f"is a {participant.role.value}"
            )
        return participant

    def _next_event_id(self) -> str:
        """Generate a monotonically increasing unique event ID."""
        self._event_counter += 1
        return f"EVT-{self._event_counter:08d}"

    def _record_event(
        self,
        kind: EventKind,
        actor_id: str,
        payload: dict[str, Any],
    ) -> EventRecord:
        event = EventRecord.create(
            event_id=self._next_event_id(),
            event_kind=kind,
            actor_id=actor_id,
            payload=payload,
        )
        self._event_log.append(event)
        return event


def _coerce_status(status: ProjectStatus | str) -> ProjectStatus:
    if isinstance(status, ProjectStatus):
        return status
    for candidate in ProjectStatus:
        if candidate.value == status:
            return candidate
    raise ValidationError(
        f"Unrecognised project status: {status!r}. Expected one of: "
        + ", ".join(s.value for s in ProjectStatus)
    )
