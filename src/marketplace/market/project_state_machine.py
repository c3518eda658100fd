"""Project state machine — enforces valid lifecycle transitions.

Project lifecycle:
    OPEN → IN_PROGRESS → COMPLETED

State semantics:
- OPEN: visible to freelancers, bids may arrive.
- IN_PROGRESS: one freelancer hired, bidding closed.
- COMPLETED: terminal — the owning client marked the work done.

No transition skips a state and none goes backward. Fail-closed: there
are no implicit transitions.
"""

from __future__ import annotations

from marketplace.errors import InvalidTransition
from marketplace.models.market import Project, ProjectStatus


# Valid transitions: {from_state: {allowed_to_states}}
_TRANSITIONS: dict[ProjectStatus, set[ProjectStatus]] = {
    ProjectStatus.OPEN: {ProjectStatus.IN_PROGRESS},
    ProjectStatus.IN_PROGRESS: {ProjectStatus.COMPLETED},
    ProjectStatus.COMPLETED: set(),
}


class ProjectStateMachine:
    """Validates and applies project state transitions.

    Pure computation: side effects (hire bookkeeping, audit events) are
    handled by the ledger and the Transaction Engine.
    """

    @staticmethod
    def validate_transition(
        project: Project,
        target: ProjectStatus,
    ) -> list[str]:
        """Check if a transition is valid. Returns errors (empty = OK)."""
        current = project.status
        allowed = _TRANSITIONS.get(current, set())

        if target not in allowed:
            allowed_str = ", ".join(s.value for s in sorted(allowed, key=lambda x: x.value))
            return [
                f"Invalid project transition: {current.value} → {target.value}. "
                f"Allowed from {current.value}: [{allowed_str}]"
            ]
        return []

    @staticmethod
    def apply_transition(
        project: Project,
        target: ProjectStatus,
    ) -> None:
        """Validate and apply a state transition.

        Raises InvalidTransition if the transition is not allowed. On
        success, mutates project.status.
        """
        errors = ProjectStateMachine.validate_transition(project, target)
        if errors:
            raise InvalidTransition("; ".join(errors))
        project.status = target

    @staticmethod
    def is_terminal(state: ProjectStatus) -> bool:
        return not _TRANSITIONS.get(state)

    @staticmethod
    def valid_transitions(state: ProjectStatus) -> set[ProjectStatus]:
        """Return the set of valid target states from the given state."""
        return set(_TRANSITIONS.get(state, set()))
