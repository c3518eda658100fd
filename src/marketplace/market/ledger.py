"""Project ledger — holds postings and drives their lifecycle.

Projects are created OPEN by a client, moved to IN_PROGRESS when a
freelancer is hired, and to COMPLETED by the owning client. Nothing ever
moves a project back, and projects are never deleted.

The ledger checks only what it can see in its own records. Whether the
hired freelancer actually bid is a cross-store question answered by the
Transaction Engine before it calls ``hire``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Optional

from marketplace.errors import Forbidden, InvalidTransition, NotFound, ValidationError
from marketplace.market.money import positive_amount
from marketplace.market.project_state_machine import ProjectStateMachine
from marketplace.models.identity import Participant
from marketplace.models.market import Project, ProjectStatus
from marketplace.sequence import IdSequence


def normalise_skills(skills: Iterable[str] | str | None) -> list[str]:
    """Strip tags, drop blanks, and de-duplicate keeping first occurrence.

    A single comma-separated string is accepted as well as a sequence.
    """
    if skills is None:
        return []
    if isinstance(skills, str):
        skills = skills.split(",")
    seen: set[str] = set()
    ordered: list[str] = []
    for raw in skills:
        if not isinstance(raw, str):
            raise ValidationError(f"Skill tags must be strings, got {raw!r}")
        tag = raw.strip()
        if tag and tag not in seen:
            seen.add(tag)
            ordered.append(tag)
    return ordered


class ProjectLedger:
    """Owns every project record, keyed by id in posting order."""

    def __init__(self, id_prefix: str = "P") -> None:
        self._projects: dict[str, Project] = {}
        self._ids = IdSequence(id_prefix)

    def post(
        self,
        client: Participant,
        title: str,
        description: str,
        budget: Decimal | int | float | str,
        skills: Iterable[str] | str,
    ) -> Project:
        """Create a new OPEN project owned by ``client``.

        Raises ValidationError if the poster is not a client, the title is
        blank, the description is not text, the budget is not positive, or no skill tag survives
        normalisation.
        """
        if not client.is_client:
            raise ValidationError(
                f"Only clients may post projects: {client.participant_id} "
                f"is a {client.role.value}"
            )
        clean_title = title.strip() if isinstance(title, str) else ""
        if not clean_title:
            raise ValidationError("Project title must not be empty")
        if description is not None and not isinstance(description, str):
            raise ValidationError(f"description must be text, got {description!r}")
        amount = positive_amount(budget, "budget")
        tags = normalise_skills(skills)
        if not tags:
            raise ValidationError("A project needs at least one required skill")

        project = Project(
            project_id=self._ids.next_id(),
            title=clean_title,
            description=(description or "").strip(),
            budget=amount,
            client_id=client.participant_id,
            skills=tags,
            status=ProjectStatus.OPEN,
            hired_freelancer_id=None,
            created_utc=datetime.now(timezone.utc),
        )
        self._projects[project.project_id] = project
        return project

    def ensure_can_hire(self, project: Project) -> None:
        """Raise InvalidTransition unless the project is still OPEN."""
        errors = ProjectStateMachine.validate_transition(project, ProjectStatus.IN_PROGRESS)
        if errors:
            raise InvalidTransition("; ".join(errors))

    def hire(self, project: Project, freelancer: Participant) -> Project:
        """Move OPEN → IN_PROGRESS and record the hired freelancer."""
        self.ensure_can_hire(project)
        if not freelancer.is_freelancer:
            raise ValidationError(
                f"Only freelancers can be hired: {freelancer.participant_id} "
                f"is a {freelancer.role.value}"
            )
        ProjectStateMachine.apply_transition(project, ProjectStatus.IN_PROGRESS)
        project.hired_freelancer_id = freelancer.participant_id
        project.hired_utc = datetime.now(timezone.utc)
        return project

    def complete(self, project: Project, actor: Participant) -> Project:
        """Move IN_PROGRESS → COMPLETED on behalf of the owning client.

        Raises Forbidden if ``actor`` does not own the project, and
        InvalidTransition if the project is not IN_PROGRESS.
        """
        if actor.participant_id != project.client_id:
            raise Forbidden(
                f"Only the owning client may complete project {project.project_id}"
            )
        ProjectStateMachine.apply_transition(project, ProjectStatus.COMPLETED)
        project.completed_utc = datetime.now(timezone.utc)
        return project

    def find_by_id(self, project_id: str) -> Optional[Project]:
        return self._projects.get(project_id)

    def get(self, project_id: str) -> Project:
        """Look up a project, raising NotFound when the id is unknown."""
        project = self._projects.get(project_id)
        if project is None:
            raise NotFound(f"Project not found: {project_id}")
        return project

    def all_projects(self) -> list[Project]:
        """Return all projects, newest first."""
        return list(reversed(self._projects.values()))

    def search(
        self,
        term: str = "",
        status: Optional[ProjectStatus] = None,
        limit: Optional[int] = None,
    ) -> list[Project]:
        """Case-insensitive title search, newest first."""
        needle = (term or "").strip().lower()
        results: list[Project] = []
        for project in self.all_projects():
            if status is not None and project.status != status:
                continue
            if needle and needle not in project.title.lower():
                continue
            results.append(project)
            if limit is not None and len(results) >= limit:
                break
        return results

    def owned_by(self, client_id: str) -> list[Project]:
        return [p for p in self.all_projects() if p.client_id == client_id]

    def hired_on(self, freelancer_id: str) -> list[Project]:
        return [p for p in self.all_projects() if p.hired_freelancer_id == freelancer_id]

    @property
    def count(self) -> int:
        return len(self._projects)

    def count_by_status(self) -> dict[str, int]:
        counts = {s.value: 0 for s in ProjectStatus}
        for p in self._projects.values():
            counts[p.status.value] += 1
        return counts
