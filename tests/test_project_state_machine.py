"""Tests for the project state machine — lifecycle transitions."""

from decimal import Decimal

import pytest

from marketplace.errors import InvalidTransition
from marketplace.market.project_state_machine import ProjectStateMachine
from marketplace.models.market import Project, ProjectStatus


def _make_project(status: ProjectStatus = ProjectStatus.OPEN) -> Project:
    return Project(
        project_id="P-000001",
        title="Test Project",
        description="Test",
        budget=Decimal("100"),
        client_id="U-000001",
        skills=["python"],
        status=status,
    )


class TestValidTransitions:
    def test_open_to_in_progress(self) -> None:
        project = _make_project(ProjectStatus.OPEN)
        errors = ProjectStateMachine.validate_transition(project, ProjectStatus.IN_PROGRESS)
        assert errors == []

    def test_in_progress_to_completed(self) -> None:
        project = _make_project(ProjectStatus.IN_PROGRESS)
        errors = ProjectStateMachine.validate_transition(project, ProjectStatus.COMPLETED)
        assert errors == []


class TestInvalidTransitions:
    def test_open_to_completed_skips_a_state(self) -> None:
        project = _make_project(ProjectStatus.OPEN)
        errors = ProjectStateMachine.validate_transition(project, ProjectStatus.COMPLETED)
        assert len(errors) == 1
        assert "Invalid project transition" in errors[0]

    def test_in_progress_back_to_open(self) -> None:
        project = _make_project(ProjectStatus.IN_PROGRESS)
        errors = ProjectStateMachine.validate_transition(project, ProjectStatus.OPEN)
        assert len(errors) == 1

    def test_completed_to_anything(self) -> None:
        """Terminal state COMPLETED has no outgoing transitions."""
        project = _make_project(ProjectStatus.COMPLETED)
        for target in ProjectStatus:
            errors = ProjectStateMachine.validate_transition(project, target)
            assert len(errors) == 1, f"Completed → {target.value} should be invalid"

    def test_self_transitions_are_invalid(self) -> None:
        for status in ProjectStatus:
            project = _make_project(status)
            assert ProjectStateMachine.validate_transition(project, status)


class TestApplyTransition:
    def test_apply_valid_transition(self) -> None:
        project = _make_project(ProjectStatus.OPEN)
        ProjectStateMachine.apply_transition(project, ProjectStatus.IN_PROGRESS)
        assert project.status == ProjectStatus.IN_PROGRESS

    def test_apply_invalid_transition_no_mutation(self) -> None:
        project = _make_project(ProjectStatus.OPEN)
        with pytest.raises(InvalidTransition):
            ProjectStateMachine.apply_transition(project, ProjectStatus.COMPLETED)
        assert project.status == ProjectStatus.OPEN  # Unchanged


class TestTerminalAndValidTransitions:
    def test_is_terminal_completed(self) -> None:
        assert ProjectStateMachine.is_terminal(ProjectStatus.COMPLETED)

    def test_not_terminal_open(self) -> None:
        assert not ProjectStateMachine.is_terminal(ProjectStatus.OPEN)
        assert not ProjectStateMachine.is_terminal(ProjectStatus.IN_PROGRESS)

    def test_valid_transitions_from_open(self) -> None:
        valid = ProjectStateMachine.valid_transitions(ProjectStatus.OPEN)
        assert valid == {ProjectStatus.IN_PROGRESS}

    def test_valid_transitions_from_completed(self) -> None:
        assert ProjectStateMachine.valid_transitions(ProjectStatus.COMPLETED) == set()
