"""Tests for the project ledger — posting, hiring, completion, queries."""

from decimal import Decimal

import pytest

from marketplace.errors import Forbidden, InvalidTransition, NotFound, ValidationError
from marketplace.identity.store import IdentityStore
from marketplace.market.ledger import ProjectLedger, normalise_skills
from marketplace.models.identity import Role
from marketplace.models.market import ProjectStatus


@pytest.fixture
def identities() -> IdentityStore:
    return IdentityStore()


@pytest.fixture
def ledger() -> ProjectLedger:
    return ProjectLedger()


class TestPost:
    def test_post_creates_open_project(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        project = ledger.post(ada, "Website", "Build it", 500, ["HTML", "CSS"])
        assert project.status == ProjectStatus.OPEN
        assert project.hired_freelancer_id is None
        assert project.client_id == ada.participant_id
        assert project.budget == Decimal("500")
        assert project.skills == ["HTML", "CSS"]

    def test_budget_accepts_decimal_strings(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        project = ledger.post(ada, "Website", "", "499.99", ["HTML"])
        assert project.budget == Decimal("499.99")

    @pytest.mark.parametrize("budget", [0, -1, "0", "abc", float("nan"), float("inf"), True, None])
    def test_non_positive_or_bad_budget_rejected(self, identities, ledger, budget) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        with pytest.raises(ValidationError):
            ledger.post(ada, "Website", "", budget, ["HTML"])
        assert ledger.count == 0

    @pytest.mark.parametrize("skills", [[], ["", "  "], "", " , "])
    def test_empty_skills_rejected(self, identities, ledger, skills) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        with pytest.raises(ValidationError):
            ledger.post(ada, "Website", "", 100, skills)

    def test_freelancer_cannot_post(self, identities, ledger) -> None:
        lin = identities.register("Lin", Role.FREELANCER)
        with pytest.raises(ValidationError):
            ledger.post(lin, "Website", "", 100, ["HTML"])

    def test_blank_title_rejected(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        with pytest.raises(ValidationError):
            ledger.post(ada, "  ", "", 100, ["HTML"])

    @pytest.mark.parametrize("description", [5, ["Build it"], {"text": "x"}])
    def test_non_text_description_rejected(self, identities, ledger, description) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        with pytest.raises(ValidationError):
            ledger.post(ada, "Website", description, 100, ["HTML"])
        assert ledger.count == 0

    def test_missing_description_becomes_empty(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        assert ledger.post(ada, "Website", None, 100, ["HTML"]).description == ""


class TestNormaliseSkills:
    def test_comma_separated_string(self) -> None:
        assert normalise_skills("React, Node.js ,  ,React") == ["React", "Node.js"]

    def test_order_preserved_and_deduplicated(self) -> None:
        assert normalise_skills(["b", "a", "b", " c "]) == ["b", "a", "c"]

    def test_non_string_tag_rejected(self) -> None:
        with pytest.raises(ValidationError):
            normalise_skills(["ok", 3])


class TestHireAndComplete:
    def test_hire_sets_freelancer_once(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        assert project.accepting_bids
        ledger.hire(project, lin)
        assert project.status == ProjectStatus.IN_PROGRESS
        assert not project.accepting_bids
        assert project.hired_freelancer_id == lin.participant_id
        assert project.hired_utc is not None

    def test_second_hire_rejected_and_freelancer_unchanged(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        sam = identities.register("Sam", Role.FREELANCER)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        ledger.hire(project, lin)
        with pytest.raises(InvalidTransition):
            ledger.hire(project, sam)
        assert project.hired_freelancer_id == lin.participant_id

    def test_client_cannot_be_hired(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        bob = identities.register("Bob", Role.CLIENT)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        with pytest.raises(ValidationError):
            ledger.hire(project, bob)
        assert project.status == ProjectStatus.OPEN

    def test_complete_by_owner(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        ledger.hire(project, lin)
        ledger.complete(project, ada)
        assert project.status == ProjectStatus.COMPLETED
        assert project.hired_freelancer_id == lin.participant_id

    def test_complete_by_non_owner_forbidden(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        bob = identities.register("Bob", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        ledger.hire(project, lin)
        for actor in (bob, lin):
            with pytest.raises(Forbidden):
                ledger.complete(project, actor)
        assert project.status == ProjectStatus.IN_PROGRESS

    def test_complete_open_project_invalid(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        with pytest.raises(InvalidTransition):
            ledger.complete(project, ada)

    def test_complete_twice_invalid(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        project = ledger.post(ada, "Website", "", 100, ["HTML"])
        ledger.hire(project, lin)
        ledger.complete(project, ada)
        with pytest.raises(InvalidTransition):
            ledger.complete(project, ada)


class TestQueries:
    def test_get_unknown_raises(self, ledger) -> None:
        with pytest.raises(NotFound):
            ledger.get("P-404")

    def test_search_is_case_insensitive_newest_first(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        first = ledger.post(ada, "Logo design", "", 100, ["design"])
        ledger.post(ada, "Backend API", "", 100, ["python"])
        third = ledger.post(ada, "Landing page DESIGN", "", 100, ["design"])
        results = ledger.search("design")
        assert [p.project_id for p in results] == [third.project_id, first.project_id]

    def test_search_filters_status_and_limit(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        for i in range(5):
            ledger.post(ada, f"Job {i}", "", 100, ["x"])
        hired = ledger.post(ada, "Hired job", "", 100, ["x"])
        ledger.hire(hired, lin)
        assert len(ledger.search(status=ProjectStatus.OPEN)) == 5
        assert ledger.search(status=ProjectStatus.IN_PROGRESS) == [hired]
        assert len(ledger.search(limit=2)) == 2

    def test_owned_by_and_hired_on(self, identities, ledger) -> None:
        ada = identities.register("Ada", Role.CLIENT)
        bob = identities.register("Bob", Role.CLIENT)
        lin = identities.register("Lin", Role.FREELANCER)
        a1 = ledger.post(ada, "A1", "", 100, ["x"])
        ledger.post(bob, "B1", "", 100, ["x"])
        ledger.hire(a1, lin)
        assert ledger.owned_by(ada.participant_id) == [a1]
        assert ledger.hired_on(lin.participant_id) == [a1]
        assert ledger.count_by_status() == {"Open": 1, "InProgress": 1, "Completed": 0}
