#!/usr/bin/env python3
"""Marketplace invariant checks against the policy file and the demo scenario."""

import itertools
import json
import sys
from pathlib import Path

from marketplace.errors import InvalidTransition, NotFound
from marketplace.models.identity import Role
from marketplace.models.market import ProjectStatus
from marketplace.policy.resolver import PolicyResolver
from marketplace.reputation.ledger import compute_reputation
from marketplace.service import TransactionEngine
from marketplace.simulation import DEMO_SCENARIO, ScenarioRunner


ROOT = Path(__file__).resolve().parents[1]
CONFIG_DIR = ROOT / "config"
POLICY_PATH = CONFIG_DIR / "market_policy.json"


def load_json(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def check_policy(errors: list[str]) -> None:
    """The shipped policy must load and keep the fixed review scale."""
    try:
        resolver = PolicyResolver(load_json(POLICY_PATH))
    except (OSError, ValueError) as e:
        errors.append(f"market_policy.json rejected: {e}")
        return
    if resolver.rating_bounds() != (1, 5):
        errors.append(f"rating bounds must be (1, 5), got {resolver.rating_bounds()}")


def check_demo(errors: list[str]) -> None:
    """Every step of the demo walkthrough must behave as scripted."""
    engine = TransactionEngine(PolicyResolver.from_config_dir(CONFIG_DIR))
    for result in ScenarioRunner(engine).run(DEMO_SCENARIO, keep_going=True):
        if not result.success:
            errors.append(f"demo step {result.step} ({result.op}): {'; '.join(result.errors)}")
    for project in engine.search_projects(limit=1000):
        hired = project.hired_freelancer_id is not None
        if hired != (project.status != ProjectStatus.OPEN):
            errors.append(
                f"{project.project_id}: hired_freelancer_id set={hired} "
                f"with status {project.status.value}"
            )
    intact = engine.event_log.verify()
    errors.extend(intact)


def check_lifecycle(errors: list[str]) -> None:
    """Hire twice, hire an un-bid freelancer, and bid on a closed project."""
    engine = TransactionEngine(PolicyResolver.from_config_dir(CONFIG_DIR))
    client = engine.register("Client", Role.CLIENT)
    bidder = engine.register("Bidder", Role.FREELANCER)
    stranger = engine.register("Stranger", Role.FREELANCER)
    project = engine.post_project(client.participant_id, "Job", "", 100, ["python"])
    engine.submit_bid(project.project_id, bidder.participant_id, 90)

    try:
        engine.hire(project.project_id, stranger.participant_id)
        errors.append("hiring a freelancer without a bid must fail")
    except NotFound:
        pass

    engine.hire(project.project_id, bidder.participant_id)
    try:
        engine.hire(project.project_id, bidder.participant_id)
        errors.append("a second hire on the same project must fail")
    except InvalidTransition:
        pass

    try:
        engine.submit_bid(project.project_id, stranger.participant_id, 80)
        errors.append("bidding on a project in progress must fail")
    except InvalidTransition:
        pass


def check_aggregation(errors: list[str]) -> None:
    """Reputation must not depend on review order."""
    ratings = [5, 4, 4, 3, 2]
    expected = compute_reputation(ratings)
    for order in itertools.permutations(ratings):
        got = compute_reputation(order)
        if got != expected:
            errors.append(f"reputation of {order} = {got}, expected {expected}")
            break
    if compute_reputation([]) is not None:
        errors.append("an unrated freelancer must have no reputation, not 0")


def check() -> int:
    errors: list[str] = []
    check_policy(errors)
    check_demo(errors)
    check_lifecycle(errors)
    check_aggregation(errors)

    if errors:
        print("Invariant check failed:")
        for error in errors:
            print(f"- {error}")
        return 1
    print("Invariant check passed.")
    return 0


if __name__ == "__main__":
    sys.exit(check())
