"""Scenario runner — drives a TransactionEngine from a list of steps.

A scenario is a JSON list of step objects:

    [
      {"op": "register", "name": "Ada", "role": "Client", "as": "ada"},
      {"op": "register", "name": "Lin", "role": "Freelancer", "as": "lin"},
      {"op": "post", "client": "$ada", "title": "Logo", "budget": 500,
       "skills": ["design"], "as": "logo"},
      {"op": "bid", "project": "$logo", "freelancer": "$lin", "amount": 450},
      {"op": "hire", "project": "$logo", "freelancer": "$lin"},
      {"op": "complete", "project": "$logo", "actor": "$ada"},
      {"op": "review", "project": "$logo", "rating": 4, "comment": "Great"}
    ]

``"as"`` names a step's result; ``"$name"`` in a later step is replaced
by that result's id. ``"expect": "<error kind>"`` marks a step that must
fail with that kind. Each step yields an OperationResult; failures carry
the error kind and message rather than raising.
"""

from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable

from marketplace.errors import MarketplaceError
from marketplace.service import TransactionEngine


@dataclass(frozen=True)
class OperationResult:
    """Result of one scenario step."""
    step: int
    op: str
    success: bool
    errors: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "step": self.step,
            "op": self.op,
            "success": self.success,
            "errors": list(self.errors),
            "data": self.data,
        }


def to_data(value: Any) -> Any:
    """Convert models and containers into JSON-ready structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_data(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [to_data(v) for v in value]
    if isinstance(value, dict):
        return {k: to_data(v) for k, v in value.items()}
    return value


def _result_id(value: Any) -> Any:
    for attr in ("participant_id", "project_id", "bid_id", "review_id"):
        if hasattr(value, attr):
            return getattr(value, attr)
    return value


_OPS: dict[str, Callable[[TransactionEngine, dict[str, Any]], Any]] = {
    "register": lambda e, a: e.register(a["name"], a["role"], a.get("title")),
    "find": lambda e, a: e.find_by_id(a["participant"]),
    "participants": lambda e, a: e.list_participants(a.get("role")),
    "post": lambda e, a: e.post_project(
        a["client"], a["title"], a.get("description", ""), a["budget"], a["skills"],
    ),
    "project": lambda e, a: e.get_project(a["project"]),
    "search": lambda e, a: e.search_projects(
        a.get("term", ""), a.get("status"), a.get("limit"),
    ),
    "dashboard": lambda e, a: e.projects_for(a["participant"]),
    "bid": lambda e, a: e.submit_bid(
        a["project"], a["freelancer"], a["amount"], a.get("proposal", ""),
    ),
    "bids": lambda e, a: e.list_bids(a["project"]),
    "hire": lambda e, a: e.hire(a["project"], a["freelancer"], a.get("actor")),
    "complete": lambda e, a: e.complete(a["project"], a["actor"]),
    "review": lambda e, a: e.add_review(
        a["project"], a["rating"], a.get("comment", ""), a.get("actor"),
    ),
    "reputation": lambda e, a: e.reputation_summary(a["freelancer"]),
    "status": lambda e, a: e.status(),
}

SUPPORTED_OPS = tuple(sorted(_OPS))


class ScenarioRunner:
    """Runs scenario steps in order against one engine."""

    def __init__(self, engine: TransactionEngine) -> None:
        self._engine = engine
        self._aliases: dict[str, Any] = {}

    def run(
        self,
        steps: list[dict[str, Any]],
        keep_going: bool = False,
    ) -> list[OperationResult]:
        """Execute steps; stop at the first failure unless keep_going."""
        results: list[OperationResult] = []
        for index, step in enumerate(steps, 1):
            result = self.run_step(index, step)
            results.append(result)
            if not result.success and not keep_going:
                break
        return results

    def run_step(self, index: int, step: dict[str, Any]) -> OperationResult:
        if not isinstance(step, dict):
            return OperationResult(index, "?", False, [f"Step {index} must be an object"])
        op = step.get("op", "")
        handler = _OPS.get(op)
        if handler is None:
            return OperationResult(index, str(op), False, [f"Unknown op: {op!r}"])

        expect = step.get("expect")
        try:
            args = {
                k: self._resolve(v)
                for k, v in step.items()
                if k not in ("op", "as", "expect")
            }
            value = handler(self._engine, args)
        except MarketplaceError as e:
            if expect == e.kind:
                return OperationResult(
                    index, op, True, data={"expected_error": e.kind, "message": str(e)},
                )
            return OperationResult(index, op, False, [f"{e.kind}: {e}"])
        except KeyError as e:
            return OperationResult(index, op, False, [f"Missing argument: {e.args[0]}"])
        except (TypeError, AttributeError) as e:
            return OperationResult(index, op, False, [f"Bad argument: {e}"])

        if expect:
            return OperationResult(
                index, op, False, [f"Expected {expect} but the step succeeded"],
            )

        alias = step.get("as")
        if alias:
            self._aliases[alias] = _result_id(value)
        data = to_data(value)
        if not isinstance(data, dict):
            data = {"result": data}
        return OperationResult(index, op, True, data=data)

    def _resolve(self, value: Any) -> Any:
        if isinstance(value, str) and value.startswith("$"):
            name = value[1:]
            if name not in self._aliases:
                raise KeyError(f"{value} (unknown alias)")
            return self._aliases[name]
        if isinstance(value, list):
            return [self._resolve(v) for v in value]
        return value


# Client posts, freelancer bids, client hires, completes and reviews; a
# second review of the same project is rejected.
DEMO_SCENARIO: list[dict[str, Any]] = [
    {"op": "register", "name": "Ada", "role": "Client", "as": "ada"},
    {"op": "register", "name": "Lin", "role": "Freelancer", "as": "lin"},
    {
        "op": "post", "client": "$ada", "title": "Company website",
        "description": "Five-page marketing site", "budget": 500,
        "skills": ["HTML", "CSS"], "as": "site",
    },
    {
        "op": "bid", "project": "$site", "freelancer": "$lin",
        "amount": 450, "proposal": "Done in two weeks",
    },
    {"op": "hire", "project": "$site", "freelancer": "$lin", "actor": "$ada"},
    {"op": "complete", "project": "$site", "actor": "$ada"},
    {"op": "review", "project": "$site", "rating": 4, "comment": "Solid work", "actor": "$ada"},
    {"op": "reputation", "freelancer": "$lin"},
    {
        "op": "review", "project": "$site", "rating": 5, "comment": "Again",
        "actor": "$ada", "expect": "conflict",
    },
]
