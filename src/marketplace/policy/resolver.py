"""Policy resolver — loads marketplace policy from JSON config files.

Policy lives in ``config/market_policy.json``. Every key is optional;
missing keys fall back to the built-in defaults below. Malformed values
fail closed with ValueError at load time, never at first use.

The review scale is a closed enumeration: a policy file may restate it
but cannot change it.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Optional


POLICY_FILENAME = "market_policy.json"

RATING_MIN = 1
RATING_MAX = 5

_DEFAULTS: dict[str, Any] = {
    "reputation": {"decimal_places": 1},
    "review": {"rating_min": RATING_MIN, "rating_max": RATING_MAX},
    "identity": {"default_freelancer_title": "New Freelancer"},
    "ids": {
        "participant_prefix": "U",
        "project_prefix": "P",
        "bid_prefix": "B",
        "review_prefix": "R",
    },
    "search": {"default_limit": 20},
}


def _merge(defaults: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(defaults)
    for section, values in overrides.items():
        if section.startswith("_"):
            continue  # comment keys
        if not isinstance(values, dict):
            raise ValueError(f"Policy section '{section}' must be an object")
        merged.setdefault(section, {}).update(values)
    return merged


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class PolicyResolver:
    """Read-only view over the marketplace policy.

    Usage:
        resolver = PolicyResolver.from_config_dir(config_dir)
        places = resolver.reputation_decimal_places()
    """

    def __init__(self, policy: Optional[dict[str, Any]] = None) -> None:
        self._policy = _merge(_DEFAULTS, policy or {})
        errors = self.validate()
        if errors:
            raise ValueError("Invalid market policy: " + "; ".join(errors))

    @classmethod
    def from_config_dir(cls, config_dir: Path) -> PolicyResolver:
        """Load policy from ``config_dir/market_policy.json``.

        A directory without the policy file yields the defaults.
        """
        path = Path(config_dir) / POLICY_FILENAME
        if not path.exists():
            return cls()
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object")
        return cls(data)

    @classmethod
    def default(cls) -> PolicyResolver:
        return cls()

    def validate(self) -> list[str]:
        """Return policy errors (empty = OK)."""
        errors: list[str] = []

        places = self._policy["reputation"].get("decimal_places")
        if not _is_int(places) or not (0 <= places <= 4):
            errors.append(f"reputation.decimal_places must be an int in [0, 4], got {places!r}")

        review = self._policy["review"]
        if review.get("rating_min") != RATING_MIN or review.get("rating_max") != RATING_MAX:
            errors.append(
                f"review rating scale is fixed at [{RATING_MIN}, {RATING_MAX}], "
                f"got [{review.get('rating_min')!r}, {review.get('rating_max')!r}]"
            )

        title = self._policy["identity"].get("default_freelancer_title")
        if not isinstance(title, str) or not title.strip():
            errors.append("identity.default_freelancer_title must be a non-empty string")

        ids = self._policy["ids"]
        prefixes = []
        for key in ("participant_prefix", "project_prefix", "bid_prefix", "review_prefix"):
            prefix = ids.get(key)
            if not isinstance(prefix, str) or not prefix.strip():
                errors.append(f"ids.{key} must be a non-empty string")
            else:
                prefixes.append(prefix)
        if len(set(prefixes)) != len(prefixes):
            errors.append("ids prefixes must be distinct")

        limit = self._policy["search"].get("default_limit")
        if not _is_int(limit) or limit <= 0:
            errors.append(f"search.default_limit must be a positive int, got {limit!r}")

        return errors

    def reputation_decimal_places(self) -> int:
        return self._policy["reputation"]["decimal_places"]

    def rating_bounds(self) -> tuple[int, int]:
        review = self._policy["review"]
        return review["rating_min"], review["rating_max"]

    def default_freelancer_title(self) -> str:
        return self._policy["identity"]["default_freelancer_title"].strip()

    def id_prefix(self, kind: str) -> str:
        """Return the id prefix for 'participant', 'project', 'bid' or 'review'."""
        key = f"{kind}_prefix"
        if key not in self._policy["ids"]:
            raise KeyError(f"Unknown id kind: {kind}")
        return self._policy["ids"][key]

    def search_default_limit(self) -> int:
        return self._policy["search"]["default_limit"]

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._policy)
