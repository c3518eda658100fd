"""Shared fixtures: a resolver built from the repository config/ directory."""

from pathlib import Path

import pytest

from marketplace.policy.resolver import PolicyResolver
from marketplace.service import TransactionEngine


CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


@pytest.fixture
def resolver() -> PolicyResolver:
    return PolicyResolver.from_config_dir(CONFIG_DIR)


@pytest.fixture
def engine(resolver: PolicyResolver) -> TransactionEngine:
    return TransactionEngine(resolver)
