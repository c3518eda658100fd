"""Marketplace policy — config-driven parameters."""

from marketplace.policy.resolver import PolicyResolver

__all__ = ["PolicyResolver"]
