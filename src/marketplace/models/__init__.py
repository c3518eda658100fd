"""Core data models for the marketplace."""

from marketplace.models.identity import Participant, Role
from marketplace.models.market import Bid, Project, ProjectStatus
from marketplace.models.review import ReputationSummary, Review

__all__ = [
    "Bid",
    "Participant",
    "Project",
    "ProjectStatus",
    "ReputationSummary",
    "Review",
    "Role",
]
