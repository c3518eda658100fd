"""Error kinds raised by the marketplace core.

All errors are raised synchronously to the caller. The core performs no
I/O, so nothing here is transient and nothing is retried.
"""

from __future__ import annotations


class MarketplaceError(ValueError):
    """Base class for every failure the core reports."""

    kind = "error"


class ValidationError(MarketplaceError):
    """Malformed input: empty required field, non-positive amount, bad rating."""

    kind = "validation_error"


class Forbidden(MarketplaceError):
    """The acting participant lacks the role or ownership required."""

    kind = "forbidden"


class InvalidTransition(MarketplaceError):
    """Operation attempted in an incompatible lifecycle state."""

    kind = "invalid_transition"


class Conflict(MarketplaceError):
    """Duplicate bid or duplicate review."""

    kind = "conflict"


class NotFound(MarketplaceError):
    """A referenced id does not resolve, or a hire target never bid."""

    kind = "not_found"
