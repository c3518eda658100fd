"""Reviews and reputation aggregation."""

from marketplace.reputation.ledger import ReviewLedger, compute_reputation

__all__ = ["ReviewLedger", "compute_reputation"]
