"""Project market — postings, their lifecycle, and the bids against them."""

from marketplace.market.bid_book import BidBook
from marketplace.market.ledger import ProjectLedger
from marketplace.market.project_state_machine import ProjectStateMachine

__all__ = ["BidBook", "ProjectLedger", "ProjectStateMachine"]
