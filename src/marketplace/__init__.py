"""Freelance marketplace core — identities, projects, bids, and reviews."""

__version__ = "0.1.0"
