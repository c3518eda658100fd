"""Identity store — registered clients and freelancers."""

from marketplace.identity.store import IdentityStore

__all__ = ["IdentityStore"]
