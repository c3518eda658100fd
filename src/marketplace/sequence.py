"""Monotonic id allocation for store records."""

from __future__ import annotations


class IdSequence:
    """Hands out ``<prefix>-000001``, ``<prefix>-000002``, ...

    Ids are never reused within a process.
    """

    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._counter = 0

    def next_id(self) -> str:
        self._counter += 1
        return f"{self._prefix}-{self._counter:06d}"
