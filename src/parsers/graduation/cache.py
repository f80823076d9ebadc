"""Bounded newest-first store of graduation records, unique by mint."""

from collections import deque

from src.parsers.graduation.models import GraduationRecord


class GraduationCache:
    """Push-front, truncate-tail cache. Existing records are never overwritten.

    Only mutated from the event loop and never across an await, so no lock.
    """

    def __init__(self, capacity: int = 100) -> None:
        self._capacity = capacity
        self._records: deque[GraduationRecord] = deque()
        self._mints: set[str] = set()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, mint: object) -> bool:
        return mint in self._mints

    @property
    def capacity(self) -> int:
        return self._capacity

    def add(self, record: GraduationRecord) -> bool:
        """Insert at the front. Returns False (no-op) for an already cached mint."""
        if record.mint in self._mints:
            return False
        self._records.appendleft(record)
        self._mints.add(record.mint)
        while len(self._records) > self._capacity:
            evicted = self._records.pop()
            self._mints.discard(evicted.mint)
        return True

    def get(self, mint: str) -> GraduationRecord | None:
        if mint not in self._mints:
            return None
        return next((r for r in self._records if r.mint == mint), None)

    def records(self) -> list[GraduationRecord]:
        """Newest first."""
        return list(self._records)

    @property
    def newest(self) -> GraduationRecord | None:
        return self._records[0] if self._records else None

    @property
    def oldest(self) -> GraduationRecord | None:
        return self._records[-1] if self._records else None
