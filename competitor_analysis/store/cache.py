"""Key-value record cache with a time-based freshness policy."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, Optional, Protocol


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@dataclass
class NoDataMarker:
    """Remembers that a name resolved to nothing, so failing lookups are not repeated."""

    company_name: str
    last_updated: datetime


class RecordStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...

    def values(self) -> Iterator[Any]: ...


class InMemoryRecordStore:
    """Dict-backed store. No eviction; bounded by the distinct names requested."""

    def __init__(self) -> None:
        self._entries: dict[str, Any] = {}

    def get(self, key: str) -> Optional[Any]:
        return self._entries.get(key)

    def put(self, key: str, value: Any) -> None:
        self._entries[key] = value

    def values(self) -> Iterator[Any]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


def is_stale(entry: Any, now: datetime, ttl: timedelta) -> bool:
    """True when the entry has no ``last_updated`` or is older than ``ttl``."""
    stamp: Optional[datetime] = getattr(entry, "last_updated", None)
    if stamp is None:
        return True
    return now - stamp > ttl
