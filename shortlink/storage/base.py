"""
Base storage interface for the shortlink service.

Purpose:
    Define the small contract every URL store (in-memory, PostgreSQL) must
    honour, so LinkManager and the API never care where mappings live.

Contract:
    - `insert` is the only place short-code uniqueness is enforced.
    - `increment_clicks` is a single indivisible update; concurrent calls
      must never lose increments.
    - Mappings are never updated or deleted otherwise.

Testing & Coverage:
    Abstract methods are not executed directly in tests and are marked
    `# pragma: no cover`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class UrlMapping:
    """A persisted short code -> original URL association."""
    id: str
    short_code: str
    original_url: str
    clicks: int
    created_at: datetime


@dataclass(frozen=True)
class UrlStats:
    """Read-only projection of a mapping, without the internal id."""
    short_code: str
    original_url: str
    clicks: int
    created_at: datetime

    @classmethod
    def from_mapping(cls, mapping: UrlMapping) -> "UrlStats":
        return cls(
            short_code=mapping.short_code,
            original_url=mapping.original_url,
            clicks=mapping.clicks,
            created_at=mapping.created_at,
        )


class BaseStorage(ABC):
    """Abstract base class for storage backends."""

    def init_schema(self) -> None:
        """Prepare backing storage. No-op unless the backend needs DDL."""

    @abstractmethod  # pragma: no cover
    def insert(self, short_code: str, original_url: str) -> UrlMapping:
        """
        Persist a new mapping with clicks=0 and a fresh id/created_at.

        Raises:
            DuplicateCodeError: if `short_code` is already taken. Of two
                racing inserts with the same code exactly one succeeds.
            StoreError: on backend failure.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_by_code(self, short_code: str) -> Optional[UrlMapping]:
        """Return the mapping for `short_code`, or None."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def increment_clicks(self, short_code: str) -> bool:
        """
        Atomically add one to the click counter.

        Returns:
            bool: False if the code does not exist.
        """
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def list_all(self) -> List[UrlMapping]:
        """Return every mapping, newest `created_at` first."""
        raise NotImplementedError

    @abstractmethod  # pragma: no cover
    def find_stats_by_code(self, short_code: str) -> Optional[UrlStats]:
        """Return the stats projection for `short_code`, or None."""
        raise NotImplementedError
