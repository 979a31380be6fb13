"""
Storage module for the shortlink service (in-memory implementation).

Responsibilities:
    - Insert mappings and reject duplicate short codes
    - Track click counts with atomic increments
    - Provide lookup, stats and newest-first listing

Design:
    - Satisfies the BaseStorage contract; default backend and the test fake.
    - One `threading.Lock` guards the dict, so uniqueness checks, inserts and
      increments are indivisible across FastAPI's worker threads.
    - Lock acquisition is bounded; a stuck lock surfaces as StoreTimeoutError.
    - Records are frozen dataclasses replaced on increment, so callers never
      hold a live reference into the store.
"""

import contextlib
import itertools
import threading
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from shortlink.errors import DuplicateCodeError, StoreTimeoutError
from shortlink.storage.base import BaseStorage, UrlMapping, UrlStats


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Storage(BaseStorage):
    def __init__(self, clock: Callable[[], datetime] = _utcnow, lock_timeout: float = 5.0):
        """
        Initialize an empty store.

        Internal schema:
            self._rows = {
                short_code: (insert_seq, UrlMapping)
            }

        `insert_seq` breaks ties between mappings created within the same
        clock tick so listing order stays stable.

        Args:
            clock: Source of `created_at` timestamps (tests inject a fake).
            lock_timeout: Seconds to wait for the store lock.
        """
        self._rows: Dict[str, Tuple[int, UrlMapping]] = {}
        self._lock = threading.Lock()
        self._seq = itertools.count()
        self._clock = clock
        self.lock_timeout = lock_timeout

    @contextlib.contextmanager
    def _locked(self):
        if not self._lock.acquire(timeout=self.lock_timeout):
            raise StoreTimeoutError(f"Timed out after {self.lock_timeout}s waiting for the store lock")
        try:
            yield
        finally:
            self._lock.release()

    def insert(self, short_code: str, original_url: str) -> UrlMapping:
        """
        Insert a new mapping.

        Rules:
            - An existing code is never overwritten, even for the same URL.

        Raises:
            DuplicateCodeError: if the code is already present.
        """
        with self._locked():
            if short_code in self._rows:
                raise DuplicateCodeError(short_code)
            mapping = UrlMapping(
                id=str(uuid.uuid4()),
                short_code=short_code,
                original_url=original_url,
                clicks=0,
                created_at=self._clock(),
            )
            self._rows[short_code] = (next(self._seq), mapping)
            return mapping

    def find_by_code(self, short_code: str) -> Optional[UrlMapping]:
        with self._locked():
            row = self._rows.get(short_code)
        return row[1] if row else None

    def increment_clicks(self, short_code: str) -> bool:
        """
        Increment the click count for a code.

        Returns:
            bool: True if incremented, False if the code is unknown.
        """
        with self._locked():
            row = self._rows.get(short_code)
            if row is None:
                return False
            seq, mapping = row
            self._rows[short_code] = (seq, replace(mapping, clicks=mapping.clicks + 1))
            return True

    def list_all(self) -> List[UrlMapping]:
        """Return all mappings ordered by created_at descending (newest insert wins ties)."""
        with self._locked():
            rows = list(self._rows.values())
        rows.sort(key=lambda row: (row[1].created_at, row[0]), reverse=True)
        return [mapping for _, mapping in rows]

    def find_stats_by_code(self, short_code: str) -> Optional[UrlStats]:
        mapping = self.find_by_code(short_code)
        return UrlStats.from_mapping(mapping) if mapping else None
