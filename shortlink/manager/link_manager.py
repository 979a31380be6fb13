"""
LinkManager module for the shortlink service.

Responsibilities:
    - Shorten: validate input, generate a code, insert it, build the short URL
    - Resolve: look a code up and count one click per successful call
    - Stats / listing: read-only pass-through to the store

Design notes:
    - The store is an injected dependency; LinkManager keeps no mapping state.
    - Uniqueness is enforced by the store. On DuplicateCodeError the manager
      regenerates and retries, up to `max_attempts` in total.
    - No URL normalization or dedupe: shortening the same URL twice yields two
      independent codes.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from shortlink.config import Settings
from shortlink.errors import (
    DuplicateCodeError,
    GenerationExhaustedError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from shortlink.storage.base import BaseStorage, UrlMapping, UrlStats
from shortlink.manager.strategies import BaseStrategy, RandomStrategy, get_strategy

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShortenResult:
    short_code: str
    short_url: str


class LinkManager:
    """Coordinates code allocation and resolution over a URL store."""

    def __init__(
        self,
        storage: BaseStorage,
        strategy: Optional[BaseStrategy] = None,
        max_attempts: int = 5,
    ):
        """
        Args:
            storage (BaseStorage): Backend that owns all mapping state.
            strategy (Optional[BaseStrategy]): Code generator; 6-char URL-safe random by default.
            max_attempts (int): Generate-and-insert attempts before giving up.
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.storage = storage
        self.strategy = strategy or RandomStrategy()
        self.max_attempts = max_attempts

    @classmethod
    def from_settings(cls, storage: BaseStorage, settings: Settings) -> "LinkManager":
        strategy = get_strategy(settings.code_strategy, settings.code_length)
        return cls(storage=storage, strategy=strategy, max_attempts=settings.max_attempts)

    # ---------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------
    def shorten(self, original_url: Optional[str], base_url: str) -> ShortenResult:
        """
        Create a new mapping for `original_url`.

        Rules:
            - Missing or blank URL -> ValidationError.
            - On a code collision, regenerate and retry; after `max_attempts`
              collisions -> GenerationExhaustedError.
            - short_url is `base_url + "/" + short_code` (one trailing slash on
              base_url is dropped first).

        Raises:
            ValidationError, GenerationExhaustedError, StoreError.
        """
        if not original_url or not original_url.strip():
            raise ValidationError("originalUrl is required")

        for attempt in range(1, self.max_attempts + 1):
            code = self.strategy.generate()
            try:
                mapping = self.storage.insert(code, original_url)
            except DuplicateCodeError as exc:
                log.warning(
                    "Short code collision on attempt %d/%d: %s",
                    attempt, self.max_attempts, exc,
                )
                continue
            log.info("Created short code %s -> %s", mapping.short_code, original_url)
            base = base_url[:-1] if base_url.endswith("/") else base_url
            return ShortenResult(short_code=mapping.short_code, short_url=f"{base}/{mapping.short_code}")

        raise GenerationExhaustedError(self.max_attempts)

    def resolve(self, short_code: str) -> str:
        """
        Return the original URL for `short_code` and record one click.

        Raises:
            NotFoundError: unknown code.
            StoreError: the record vanished between lookup and increment, so
                the click could not be counted.
        """
        mapping = self.storage.find_by_code(short_code)
        if mapping is None:
            log.debug("Resolve miss for %r", short_code)
            raise NotFoundError(short_code)

        if not self.storage.increment_clicks(short_code):
            raise StoreError(f"Click not recorded for {short_code!r}: record missing after lookup")
        return mapping.original_url

    def get_stats(self, short_code: str) -> UrlStats:
        """Return clicks and metadata for `short_code` or raise NotFoundError."""
        stats = self.storage.find_stats_by_code(short_code)
        if stats is None:
            raise NotFoundError(short_code)
        return stats

    def list_all(self) -> List[UrlMapping]:
        """All mappings, newest first."""
        return self.storage.list_all()
