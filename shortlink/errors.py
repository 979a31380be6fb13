"""
Error kinds raised by the shortlink core.

Validation and not-found are expected outcomes and map to client errors.
Duplicate codes are recovered inside LinkManager by regenerating. Everything
else is a server-side failure.
"""

__all__ = [
    "ShortlinkError",
    "ValidationError",
    "DuplicateCodeError",
    "GenerationExhaustedError",
    "NotFoundError",
    "StoreError",
    "StoreTimeoutError",
]


class ShortlinkError(Exception):
    """Base class for all shortlink errors."""


class ValidationError(ShortlinkError):
    """Required input is missing or empty."""


class DuplicateCodeError(ShortlinkError):
    """The store already holds a mapping for this short code."""

    def __init__(self, short_code: str):
        super().__init__(f"Short code already exists: {short_code!r}")
        self.short_code = short_code


class GenerationExhaustedError(ShortlinkError):
    """Every generate-and-insert attempt collided with an existing code."""

    def __init__(self, attempts: int):
        super().__init__(f"No free short code found after {attempts} attempts")
        self.attempts = attempts


class NotFoundError(ShortlinkError):
    """No mapping exists for the requested short code."""

    def __init__(self, short_code: str):
        super().__init__(f"URL not found: {short_code!r}")
        self.short_code = short_code


class StoreError(ShortlinkError):
    """Connectivity or transaction failure in the storage backend."""


class StoreTimeoutError(StoreError):
    """A storage call timed out or was cancelled."""
