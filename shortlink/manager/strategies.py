"""
Strategies for short-code generation.

Provided strategies:
- RandomStrategy: random code over the URL-safe alphabet `A-Za-z0-9_-`
  (the nanoid alphabet, 64 symbols, 6 bits per character)
- Base62Strategy: random code over `0-9a-zA-Z` only, for deployments that
  want codes without punctuation

Both draw from `secrets`, so codes are unpredictable. Neither guarantees
uniqueness: the store rejects duplicates and LinkManager retries.

Lengths are clamped to [4, 32]; the default is 6, giving 64**6 (about
6.9e10) codes for the URL-safe alphabet.
"""

import secrets
import string
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Type

URL_SAFE_ALPHABET = string.ascii_letters + string.digits + "_-"
BASE62_ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase

DEFAULT_LENGTH = 6


def _safe_len(length: int) -> int:
    return max(4, min(32, int(length)))


class BaseStrategy(ABC):
    """Abstract base for code generation strategies."""

    @abstractmethod
    def generate(self) -> str:  # pragma: no cover
        """Return a new candidate short code."""
        raise NotImplementedError


@dataclass(frozen=True)
class RandomStrategy(BaseStrategy):
    """Fixed-length random codes over a URL-safe alphabet."""
    length: int = DEFAULT_LENGTH
    alphabet: str = URL_SAFE_ALPHABET

    def generate(self) -> str:
        n = _safe_len(self.length)
        return "".join(secrets.choice(self.alphabet) for _ in range(n))


@dataclass(frozen=True)
class Base62Strategy(RandomStrategy):
    """Random codes restricted to 0-9a-zA-Z."""
    alphabet: str = BASE62_ALPHABET


STRATEGY_REGISTRY: Dict[str, Type[RandomStrategy]] = {
    "random": RandomStrategy,
    "nanoid": RandomStrategy,
    "url-safe": RandomStrategy,
    "base62": Base62Strategy,
}


def get_strategy(name: str = "random", length: int = DEFAULT_LENGTH) -> BaseStrategy:
    """
    Resolve a strategy by name.

    Raises:
        ValueError: if the name is not registered.
    """
    key = (name or "random").strip().lower()
    cls = STRATEGY_REGISTRY.get(key)
    if cls is None:
        raise ValueError(f"Unknown code strategy: {key!r}")
    return cls(length=_safe_len(length))
