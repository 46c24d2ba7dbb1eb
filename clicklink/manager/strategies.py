"""
Strategies for short-code generation in clicklink.

Provided strategies:
- RandomStrategy: Random Base62 of length L (default 6)
- SequentialStrategy: monotonically increasing integer -> Base62, left-padded
  to a minimum length, with an optional prefix

Common helpers:
- _base62_encode: Non-negative integer -> Base62 string
- _safe_len: Normalize a desired code length (clamped to [4, 32])

Notes:
- Random codes are not unique by construction; the manager retries against
  storage until an unused code is found.
- SequentialStrategy is collision-free within one process but restarts from
  `start` after a restart.
"""

import itertools
import logging
import random
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Type

log = logging.getLogger(__name__)

_BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_BASE62_BASE = len(_BASE62_ALPHABET)

DEFAULT_CODE_LENGTH = 6


def _base62_encode(num: int) -> str:
    """
    Convert a non-negative integer to a Base62 string using the global alphabet.
    0 -> "0", 61 -> "Z", 62 -> "10"
    """
    if num < 0:
        raise ValueError("num must be non-negative")
    if num == 0:
        return "0"
    out = []
    while num > 0:
        num, rem = divmod(num, _BASE62_BASE)
        out.append(_BASE62_ALPHABET[rem])
    return "".join(reversed(out))


def _safe_len(length: Optional[int]) -> int:
    L = int(length) if length is not None else DEFAULT_CODE_LENGTH
    return max(4, min(32, L))


class BaseStrategy(ABC):
    """Abstract base for code generation strategies."""

    @abstractmethod
    def generate(self, *, length: Optional[int] = None) -> str:
        """Return a new short code."""
        raise NotImplementedError


@dataclass(frozen=True)
class RandomStrategy(BaseStrategy):
    """Random Base62 codes drawn from [0-9a-zA-Z]."""

    def generate(self, *, length: Optional[int] = None) -> str:
        L = _safe_len(length)
        rng = random.SystemRandom()
        return "".join(rng.choice(_BASE62_ALPHABET) for _ in range(L))


@dataclass
class SequentialStrategy(BaseStrategy):
    """
    Counter-based strategy:
    - Maintains a process-local monotonically increasing counter
    - Encodes the next integer to Base62
    - Enforces a minimum visible length via left-padding (e.g., "000abc")
    - Optionally prepends a prefix (e.g., "ap000abc")

    `length` passed to `generate` is used as the minimum length when given.
    """

    start: int = 3_500_000
    min_length: int = DEFAULT_CODE_LENGTH
    prefix: str = ""
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    _counter: "itertools.count[int]" = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self._counter = itertools.count(self.start)

    def generate(self, *, length: Optional[int] = None) -> str:
        with self._lock:
            n = next(self._counter)
        code = _base62_encode(n)
        min_len = _safe_len(length) if length is not None else self.min_length
        if len(code) < min_len:
            code = code.rjust(min_len, "0")
        if self.prefix:
            code = f"{self.prefix}{code}"
        return code


STRATEGY_REGISTRY: Dict[str, Type[BaseStrategy]] = {
    "random": RandomStrategy,
    "rand": RandomStrategy,
    "sequential": SequentialStrategy,
    "seq": SequentialStrategy,
}


def get_strategy_from_config(name: Optional[str] = None) -> BaseStrategy:
    """
    Resolve a strategy by name. Unknown names fall back to "random".
    """
    key = (name or "random").strip().lower()
    cls = STRATEGY_REGISTRY.get(key)
    if cls is None:
        log.warning("Unknown code strategy %r, falling back to random", key)
        cls = RandomStrategy
    log.debug("Using code strategy: %s -> %s", key, cls.__name__)
    return cls()
