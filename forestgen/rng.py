"""Seeded pseudo-random sources for reproducible placement.

Two explicit sources share one call surface (``next()`` or ``rng()``):

- SeededRandomSource: mulberry32 over a private 32-bit state.  Same seed,
  same sequence, on every platform.
- EntropyRandomSource: OS entropy, used only when no seed is supplied.

Neither is suitable for anything security sensitive.
"""

import logging
import random

logger = logging.getLogger(__name__)

_MASK32 = 0xFFFFFFFF
_GOLDEN = 0x6D2B79F5
_TWO_32 = 4294967296.0

# Upper bound for seeds drawn in non-deterministic mode.
ENTROPY_SEED_LIMIT = 10 ** 9


def normalize_seed(seed: int) -> int:
    """Wrap any integer into the unsigned 32-bit range."""
    return int(seed) & _MASK32


class SeededRandomSource:
    """Deterministic float stream in [0, 1) from a 32-bit seed."""

    __slots__ = ('_state', 'seed')

    def __init__(self, seed: int):
        self.seed = normalize_seed(seed)
        self._state = self.seed

    @classmethod
    def create(cls, seed: int) -> "SeededRandomSource":
        return cls(seed)

    def next(self) -> float:
        t = (self._state + _GOLDEN) & _MASK32
        self._state = t
        r = ((t ^ (t >> 15)) * (t | 1)) & _MASK32
        r = ((r + (((r ^ (r >> 7)) * (r | 61)) & _MASK32)) & _MASK32) ^ r
        return ((r ^ (r >> 14)) & _MASK32) / _TWO_32

    __call__ = next

    def __repr__(self):
        return f"SeededRandomSource(seed={self.seed})"


class EntropyRandomSource:
    """Non-deterministic source for the "no seed supplied" mode."""

    __slots__ = ('_random',)

    seed = None

    def __init__(self):
        self._random = random.SystemRandom()

    def next(self) -> float:
        return self._random.random()

    __call__ = next

    def draw_seed(self) -> int:
        """Draw a fresh integer seed so downstream work stays replayable."""
        return self._random.randrange(ENTROPY_SEED_LIMIT)

    def __repr__(self):
        return "EntropyRandomSource()"


def create_random_source(seed=None):
    """Return a seeded source, or an entropy source when *seed* is None."""
    if seed is None:
        logger.debug("No seed supplied - using non-deterministic source")
        return EntropyRandomSource()
    return SeededRandomSource(seed)
