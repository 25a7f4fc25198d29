"""
Seeded pseudo-random source for reproducible puzzles.

Mulberry32 is a tiny 32-bit generator. Every random draw made while fracturing
a leaf (seed sampling, torn-edge noise, scatter) goes through one instance, so
the same integer seed always yields the same puzzle.
"""

import secrets
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")

_MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32-bit integer multiply, keeping the low 32 bits."""
    return (a * b) & _MASK32


class Mulberry32:
    """
    Mulberry32 PRNG.

    All arithmetic is carried out on unsigned 32-bit integers so a given seed
    produces the same stream on every platform.
    """

    def __init__(self, seed: int):
        """Initialize with an integer seed (only the low 32 bits are used)."""
        self.seed = int(seed) & _MASK32
        self._state = self.seed
        self.call_count = 0

    def random(self) -> float:
        """Generate next random number in [0, 1)."""
        self.call_count += 1
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        s = self._state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = ((t + _imul(t ^ (t >> 7), 61 | t)) & _MASK32) ^ t
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296.0

    def uniform(self, low: float, high: float) -> float:
        """Random float in [low, high)."""
        return low + self.random() * (high - low)

    def choice(self, seq: Sequence[T]) -> T:
        """Choose a random element from a non-empty sequence."""
        if not seq:
            raise IndexError("Cannot choose from an empty sequence")
        return seq[int(self.random() * len(seq))]


def make_prng(seed: Optional[int] = None) -> Mulberry32:
    """
    Build a pseudo-random source.

    Args:
        seed: Integer seed; when omitted the generator is seeded from the
            operating system's entropy pool and results are not reproducible.

    Returns:
        Mulberry32 instance
    """
    if seed is None:
        seed = secrets.randbits(32)
    return Mulberry32(seed)
