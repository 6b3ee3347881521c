"""
Deterministic pseudo-random numbers for synthetic per-user data.

Mulberry32 seeded from an FNV-1a hash of an identity string. Both use
unsigned 32-bit wraparound arithmetic, so a sequence can be reproduced
bit-for-bit by any implementation using the same constants.
"""

from typing import Iterator, Tuple

UINT32_MASK = 0xFFFFFFFF
_TWO_POW_32 = 4294967296.0

MULBERRY_INCREMENT = 0x6D2B79F5

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619


def _imul(a: int, b: int) -> int:
    """32-bit multiply, keeping the low 32 bits unsigned."""
    return (a * b) & UINT32_MASK


def next_value(state: int) -> Tuple[float, int]:
    """Advance a Mulberry32 state by one step.

    Args:
        state: Current 32-bit state (the seed for the first draw)

    Returns:
        Tuple of (value in [0, 1), next state)
    """
    state = (state + MULBERRY_INCREMENT) & UINT32_MASK
    r = _imul(state ^ (state >> 15), 1 | state)
    r ^= (r + _imul(r ^ (r >> 7), 61 | r)) & UINT32_MASK
    r = (r ^ (r >> 14)) & UINT32_MASK
    return r / _TWO_POW_32, state


def stream(seed: int) -> Iterator[float]:
    """Lazily yield an unbounded sequence of floats from one seed."""
    state = seed & UINT32_MASK
    while True:
        value, state = next_value(state)
        yield value


class Mulberry32:
    """Stateful wrapper around next_value for call sites drawing in sequence.

    Instances are cheap; create one per identity rather than sharing.
    """

    def __init__(self, seed: int):
        self.state = seed & UINT32_MASK

    def random(self) -> float:
        value, self.state = next_value(self.state)
        return value

    __call__ = random


def hash_string(text: str) -> int:
    """Fold a string into an unsigned 32-bit FNV-1a hash.

    Iterates UTF-16 code units so that non-BMP characters hash the same as
    in browser implementations. Not cryptographic; collisions are fine.
    """
    encoded = text.encode("utf-16-le", "surrogatepass")
    h = FNV_OFFSET_BASIS
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h ^= code_unit
        h = _imul(h, FNV_PRIME)
    return h
