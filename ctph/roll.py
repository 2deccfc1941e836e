"""Rolling checksum over the last ROLLING_WINDOW bytes."""
from ctph.constants import ROLLING_WINDOW, MASK32


class RollingHash(object):
    """
    Adler-style rolling hash. A trigger depends only on the bytes in the
    window, so an insert or delete upstream resynchronises within
    ROLLING_WINDOW bytes.

    h1 is the window sum, h2 the window sum weighted by recency and h3 a
    shift/xor hash that keeps large block sizes reachable. All three wrap
    at 32 bits, as does their sum; trigger points depend on it.
    """

    def __init__(self):
        self.reset()

    def reset(self):
        self.win = bytearray(ROLLING_WINDOW)
        self.h1 = 0
        self.h2 = 0
        self.h3 = 0
        self.n = 0

    @property
    def digest(self) -> int:
        return (self.h1 + self.h2 + self.h3) & MASK32

    def update(self, b: int) -> int:
        slot = self.n % ROLLING_WINDOW
        self.h2 = (self.h2 - self.h1 + ROLLING_WINDOW * b) & MASK32
        self.h1 = (self.h1 + b - self.win[slot]) & MASK32
        self.win[slot] = b
        self.n += 1
        self.h3 = ((self.h3 << 5) & MASK32) ^ b
        return (self.h1 + self.h2 + self.h3) & MASK32

    def copy(self) -> "RollingHash":
        clone = RollingHash.__new__(RollingHash)
        clone.win = bytearray(self.win)
        clone.h1, clone.h2, clone.h3, clone.n = self.h1, self.h2, self.h3, self.n
        return clone
