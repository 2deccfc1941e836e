"""Per-block-size digest accumulator."""
import enum

from typing import List, Optional

from ctph.constants import (
    B64, HASH_INIT, HASH_PRIME, MASK32, SPAMSUM_LENGTH, block_size_for,
)

HALF_LENGTH = SPAMSUM_LENGTH // 2


def sum_hash(b: int, h: int) -> int:
    """A simple non-rolling hash, based on the FNV hash."""
    return ((h * HASH_PRIME) & MASK32) ^ b


class HalfDigestState(enum.Enum):
    # Half hash is reset on every cut.
    ACTIVE = "active"
    # Committed digest reached HALF_LENGTH: the half hash now folds the
    # whole remainder of the input into a single tail symbol.
    FROZEN = "frozen"


class BlockLevel(object):
    """
    Signature state for one block size.

    ``symbols`` holds committed digest symbols (at most SPAMSUM_LENGTH - 1).
    Once that many are committed the level is full: further cuts only
    replace ``pending`` and ``h`` keeps accumulating, so the last symbol
    covers everything after the 63rd chunk.

    ``half_h`` feeds the truncated second digest. While ACTIVE it is reset
    alongside ``h``; after freezing it is never reset again.
    """

    def __init__(self, index: int, h: int = HASH_INIT, half_h: int = HASH_INIT):
        self.index = index
        self.block_size = block_size_for(index)
        self.h = h
        self.half_h = half_h
        self.symbols: List[str] = []
        self.pending: Optional[str] = None
        self.half_pending: Optional[str] = None
        self.half_state = HalfDigestState.ACTIVE

    def __repr__(self):
        return (f"BlockLevel(block_size={self.block_size}, "
                f"digest={''.join(self.symbols)!r}, half={self.half_state.value})")

    @property
    def dlen(self) -> int:
        return len(self.symbols)

    @property
    def is_full(self) -> bool:
        return len(self.symbols) >= SPAMSUM_LENGTH - 1

    def absorb(self, b: int) -> None:
        self.h = ((self.h * HASH_PRIME) & MASK32) ^ b
        self.half_h = ((self.half_h * HASH_PRIME) & MASK32) ^ b

    def cut(self) -> bool:
        """Emit the current chunk symbol. Returns False if the level is full."""
        symbol = B64[self.h % 64]
        self.half_pending = B64[self.half_h % 64]
        if self.is_full:
            self.pending = symbol
            return False

        self.symbols.append(symbol)
        self.pending = None
        self.h = HASH_INIT
        if self.half_state is HalfDigestState.ACTIVE:
            if len(self.symbols) < HALF_LENGTH:
                self.half_h = HASH_INIT
                self.half_pending = None
            else:
                self.half_state = HalfDigestState.FROZEN
        return True

    def fork(self) -> "BlockLevel":
        """Start the next (double) level from this level's running hashes."""
        return BlockLevel(self.index + 1, h=self.h, half_h=self.half_h)

    def copy(self) -> "BlockLevel":
        clone = BlockLevel(self.index, h=self.h, half_h=self.half_h)
        clone.symbols = list(self.symbols)
        clone.pending = self.pending
        clone.half_pending = self.half_pending
        clone.half_state = self.half_state
        return clone
