"""Unit tests for ctph/roll.py and ctph/blockhash.py."""
import pytest

from ctph.blockhash import BlockLevel, HalfDigestState, HALF_LENGTH, sum_hash
from ctph.constants import B64, HASH_INIT, MASK32, ROLLING_WINDOW, SPAMSUM_LENGTH
from ctph.roll import RollingHash


# ---------------------------------------------------------------------------
# RollingHash
# ---------------------------------------------------------------------------

class TestRollingHash:
    def test_initial_digest_is_zero(self):
        assert RollingHash().digest == 0

    def test_first_values(self):
        roll = RollingHash()
        # h1=65, h2=7*65, h3=65
        assert roll.update(ord("A")) == 585
        # h1=173, h2=455-65+7*108, h3=(65<<5)^108
        assert roll.update(ord("l")) == 3443
        assert roll.digest == 3443

    def test_window_sum_tracks_last_bytes(self):
        roll = RollingHash()
        for b in range(1, 21):
            roll.update(b)
        assert roll.h1 == sum(range(21 - ROLLING_WINDOW, 21))

    def test_value_depends_only_on_window(self):
        window = b"WINDOW!"
        a = RollingHash()
        b = RollingHash()
        for c in b"some prefix" + window:
            a.update(c)
        for c in b"a completely different and longer prefix" + window:
            b.update(c)
        assert a.digest == b.digest

    def test_wraps_at_32_bits(self):
        roll = RollingHash()
        for _ in range(1000):
            value = roll.update(0xFF)
            assert 0 <= value <= MASK32
            assert 0 <= roll.h3 <= MASK32

    def test_reset(self):
        roll = RollingHash()
        roll.update(1)
        roll.reset()
        assert roll.digest == 0
        assert roll.n == 0

    def test_copy_is_independent(self):
        roll = RollingHash()
        roll.update(10)
        clone = roll.copy()
        clone.update(20)
        assert roll.n == 1
        assert clone.n == 2


# ---------------------------------------------------------------------------
# BlockLevel
# ---------------------------------------------------------------------------

def _cut_times(level, count):
    for _ in range(count):
        level.absorb(0x41)
        level.cut()


class TestBlockLevel:
    def test_new_level(self):
        level = BlockLevel(2)
        assert level.block_size == 12
        assert level.dlen == 0
        assert level.h == HASH_INIT
        assert level.half_state is HalfDigestState.ACTIVE

    def test_sum_hash(self):
        assert sum_hash(0x41, HASH_INIT) == ((HASH_INIT * 0x01000193) & MASK32) ^ 0x41

    def test_cut_emits_symbol_and_resets(self):
        level = BlockLevel(0)
        level.absorb(ord("A"))
        level.absorb(ord("l"))
        expected = B64[level.h % 64]
        assert level.cut() is True
        assert level.symbols == [expected] == ["A"]
        assert level.h == HASH_INIT
        assert level.half_h == HASH_INIT

    def test_half_digest_freezes(self):
        level = BlockLevel(0)
        _cut_times(level, HALF_LENGTH - 1)
        assert level.half_state is HalfDigestState.ACTIVE
        _cut_times(level, 1)
        assert level.dlen == HALF_LENGTH
        assert level.half_state is HalfDigestState.FROZEN

    def test_frozen_half_hash_is_not_reset(self):
        level = BlockLevel(0)
        _cut_times(level, HALF_LENGTH)
        level.absorb(0x42)
        before = level.half_h
        level.cut()
        assert level.half_h == before
        assert level.half_pending == B64[before % 64]
        assert level.half_state is HalfDigestState.FROZEN

    def test_full_level_only_replaces_pending(self):
        level = BlockLevel(0)
        _cut_times(level, SPAMSUM_LENGTH - 1)
        assert level.is_full
        level.absorb(0x43)
        h = level.h
        assert level.cut() is False
        assert level.dlen == SPAMSUM_LENGTH - 1
        assert level.pending == B64[h % 64]
        # the full hash keeps accumulating
        assert level.h == h

    def test_fork(self):
        level = BlockLevel(3)
        level.absorb(7)
        child = level.fork()
        assert child.index == 4
        assert child.block_size == 2 * level.block_size
        assert child.h == level.h
        assert child.half_h == level.half_h
        assert child.dlen == 0

    def test_copy(self):
        level = BlockLevel(0)
        _cut_times(level, 5)
        clone = level.copy()
        _cut_times(clone, 1)
        assert level.dlen == 5
        assert clone.dlen == 6
