"""SSDeep-compatible fuzzy hashing (signature generation)."""
import enum
import io
import logging
import mmap
import os

from typing import List, Optional, Union

from ctph.blockhash import BlockLevel, HALF_LENGTH, sum_hash
from ctph.compare import SignatureComparer, eliminate_sequences
from ctph.constants import (
    B64, HASH_INIT, MIN_BLOCKSIZE, NUM_BLOCKHASHES, SPAMSUM_LENGTH,
    STREAM_BUFF_SIZE, block_size_for,
)
from ctph.errors import GenerationOverflow
from ctph.roll import RollingHash
from ctph.signature import Signature

logger = logging.getLogger("CTPH")

HashableData = Union[bytes, bytearray, memoryview, mmap.mmap, str]


class FuzzyHashMode(enum.IntFlag):
    NONE = 0
    # Eliminate sequences of more than three identical characters
    ELIMINATE_SEQUENCES = 1
    # Do not truncate the second part to SPAMSUM_LENGTH/2 characters
    DO_NOT_TRUNCATE = 2


def initial_level_index(total_size: int, start: int = 0) -> int:
    """Smallest level index whose block size covers ``total_size`` in SPAMSUM_LENGTH chunks."""
    index = start
    while block_size_for(index) * SPAMSUM_LENGTH < total_size:
        index += 1
        if index >= NUM_BLOCKHASHES:
            raise GenerationOverflow(
                f"Input of {total_size} bytes needs a block size beyond "
                f"{block_size_for(NUM_BLOCKHASHES - 1)}."
            )
    return index


class FuzzyHash(object):
    """
    Streaming CTPH generator.

    One forward pass drives an ordered list of live block levels. A level
    forks its double when it first triggers, and the smallest level is
    retired once the next one holds enough symbols to be chosen instead, so
    block-size escalation never needs a second pass.

    If ``total_size`` is declared up front, level retirement uses it from
    the first byte, which makes chunked hashing of a file identical to
    hashing its whole contents at once.
    """

    def __init__(self, mode: FuzzyHashMode = FuzzyHashMode.NONE, total_size: Optional[int] = None):
        if total_size is not None and total_size < 0:
            raise ValueError(f"total_size must be non-negative, got {total_size}")
        self.mode = FuzzyHashMode(mode)
        self.fixed_size = total_size
        self.total_size = 0
        self._roll = RollingHash()
        self._levels: List[BlockLevel] = [BlockLevel(0)]
        self._last_h: Optional[int] = None

    # ------------------------------------------------------------------
    #  Level bookkeeping
    # ------------------------------------------------------------------

    @property
    def _start(self) -> int:
        return self._levels[0].index

    @property
    def _end(self) -> int:
        return self._levels[-1].index + 1

    def _level(self, index: int) -> BlockLevel:
        return self._levels[index - self._start]

    def _expected_size(self) -> int:
        return self.fixed_size if self.fixed_size is not None else self.total_size

    def _try_fork(self) -> None:
        last = self._levels[-1]
        if self._end < NUM_BLOCKHASHES:
            self._levels.append(last.fork())
        elif self._last_h is None:
            # No more levels: keep a running hash for the largest one.
            self._last_h = last.h

    def _try_retire(self) -> None:
        if len(self._levels) < 2:
            return
        if self._levels[0].block_size * SPAMSUM_LENGTH >= self._expected_size():
            return
        if self._levels[1].dlen < HALF_LENGTH:
            return
        retired = self._levels.pop(0)
        logger.debug(f"Retired block size {retired.block_size}; now starting at {self._levels[0].block_size}")

    # ------------------------------------------------------------------
    #  Engine
    # ------------------------------------------------------------------

    def update(self, data: HashableData) -> "FuzzyHash":
        buf = _as_bytes(data)
        if self.fixed_size is not None and self.total_size + len(buf) > self.fixed_size:
            raise ValueError(
                f"Input exceeds the declared total size of {self.fixed_size} bytes."
            )
        self.total_size += len(buf)

        roll_update = self._roll.update
        levels = self._levels
        for b in buf:
            h = roll_update(b)
            for level in levels:
                level.absorb(b)
            if self._last_h is not None:
                self._last_h = sum_hash(b, self._last_h)

            if h % MIN_BLOCKSIZE != MIN_BLOCKSIZE - 1:
                continue
            i = self._start
            while i < self._end:
                level = self._level(i)
                bs = level.block_size
                if h % bs != bs - 1:
                    break
                if level.dlen == 0:
                    self._try_fork()
                if not level.cut():
                    self._try_retire()
                i += 1
        return self

    def _choose_level(self) -> BlockLevel:
        index = initial_level_index(self.total_size, self._start)
        while index >= self._end:
            index -= 1
        while index > self._start and self._level(index).dlen < HALF_LENGTH:
            index -= 1
        return self._level(index)

    def digest(self) -> str:
        return str(self.signature())

    def signature(self, label: Optional[str] = None) -> Signature:
        if self.fixed_size is not None and self.fixed_size != self.total_size:
            raise ValueError(
                f"Declared total size {self.fixed_size} does not match the "
                f"{self.total_size} bytes hashed."
            )
        elim = bool(self.mode & FuzzyHashMode.ELIMINATE_SEQUENCES)
        no_trunc = bool(self.mode & FuzzyHashMode.DO_NOT_TRUNCATE)
        h = self._roll.digest

        level = self._choose_level()
        first = _copy_symbols(level.symbols, elim)
        if h != 0:
            _append_symbol(first, B64[level.h % 64], elim)
        elif level.pending is not None:
            _append_symbol(first, level.pending, elim)

        second: List[str] = []
        if level.index < self._end - 1:
            nxt = self._level(level.index + 1)
            symbols = nxt.symbols if no_trunc else nxt.symbols[:HALF_LENGTH - 1]
            second = _copy_symbols(symbols, elim)
            if h != 0:
                tail_h = nxt.h if no_trunc else nxt.half_h
                _append_symbol(second, B64[tail_h % 64], elim)
            else:
                tail = nxt.pending if no_trunc else nxt.half_pending
                if tail is not None:
                    _append_symbol(second, tail, elim)
        elif h != 0:
            if level.index == 0:
                second.append(B64[level.h % 64])
            else:
                second.append(B64[(self._last_h if self._last_h is not None else HASH_INIT) % 64])

        return Signature(level.block_size, ''.join(first), ''.join(second), label)

    def copy(self) -> "FuzzyHash":
        clone = FuzzyHash.__new__(FuzzyHash)
        clone.mode = self.mode
        clone.fixed_size = self.fixed_size
        clone.total_size = self.total_size
        clone._roll = self._roll.copy()
        clone._levels = [level.copy() for level in self._levels]
        clone._last_h = self._last_h
        return clone


def _copy_symbols(symbols: List[str], elim: bool) -> List[str]:
    if elim:
        return list(eliminate_sequences(''.join(symbols)))
    return list(symbols)


def _append_symbol(out: List[str], symbol: str, elim: bool) -> None:
    if elim and len(out) >= 3 and symbol == out[-1] == out[-2] == out[-3]:
        return
    out.append(symbol)


def _as_bytes(data: HashableData) -> bytes:
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    if isinstance(data, str):
        return data.encode('utf-8', 'ignore')
    if isinstance(data, mmap.mmap):
        return data[:]
    raise TypeError(f"Argument must be of bytes, string, or mmap.mmap type, not {type(data)}")


class FuzzyHasher(object):
    """Convenience front end bundling generation and comparison options."""

    def __init__(self, mode: FuzzyHashMode = FuzzyHashMode.NONE, eliminate_sequences: bool = True):
        self.mode = FuzzyHashMode(mode)
        self.eliminate_sequences = eliminate_sequences

    def hash(self, data: HashableData) -> str:
        return FuzzyHash(self.mode).update(data).digest()

    def hash_stream(self, stream: io.RawIOBase, total_size: Optional[int] = None) -> str:
        """Hash a binary file object, reading STREAM_BUFF_SIZE bytes at a time."""
        state = FuzzyHash(self.mode, total_size=total_size)
        buf = stream.read(STREAM_BUFF_SIZE)
        while buf:
            state.update(buf)
            buf = stream.read(STREAM_BUFF_SIZE)
        return state.digest()

    def hash_file(self, path: Union[str, os.PathLike]) -> str:
        size = os.path.getsize(path)
        logger.debug(f"Fuzzy hashing {path} ({size} bytes)")
        with open(path, 'rb') as f:
            return self.hash_stream(f, total_size=size)

    def compare(self, sig1, sig2) -> int:
        return SignatureComparer(eliminate_sequences=self.eliminate_sequences).compare(sig1, sig2)


fuzzy_hasher = FuzzyHasher()


def hash_bytes(data: HashableData, mode: FuzzyHashMode = FuzzyHashMode.NONE) -> str:
    return FuzzyHash(mode).update(data).digest()


def hash_file(path: Union[str, os.PathLike], mode: FuzzyHashMode = FuzzyHashMode.NONE) -> str:
    return FuzzyHasher(mode).hash_file(path)
