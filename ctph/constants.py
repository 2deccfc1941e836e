"""Shared constants for the CTPH engine."""

ROLLING_WINDOW = 7
MIN_BLOCKSIZE = 3
NUM_BLOCKHASHES = 31
SPAMSUM_LENGTH = 64

HASH_PRIME = 0x01000193
HASH_INIT = 0x28021967
MASK32 = 0xFFFFFFFF

STREAM_BUFF_SIZE = 8192

B64 = 'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/'
B64_SET = frozenset(B64)


def block_size_for(index: int) -> int:
    """Block size of the level at ``index`` (3, 6, 12, ...)."""
    return MIN_BLOCKSIZE << index
