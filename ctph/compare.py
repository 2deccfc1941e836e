"""Signature comparison: canonicalisation, common-substring gate and scoring."""
import logging

from typing import Iterable, List, Optional, Tuple, Union

from ctph.constants import MIN_BLOCKSIZE, ROLLING_WINDOW, SPAMSUM_LENGTH
from ctph.edit_distance import EditDistanceScorer, default_scorer
from ctph.errors import IncomparableBlockSizes, InvalidSignatureFormat
from ctph.roll import RollingHash
from ctph.signature import Signature

logger = logging.getLogger("CTPH")

SignatureLike = Union[str, Signature]


def eliminate_sequences(digest: str) -> str:
    """Collapse every run of more than three identical symbols to three.

    Such runs carry very little information and would otherwise bias the
    edit distance and the common-substring test.
    """
    if len(digest) <= 3:
        return digest
    parts = [digest[0], digest[1], digest[2]]
    for i in range(3, len(digest)):
        c = digest[i]
        if c != digest[i - 1] or c != digest[i - 2] or c != digest[i - 3]:
            parts.append(c)
    return ''.join(parts)


def has_common_substring(s1: str, s2: str) -> bool:
    """True if ``s1`` and ``s2`` share a substring of ROLLING_WINDOW symbols.

    Rolling hashes act as a filter; every candidate is confirmed by a
    direct comparison.
    """
    if len(s1) < ROLLING_WINDOW or len(s2) < ROLLING_WINDOW:
        return False

    roll = RollingHash()
    hash_index = {}
    for j, ch in enumerate(s1):
        h = roll.update(ord(ch))
        if j >= ROLLING_WINDOW - 1 and h != 0:
            hash_index.setdefault(h, []).append(j)

    roll = RollingHash()
    for i, ch in enumerate(s2):
        h = roll.update(ord(ch))
        if i < ROLLING_WINDOW - 1:
            continue
        candidates = hash_index.get(h)
        if not candidates:
            continue
        ir = i - (ROLLING_WINDOW - 1)
        s2_window = s2[ir:ir + ROLLING_WINDOW]
        for j in candidates:
            jr = j - (ROLLING_WINDOW - 1)
            if s1[jr:jr + ROLLING_WINDOW] == s2_window:
                return True
    return False


def _as_signature(sig: SignatureLike) -> Signature:
    if isinstance(sig, Signature):
        return sig
    if isinstance(sig, str):
        return Signature.parse(sig)
    raise TypeError(f"Arguments must be signature strings or Signature objects, not {type(sig)}")


def check_comparable(bs1: int, bs2: int) -> None:
    if bs1 != bs2 and bs1 != bs2 * 2 and bs2 != bs1 * 2:
        raise IncomparableBlockSizes(
            f"Block sizes {bs1} and {bs2} are neither equal nor a factor of two apart; "
            "the signatures cannot be compared."
        )


class SignatureComparer(object):
    """Scores two signatures from 0 (no match) to 100 (identical)."""

    def __init__(self, eliminate_sequences: bool = True, scorer: Optional[EditDistanceScorer] = None):
        self.eliminate_sequences = eliminate_sequences
        self.scorer = scorer if scorer is not None else default_scorer

    def _canonical(self, digest: str) -> str:
        return eliminate_sequences(digest) if self.eliminate_sequences else digest

    def score_strings(self, s1: str, s2: str, block_size: int) -> int:
        """Score two canonical digests that were produced at ``block_size``."""
        len1 = len(s1)
        len2 = len(s2)
        if len1 > SPAMSUM_LENGTH or len2 > SPAMSUM_LENGTH:
            return 0
        if not has_common_substring(s1, s2):
            return 0

        score = self.scorer.distance(s1, s2)
        # Proportion of the message that changed, roughly on a 0-64 scale.
        score = (score * SPAMSUM_LENGTH) // (len1 + len2)
        score = (100 * score) // 64
        if score >= 100:
            return 0
        score = 100 - score

        # Small block sizes carry little evidence; do not exaggerate them.
        match_size = (block_size // MIN_BLOCKSIZE) * min(len1, len2)
        if score > match_size:
            score = match_size
        return score

    def compare(self, sig1: SignatureLike, sig2: SignatureLike) -> int:
        a = _as_signature(sig1)
        b = _as_signature(sig2)
        check_comparable(a.block_size, b.block_size)

        for sig in (a, b):
            if not sig.digest1 or not sig.digest2:
                raise InvalidSignatureFormat(f"Badly formed signature (empty digest): {sig.digest!r}")

        a1 = self._canonical(a.digest1)
        a2 = self._canonical(a.digest2)
        b1 = self._canonical(b.digest1)
        b2 = self._canonical(b.digest2)

        if a.block_size == b.block_size and a1 == b1:
            return 100

        if a.block_size == b.block_size:
            score1 = self.score_strings(a1, b1, a.block_size)
            score2 = self.score_strings(a2, b2, a.block_size * 2)
            return max(score1, score2)
        elif a.block_size == b.block_size * 2:
            return self.score_strings(a1, b2, a.block_size)
        else:
            return self.score_strings(a2, b1, b.block_size)


default_comparer = SignatureComparer()


def compare(sig1: SignatureLike, sig2: SignatureLike) -> int:
    return default_comparer.compare(sig1, sig2)


def match_signature(
    candidate: SignatureLike,
    known: Iterable[SignatureLike],
    threshold: int = 0,
    comparer: Optional[SignatureComparer] = None,
) -> List[Tuple[Signature, int]]:
    """
    Compare ``candidate`` against every signature in ``known``.

    Returns ``(signature, score)`` pairs scoring above ``threshold``, best
    first. Known signatures at an incompatible block size are skipped;
    malformed ones still raise.
    """
    comparer = comparer or default_comparer
    target = _as_signature(candidate)
    matches = []
    for entry in known:
        sig = _as_signature(entry)
        try:
            score = comparer.compare(target, sig)
        except IncomparableBlockSizes:
            logger.debug(f"Skipping {sig.digest}: block size {sig.block_size} not comparable with {target.block_size}")
            continue
        if score > threshold:
            matches.append((sig, score))
    matches.sort(key=lambda item: item[1], reverse=True)
    return matches
