"""Single-linkage clustering of fuzzy signatures."""
import logging

from typing import Dict, List, Optional, Sequence

from ctph.compare import SignatureComparer, SignatureLike, _as_signature, default_comparer
from ctph.errors import IncomparableBlockSizes

logger = logging.getLogger("CTPH")


def cluster_single_linkage(
    signatures: Sequence[SignatureLike],
    threshold: int = 50,
    comparer: Optional[SignatureComparer] = None,
) -> List[List[int]]:
    """Single-linkage clustering for fuzzy signatures.

    Returns clusters as lists of indices into the input sequence. Pairs
    with a score >= threshold are linked and connected components are
    output as clusters. Pairs at incomparable block sizes are never linked.
    """
    comparer = comparer or default_comparer
    sigs = [_as_signature(s) for s in signatures]
    n = len(sigs)
    parent = list(range(n))
    rank = [0] * n

    def find(x: int) -> int:
        while parent[x] != x:
            parent[x] = parent[parent[x]]
            x = parent[x]
        return x

    def union(a: int, b: int) -> None:
        ra, rb = find(a), find(b)
        if ra == rb:
            return
        if rank[ra] < rank[rb]:
            parent[ra] = rb
        elif rank[ra] > rank[rb]:
            parent[rb] = ra
        else:
            parent[rb] = ra
            rank[ra] += 1

    for i in range(n):
        for j in range(i + 1, n):
            try:
                score = comparer.compare(sigs[i], sigs[j])
            except IncomparableBlockSizes:
                continue
            if score >= threshold:
                union(i, j)

    comp: Dict[int, List[int]] = {}
    for i in range(n):
        comp.setdefault(find(i), []).append(i)
    clusters = list(comp.values())
    logger.debug(f"Clustered {n} signatures into {len(clusters)} groups at threshold {threshold}")
    return clusters
