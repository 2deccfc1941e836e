"""MCP tools for generating and comparing fuzzy hashes."""
import os

from typing import Dict, Any, List

from ctph.clustering import cluster_single_linkage
from ctph.compare import SignatureComparer, match_signature
from ctph.hashing import FuzzyHasher, FuzzyHashMode
from ctph.mcp.server import Context, tool_decorator, _check_limit, _check_threshold
from ctph.user_config import get_bool_setting, resolve_hash_mode


def _hasher(do_not_truncate: bool) -> FuzzyHasher:
    mode = resolve_hash_mode()
    if do_not_truncate:
        mode |= FuzzyHashMode.DO_NOT_TRUNCATE
    return FuzzyHasher(mode=mode, eliminate_sequences=get_bool_setting("eliminate_sequences"))


@tool_decorator
async def fuzzy_hash_file(
    ctx: Context,
    file_path: str,
    do_not_truncate: bool = False,
) -> Dict[str, Any]:
    """
    Compute the ssdeep-compatible fuzzy hash of a file on the server.

    Args:
        ctx: The MCP Context object.
        file_path: (str) Path of the file to hash.
        do_not_truncate: (bool) Emit the full-length second digest. Default: False.

    Returns:
        A dictionary with the signature, block size and file size.
    """
    if not os.path.isfile(file_path):
        raise RuntimeError(f"[fuzzy_hash_file] File not found: {file_path}")
    sig = _hasher(do_not_truncate).hash_file(file_path)
    await ctx.info(f"Fuzzy hashed {file_path}")
    return {
        "status": "success",
        "file_path": file_path,
        "file_size": os.path.getsize(file_path),
        "signature": sig,
        "block_size": int(sig.split(":", 1)[0]),
    }


@tool_decorator
async def fuzzy_hash_text(
    ctx: Context,
    text: str,
    do_not_truncate: bool = False,
) -> Dict[str, Any]:
    """
    Compute the fuzzy hash of a UTF-8 text payload.

    Args:
        ctx: The MCP Context object.
        text: (str) Text to hash (encoded as UTF-8).
        do_not_truncate: (bool) Emit the full-length second digest. Default: False.

    Returns:
        A dictionary with the signature and the hashed byte length.
    """
    sig = _hasher(do_not_truncate).hash(text)
    return {"status": "success", "signature": sig, "length": len(text.encode("utf-8", "ignore"))}


@tool_decorator
async def compare_signatures(
    ctx: Context,
    signature1: str,
    signature2: str,
) -> Dict[str, Any]:
    """
    Compare two fuzzy hash signatures.

    A score of 0 means the signatures were compared and are not similar.
    Malformed signatures, or signatures whose block sizes are neither equal
    nor a factor of two apart, are reported as errors.

    Args:
        ctx: The MCP Context object.
        signature1: (str) First signature ("blocksize:digest1:digest2").
        signature2: (str) Second signature.

    Returns:
        A dictionary with the 0-100 similarity score.
    """
    score = _hasher(False).compare(signature1, signature2)
    return {"status": "success", "score": score}


@tool_decorator
async def match_signatures(
    ctx: Context,
    signature: str,
    known_signatures: List[str],
    threshold: int = 0,
    limit: int = 50,
) -> Dict[str, Any]:
    """
    Match one signature against a list of known signatures.

    Known signatures at incompatible block sizes are skipped.

    Args:
        ctx: The MCP Context object.
        signature: (str) The signature to look up.
        known_signatures: (List[str]) Candidate signatures, optionally with ",label" suffixes.
        threshold: (int) Only report scores above this value. Default: 0.
        limit: (int) Maximum number of matches to return. Default: 50.

    Returns:
        A dictionary with matches sorted by descending score.
    """
    _check_threshold(threshold, "match_signatures")
    _check_limit(limit, "match_signatures")
    comparer = SignatureComparer(eliminate_sequences=get_bool_setting("eliminate_sequences"))
    matches = match_signature(signature, known_signatures, threshold=threshold, comparer=comparer)
    result = {
        "status": "success",
        "matches": [
            {"signature": sig.digest, "label": sig.label, "score": score}
            for sig, score in matches[:limit]
        ],
        "count": min(len(matches), limit),
        "total": len(matches),
    }
    if len(matches) > limit:
        await ctx.warning(f"match_signatures: {len(matches)} matches, returning the top {limit}.")
    return result


@tool_decorator
async def cluster_signatures(
    ctx: Context,
    signatures: List[str],
    threshold: int = 50,
) -> Dict[str, Any]:
    """
    Group signatures into single-linkage clusters.

    Args:
        ctx: The MCP Context object.
        signatures: (List[str]) Signatures to cluster.
        threshold: (int) Minimum score linking two signatures. Default: 50.

    Returns:
        A dictionary with clusters as lists of indices into ``signatures``.
    """
    _check_threshold(threshold, "cluster_signatures")
    comparer = SignatureComparer(eliminate_sequences=get_bool_setting("eliminate_sequences"))
    clusters = cluster_single_linkage(signatures, threshold=threshold, comparer=comparer)
    return {"status": "success", "clusters": clusters, "count": len(clusters)}
