"""CLI printing and output formatting functions."""
import io
import sys

from typing import List, Sequence, Tuple

from ctph.cli.sigfile import quote_label, write_signatures
from ctph.signature import Signature


def safe_print(text_to_print, verbose_prefix=""):
    try:
        print(f"{verbose_prefix}{text_to_print}")
    except UnicodeEncodeError:
        output_encoding = sys.stdout.encoding if sys.stdout.encoding else 'utf-8'
        encoded_text = str(text_to_print).encode(output_encoding, errors='backslashreplace').decode(output_encoding, errors='ignore')
        print(f"{verbose_prefix}{encoded_text} (some characters replaced/escaped)")


def _print_hash_results_cli(results: Sequence[Tuple[str, str]], bare: bool = False):
    """Print ``(path, signature)`` pairs in ssdeep list format."""
    sigs = [Signature.parse(sig) if bare else Signature.parse(sig).with_label(quote_label(path))
            for path, sig in results]
    buf = io.StringIO()
    write_signatures(buf, sigs, header=not bare)
    for line in buf.getvalue().splitlines():
        safe_print(line)


def _print_compare_result_cli(sig1: str, sig2: str, score: int):
    safe_print(f"{sig1} matches {sig2} ({score})")


def _print_match_results_cli(name: str, matches: List[Tuple[Signature, int]]):
    for sig, score in matches:
        label = sig.label if sig.label is not None else sig.digest
        safe_print(f"{name} matches {label} ({score})")


def _print_clusters_cli(names: Sequence[str], clusters: List[List[int]]):
    numbered = [c for c in clusters if len(c) > 1]
    if not numbered:
        safe_print("No clusters found.")
        return
    for n, cluster in enumerate(numbered, start=1):
        safe_print(f"** Cluster size {len(cluster)} (#{n})")
        for idx in cluster:
            safe_print(f"  {names[idx]}")
