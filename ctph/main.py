"""Main entry point: argument parsing, CLI commands, and MCP server startup."""
import sys
import logging
import argparse

from pathlib import Path
from typing import List, Optional, Tuple

from ctph import __version__
from ctph.cli.printers import (
    _print_clusters_cli, _print_compare_result_cli, _print_hash_results_cli,
    _print_match_results_cli, safe_print,
)
from ctph.cli.sigfile import read_signatures
from ctph.clustering import cluster_single_linkage
from ctph.compare import SignatureComparer, match_signature
from ctph.errors import FuzzyHashError
from ctph.hashing import FuzzyHasher, FuzzyHashMode
from ctph.user_config import (
    delete_config_value, get_bool_setting, get_int_setting, get_config_view,
    resolve_hash_mode, set_config_value, _ENV_VAR_MAP,
)

logger = logging.getLogger("CTPH")


def _iter_input_files(paths: List[str], recursive: bool) -> List[Path]:
    files = []
    for p in paths:
        path = Path(p)
        if path.is_dir():
            if not recursive:
                logger.warning(f"{path} is a directory; use -r to hash its contents.")
                continue
            files.extend(sorted(f for f in path.rglob("*") if f.is_file()))
        elif path.is_file():
            files.append(path)
        else:
            logger.error(f"Input file not found: {path}")
    return files


def _build_hasher(args) -> FuzzyHasher:
    mode = resolve_hash_mode()
    if getattr(args, "do_not_truncate", False):
        mode |= FuzzyHashMode.DO_NOT_TRUNCATE
    if getattr(args, "elim_seq", False):
        mode |= FuzzyHashMode.ELIMINATE_SEQUENCES
    eliminate = get_bool_setting("eliminate_sequences")
    if getattr(args, "keep_sequences", False):
        eliminate = False
    return FuzzyHasher(mode=mode, eliminate_sequences=eliminate)


def _hash_files(hasher: FuzzyHasher, files: List[Path]) -> List[Tuple[str, str]]:
    results = []
    for f in files:
        try:
            results.append((str(f), hasher.hash_file(f)))
        except OSError as e:
            logger.error(f"Could not read {f}: {e}")
        except ValueError as e:
            # Size changed between stat and read.
            logger.error(f"Could not hash {f}: {e}")
    return results


def _drop_empty(results: List[Tuple[str, str]]) -> List[Tuple[str, str]]:
    """Signatures with an empty digest cannot be compared; report and skip them."""
    kept = []
    for path, sig in results:
        _, digest1, digest2 = sig.split(":", 2)
        if digest1 and digest2:
            kept.append((path, sig))
        else:
            logger.warning(f"Skipping {path}: signature {sig} has an empty digest and cannot be compared.")
    return kept


def _cmd_hash(args) -> int:
    hasher = _build_hasher(args)
    files = _iter_input_files(args.files, args.recursive)
    _print_hash_results_cli(_hash_files(hasher, files), bare=args.bare)
    return 0


def _cmd_compare(args) -> int:
    hasher = _build_hasher(args)
    score = hasher.compare(args.signature1, args.signature2)
    _print_compare_result_cli(args.signature1, args.signature2, score)
    return 0


def _cmd_match(args) -> int:
    hasher = _build_hasher(args)
    comparer = SignatureComparer(eliminate_sequences=hasher.eliminate_sequences)
    threshold = args.threshold if args.threshold is not None else get_int_setting("match_threshold")

    with open(args.known, "r", encoding="utf-8") as f:
        known = read_signatures(f)
    logger.info(f"Loaded {len(known)} known signatures from {args.known}")

    for path, sig in _drop_empty(_hash_files(hasher, _iter_input_files(args.files, args.recursive))):
        matches = match_signature(sig, known, threshold=threshold, comparer=comparer)
        _print_match_results_cli(path, matches)
    return 0


def _cmd_cluster(args) -> int:
    hasher = _build_hasher(args)
    comparer = SignatureComparer(eliminate_sequences=hasher.eliminate_sequences)
    results = _drop_empty(_hash_files(hasher, _iter_input_files(args.files, args.recursive)))
    names = [path for path, _ in results]
    clusters = cluster_single_linkage([sig for _, sig in results], threshold=args.threshold, comparer=comparer)
    _print_clusters_cli(names, clusters)
    return 0


def _cmd_config(args) -> int:
    if args.action == "show":
        config = get_config_view()
        if not config:
            safe_print("No user configuration set.")
        for k, v in config.items():
            safe_print(f"  {k:<22} {v}")
    elif args.action == "set":
        if args.key not in _ENV_VAR_MAP:
            print(f"[!] Unknown config key '{args.key}'. Known keys: {', '.join(sorted(_ENV_VAR_MAP))}", file=sys.stderr)
            return 2
        if args.value is None:
            print("[!] 'config set' needs a value.", file=sys.stderr)
            return 2
        set_config_value(args.key, args.value)
    elif args.action == "delete":
        if not delete_config_value(args.key):
            safe_print(f"Config key '{args.key}' was not set.")
    return 0


def _cmd_serve(args) -> int:
    from ctph.mcp.server import mcp_server
    import ctph.mcp.tools_fuzzy  # noqa: F401  (registers tools)

    if args.mcp_transport == "sse":
        mcp_server.settings.host = args.mcp_host
        mcp_server.settings.port = args.mcp_port
        logger.info(f"Starting MCP server (SSE) on http://{mcp_server.settings.host}:{mcp_server.settings.port}")
    else:
        logger.info("Starting MCP server (stdio).")

    try:
        mcp_server.run(transport=args.mcp_transport)
    except KeyboardInterrupt:
        logger.info("MCP Server stopped by user (KeyboardInterrupt).")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ctph",
        description="Context-triggered piecewise (fuzzy) hashing: generate and compare ssdeep-compatible signatures.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_hash_options(p):
        p.add_argument("--do-not-truncate", action="store_true", help="Emit the full-length second digest.")
        p.add_argument("--elim-seq", action="store_true", help="Collapse runs of more than 3 identical symbols in emitted digests.")
        p.add_argument("--keep-sequences", action="store_true", help="Do not collapse identical runs before comparing.")

    def add_file_options(p):
        p.add_argument("files", nargs="+", help="Files (or directories with -r) to hash.")
        p.add_argument("-r", "--recursive", action="store_true", help="Recurse into directories.")

    p_hash = sub.add_parser("hash", help="Print fuzzy hashes of files.")
    add_file_options(p_hash)
    add_hash_options(p_hash)
    p_hash.add_argument("-b", "--bare", action="store_true", help="Print signatures only, without header or filenames.")
    p_hash.set_defaults(func=_cmd_hash)

    p_cmp = sub.add_parser("compare", help="Compare two signatures.")
    p_cmp.add_argument("signature1")
    p_cmp.add_argument("signature2")
    p_cmp.add_argument("--keep-sequences", action="store_true", help="Do not collapse identical runs before comparing.")
    p_cmp.set_defaults(func=_cmd_compare)

    p_match = sub.add_parser("match", help="Match files against a list of known signatures.")
    p_match.add_argument("-k", "--known", required=True, help="Signature list file (ssdeep format).")
    p_match.add_argument("-t", "--threshold", type=int, default=None, help="Only report scores above this value.")
    add_file_options(p_match)
    add_hash_options(p_match)
    p_match.set_defaults(func=_cmd_match)

    p_cluster = sub.add_parser("cluster", help="Group files whose signatures match.")
    p_cluster.add_argument("-t", "--threshold", type=int, default=50, help="Minimum score linking two files (default: 50).")
    add_file_options(p_cluster)
    add_hash_options(p_cluster)
    p_cluster.set_defaults(func=_cmd_cluster)

    p_config = sub.add_parser("config", help="Show or change persistent settings.")
    p_config.add_argument("action", choices=["show", "set", "delete"])
    p_config.add_argument("key", nargs="?")
    p_config.add_argument("value", nargs="?")
    p_config.set_defaults(func=_cmd_config)

    p_serve = sub.add_parser("serve", help="Run the MCP server.")
    p_serve.add_argument("--mcp-host", type=str, default="127.0.0.1", help="MCP server host (default: 127.0.0.1).")
    p_serve.add_argument("--mcp-port", type=int, default=8082, help="MCP server port (default: 8082).")
    p_serve.add_argument("--mcp-transport", type=str, default="stdio", choices=["stdio", "sse"], help="MCP transport protocol (default: stdio).")
    p_serve.set_defaults(func=_cmd_serve)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(name)s - %(message)s')
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logger.setLevel(log_level)
    logging.getLogger('mcp').setLevel(log_level)

    if args.command == "config" and args.action in ("set", "delete") and not args.key:
        print(f"[!] 'config {args.action}' needs a key.", file=sys.stderr)
        return 2

    try:
        return args.func(args)
    except FuzzyHashError as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[!] Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[*] Interrupted by user. Exiting.")
        return 1


if __name__ == '__main__':
    sys.exit(main())
