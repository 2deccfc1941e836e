"""MCP server setup, tool decorator, and validation helpers."""
import functools
import logging

from mcp.server.fastmcp import FastMCP, Context

from ctph.errors import FuzzyHashError

logger = logging.getLogger("CTPH")

# --- MCP Server Setup ---
mcp_server = FastMCP("CTPHFuzzyHash")
_raw_tool_decorator = mcp_server.tool()


def tool_decorator(func):
    """MCP tool decorator that reports fuzzy hash errors with the tool name.

    ``FuzzyHashError`` is re-raised as ``ValueError`` prefixed by the tool
    name so the client can tell a malformed or incomparable signature apart
    from a legitimate score of 0.
    """
    @functools.wraps(func)
    async def _with_errors(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except FuzzyHashError as e:
            logger.debug(f"MCP: {func.__name__} rejected input: {e}")
            raise ValueError(f"[{func.__name__}] {e}") from e
    return _raw_tool_decorator(_with_errors)


def _check_limit(limit: int, tool_name: str) -> None:
    if limit < 1:
        raise ValueError(f"[{tool_name}] 'limit' must be a positive integer, got {limit}.")


def _check_threshold(threshold: int, tool_name: str) -> None:
    if not 0 <= threshold <= 100:
        raise ValueError(f"[{tool_name}] 'threshold' must be between 0 and 100, got {threshold}.")


__all__ = ["mcp_server", "tool_decorator", "Context", "_check_limit", "_check_threshold"]
