"""Result normalization: sentinel strings and the adapter failure boundary.

Tool results are plain strings. A handled failure is reported as one of the
sentinels below; callers tell success from failure by content alone.
Diagnostic detail (stderr, exception text) goes to the log, never into the
returned string.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = structlog.get_logger()

NO_SUCH_FILE = "no such file"
NO_SUCH_DIRECTORY = "no such directory"
NO_SUCH_PATH = "no such file or directory: {path}"
OUTSIDE_PROJECT = "path outside project: {path}"
NO_PATTERN = "no pattern to search for"
NO_RESULTS = "no results"
SEARCH_ERROR = "error during search"
HISTORY_UNAVAILABLE = "no commit history available"
FILE_TOO_LARGE = "file too large: {size} bytes (limit {limit})"
INVALID_GLOB = "invalid glob pattern"
EMPTY_DIRECTORY = "(empty directory)"
TIMED_OUT = "operation timed out"
SOMETHING_WENT_WRONG = "something went wrong"


def normalized(func: Callable[..., Awaitable[str]]) -> Callable[..., Awaitable[str]]:
    """Wrap an adapter's ``execute`` so it always returns a string.

    ``TimeoutError`` maps to TIMED_OUT; any other exception is logged with its
    traceback and mapped to SOMETHING_WENT_WRONG.
    """

    @functools.wraps(func)
    async def wrapper(self: Any, *args: Any, **kwargs: Any) -> str:
        try:
            return await func(self, *args, **kwargs)
        except TimeoutError:
            logger.warning("tool timed out", tool=type(self).__name__)
            return TIMED_OUT
        except Exception:
            logger.exception("tool failed", tool=type(self).__name__)
            return SOMETHING_WENT_WRONG

    return wrapper


def truncate_output(text: str, max_chars: int) -> str:
    """Cut *text* to *max_chars*, keeping the head and the tail."""
    if len(text) <= max_chars:
        return text
    half = max_chars // 2
    omitted = len(text) - max_chars
    return f"{text[:half]}\n\n... ({omitted} characters omitted) ...\n\n{text[-half:]}"


def cap_lines(lines: list[str], limit: int, noun: str) -> str:
    """Join at most *limit* lines, noting how many were dropped."""
    if len(lines) <= limit:
        return "\n".join(lines)
    return "\n".join(lines[:limit]) + f"\n\n... truncated to {limit} {noun}"


def preview(text: str, limit: int) -> str:
    """Single-line preview of a result for trace logging."""
    flat = text.replace("\n", "\\n")
    return flat if len(flat) <= limit else flat[:limit] + "..."
