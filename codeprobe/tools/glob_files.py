"""Built-in tool: find project files matching a glob pattern."""

from __future__ import annotations

import asyncio
import fnmatch
import os
import time
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from codeprobe.constants import DEFAULT_TOOL_TIMEOUT_SECONDS, EXCLUDED_DIRS, MAX_TOOL_RESULTS
from codeprobe.tools._base import ToolArguments, ToolDefinition, ToolExecutor
from codeprobe.tools._paths import OutOfBounds, escapes_root, resolve_path
from codeprobe.tools._results import (
    INVALID_GLOB,
    NO_PATTERN,
    NO_RESULTS,
    NO_SUCH_DIRECTORY,
    OUTSIDE_PROJECT,
    cap_lines,
    normalized,
)

if TYPE_CHECKING:
    from codeprobe.tools._paths import ProjectRoot

logger = structlog.get_logger()


class FindArguments(ToolArguments):
    pattern: str = Field(description="Glob pattern, e.g. '**/*.py' or 'src/*.ts'.")
    sub_directory: str = Field(
        default="",
        description="Directory the pattern is matched from, relative to the project root. Defaults to the root.",
    )


DEFINITION = ToolDefinition(
    name="find_files",
    description=(
        "Find files matching a glob pattern. Returns file paths relative to the project root. "
        "Version control, build output and dependency directories are skipped."
    ),
    arguments=FindArguments,
)


class GlobFilesTool(ToolExecutor):
    """Find files matching a glob pattern under a project directory."""

    def __init__(self, root: ProjectRoot, timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS) -> None:
        self._root = root
        self._timeout = timeout

    @normalized
    async def execute(self, args: FindArguments) -> str:
        resolved = resolve_path(self._root, args.sub_directory)
        if isinstance(resolved, OutOfBounds):
            logger.info("rejected path", tool=DEFINITION.name, path=resolved.attempted)
            return NO_SUCH_DIRECTORY

        base = resolved.path
        if not base.is_dir():
            return NO_SUCH_DIRECTORY

        pattern = args.pattern.strip()
        if not pattern:
            return NO_PATTERN
        if escapes_root(self._root, base, pattern):
            logger.info("rejected pattern", tool=DEFINITION.name, pattern=pattern)
            return OUTSIDE_PROJECT.format(path=pattern)

        logger.info("globbing", tool=DEFINITION.name, base=str(base), pattern=pattern)
        deadline = time.monotonic() + self._timeout
        try:
            rel_paths = await asyncio.wait_for(
                asyncio.to_thread(self._match, base, pattern, deadline), timeout=self._timeout
            )
        except ValueError as exc:
            logger.info("invalid glob", tool=DEFINITION.name, pattern=pattern, error=str(exc))
            return INVALID_GLOB

        if not rel_paths:
            return NO_RESULTS
        return cap_lines(rel_paths, MAX_TOOL_RESULTS, "results")

    def _match(self, base: Path, pattern: str, deadline: float) -> list[str]:
        """Root-relative paths of regular files matching *pattern* under *base*.

        Excluded directories are pruned before they are entered, and the walk
        gives up with ``TimeoutError`` once *deadline* (monotonic) has passed.
        """
        parts = _split_pattern(pattern)
        # Leading literal segments (including "..") only move the starting point.
        anchor = 0
        while anchor < len(parts) - 1 and not _has_magic(parts[anchor]):
            anchor += 1
        root = self._root.path
        start = Path(os.path.normpath(base.joinpath(*parts[:anchor])))
        remaining = parts[anchor:]
        if not start.is_relative_to(root) or not start.is_dir():
            return []
        if any(part in EXCLUDED_DIRS for part in start.relative_to(root).parts):
            return []
        max_depth = None if "**" in remaining else len(remaining) - 1

        found: set[str] = set()
        for dirpath, dirnames, filenames in os.walk(start):
            if time.monotonic() > deadline:
                raise TimeoutError(f"glob walk exceeded deadline: {pattern}")
            current = Path(dirpath)
            rel_dir = current.relative_to(start).parts
            if max_depth is not None and len(rel_dir) >= max_depth:
                dirnames.clear()
            else:
                dirnames[:] = sorted(name for name in dirnames if name not in EXCLUDED_DIRS)
            for name in filenames:
                if not _match_parts((*rel_dir, name), remaining):
                    continue
                location = current / name
                if not location.is_file():
                    continue
                if isinstance(resolve_path(self._root, str(location)), OutOfBounds):
                    continue
                found.add(str(location.relative_to(root)))
                if len(found) > MAX_TOOL_RESULTS:
                    return sorted(found)
        return sorted(found)


def _split_pattern(pattern: str) -> list[str]:
    parts = [part for part in pattern.replace(os.sep, "/").split("/") if part not in ("", ".")]
    if not parts:
        raise ValueError(f"Unacceptable pattern: {pattern!r}")
    for part in parts:
        if "**" in part and part != "**":
            raise ValueError("Invalid pattern: '**' can only be an entire path component")
    return parts


def _has_magic(part: str) -> bool:
    return any(char in part for char in "*?[")


def _match_parts(path: tuple[str, ...], pattern: list[str]) -> bool:
    """Match path segments against glob segments; ``**`` spans zero or more directories."""
    if not pattern:
        return not path
    head, rest = pattern[0], pattern[1:]
    if head == "**":
        if not rest:
            return True
        return any(_match_parts(path[i:], rest) for i in range(len(path)))
    return bool(path) and fnmatch.fnmatchcase(path[0], head) and _match_parts(path[1:], rest)
