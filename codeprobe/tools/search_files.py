"""Built-in tool: search file contents with an extended regex."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from codeprobe.constants import DEFAULT_TOOL_TIMEOUT_SECONDS, EXCLUDED_DIRS, MAX_SEARCH_MATCHES
from codeprobe.subprocess_utils import run_subprocess
from codeprobe.tools._base import ToolArguments, ToolDefinition, ToolExecutor
from codeprobe.tools._paths import OutOfBounds, relative_to_root, resolve_path
from codeprobe.tools._results import (
    NO_PATTERN,
    NO_RESULTS,
    NO_SUCH_PATH,
    SEARCH_ERROR,
    cap_lines,
    normalized,
)

if TYPE_CHECKING:
    from pathlib import Path

    from codeprobe.tools._paths import ProjectRoot

logger = structlog.get_logger()


class SearchArguments(ToolArguments):
    pattern: str = Field(description="Extended regular expression to search for.")
    target: str = Field(
        default=".",
        description="File or directory to search, relative to the project root. Defaults to the whole project.",
    )
    recursive: bool = Field(default=True, description="Descend into subdirectories of the target.")
    verbose: bool = Field(
        default=True,
        description="Return matching lines with line numbers; when false, return matching file paths only.",
    )


DEFINITION = ToolDefinition(
    name="search_files",
    description=(
        "Search for a regex pattern in the project's files. "
        "Version control, build output and dependency directories are never searched."
    ),
    arguments=SearchArguments,
)


def build_grep_command(pattern: str, targets: list[str], *, recursive: bool, verbose: bool) -> list[str]:
    """Build the grep argument vector; the pattern follows ``--`` and is never shell-parsed."""
    cmd = ["grep", "-E", "-I", "-H", "--color=never"]
    cmd.append("-n" if verbose else "-l")
    if recursive:
        cmd.append("-r")
    else:
        cmd.extend(["-d", "skip"])
    cmd.extend(f"--exclude-dir={name}" for name in sorted(EXCLUDED_DIRS))
    cmd.extend(["--", pattern, *targets])
    return cmd


class SearchFilesTool(ToolExecutor):
    """Search file contents with grep, run from the project root."""

    def __init__(self, root: ProjectRoot, timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS) -> None:
        self._root = root
        self._timeout = timeout

    @normalized
    async def execute(self, args: SearchArguments) -> str:
        if not args.pattern.strip():
            return NO_PATTERN

        resolved = resolve_path(self._root, args.target)
        if isinstance(resolved, OutOfBounds):
            logger.info("rejected path", tool=DEFINITION.name, path=resolved.attempted)
            return NO_SUCH_PATH.format(path=resolved.attempted)
        if not resolved.path.exists():
            return NO_SUCH_PATH.format(path=resolved.path)
        if self._excluded(resolved.path):
            logger.info("excluded target", tool=DEFINITION.name, path=str(resolved.path))
            return NO_RESULTS

        targets = self._targets(resolved.path, args.recursive)
        if not targets:
            return NO_RESULTS

        cmd = build_grep_command(args.pattern, targets, recursive=args.recursive, verbose=args.verbose)
        logger.info("running", tool=DEFINITION.name, command=" ".join(cmd))

        try:
            returncode, stdout, stderr = await run_subprocess(cmd, cwd=str(self._root), timeout=self._timeout)
        except OSError as exc:
            logger.error("grep not runnable", error=str(exc))
            return SEARCH_ERROR

        output = stdout.strip()

        # grep returns exit 1 when nothing matched (not an error)
        if returncode == 1 and not output:
            return NO_RESULTS

        if returncode not in (0, 1):
            logger.error("grep failed", returncode=returncode, stderr=stderr.strip())
            if not output:
                return SEARCH_ERROR

        lines = [_strip_dot_prefix(line) for line in output.splitlines()]
        return cap_lines(lines, MAX_SEARCH_MATCHES, "matches")

    def _targets(self, path: Path, recursive: bool) -> list[str]:
        """Root-relative grep operands for *path*.

        A non-recursive search of a directory covers its immediate files only.
        grep follows symlinks named as operands, so each file is checked against
        the root first.
        """
        if recursive or not path.is_dir():
            return [relative_to_root(self._root, path)]
        targets = []
        for child in sorted(path.iterdir()):
            resolved = resolve_path(self._root, str(child))
            if isinstance(resolved, OutOfBounds) or not resolved.path.is_file() or self._excluded(resolved.path):
                continue
            targets.append(relative_to_root(self._root, child))
        return targets

    def _excluded(self, path: Path) -> bool:
        return any(part in EXCLUDED_DIRS for part in path.relative_to(self._root.path).parts)


def _strip_dot_prefix(line: str) -> str:
    return line[2:] if line.startswith("./") else line
