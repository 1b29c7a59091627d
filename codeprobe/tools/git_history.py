"""Built-in tool: recent commit history of the project."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from codeprobe.constants import DEFAULT_TOOL_TIMEOUT_SECONDS, MAX_HISTORY_ENTRIES, MAX_OUTPUT_CHARS
from codeprobe.subprocess_utils import run_subprocess
from codeprobe.tools._base import ToolArguments, ToolDefinition, ToolExecutor
from codeprobe.tools._results import HISTORY_UNAVAILABLE, normalized, truncate_output

if TYPE_CHECKING:
    from codeprobe.tools._paths import ProjectRoot

logger = structlog.get_logger()


class HistoryArguments(ToolArguments):
    limit: int | None = Field(default=1, description="The number of commits to return (most recent first).")
    verbose: bool = Field(default=False, description="Include full commit metadata, file stats and diffs.")


DEFINITION = ToolDefinition(
    name="git_commit_history",
    description="Get the commit history of the project, most recent commit first.",
    arguments=HistoryArguments,
)


def build_log_command(limit: int | None, verbose: bool) -> list[str]:
    """Build the ``git log`` argument vector; non-positive limits become 1."""
    count = limit if limit is not None and limit > 0 else 1
    count = min(count, MAX_HISTORY_ENTRIES)
    cmd = ["git", "--no-pager", "log", "-n", str(count), "--no-color"]
    if verbose:
        cmd.extend(["--format=fuller", "--stat", "--patch"])
    return cmd


class GitHistoryTool(ToolExecutor):
    """Run ``git log`` in the project root."""

    def __init__(self, root: ProjectRoot, timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS) -> None:
        self._root = root
        self._timeout = timeout

    @normalized
    async def execute(self, args: HistoryArguments) -> str:
        cmd = build_log_command(args.limit, args.verbose)
        logger.info("running", tool=DEFINITION.name, command=" ".join(cmd))

        try:
            returncode, stdout, stderr = await run_subprocess(cmd, cwd=str(self._root), timeout=self._timeout)
        except OSError as exc:
            logger.error("git not runnable", error=str(exc))
            return HISTORY_UNAVAILABLE

        if returncode != 0:
            logger.error("git log failed", returncode=returncode, stderr=stderr.strip())
            return HISTORY_UNAVAILABLE

        output = stdout.strip()
        if not output:
            return HISTORY_UNAVAILABLE
        return truncate_output(output, MAX_OUTPUT_CHARS)
