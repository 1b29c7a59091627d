"""Built-in tool: list the immediate entries of a project directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from codeprobe.constants import MAX_DIR_ENTRIES
from codeprobe.tools._base import ToolArguments, ToolDefinition, ToolExecutor
from codeprobe.tools._paths import OutOfBounds, resolve_path
from codeprobe.tools._results import EMPTY_DIRECTORY, NO_SUCH_DIRECTORY, cap_lines, normalized

if TYPE_CHECKING:
    from codeprobe.tools._paths import ProjectRoot

logger = structlog.get_logger()


class ListArguments(ToolArguments):
    sub_directory: str = Field(
        default="",
        description="Subdirectory to list, relative to the project root. Defaults to the root.",
    )


DEFINITION = ToolDefinition(
    name="list_directory",
    description="List the contents of a directory in the project (not recursive). Directories end with '/'.",
    arguments=ListArguments,
)


class ListDirectoryTool(ToolExecutor):
    """List directory contents, sorted by name."""

    def __init__(self, root: ProjectRoot) -> None:
        self._root = root

    @normalized
    async def execute(self, args: ListArguments) -> str:
        resolved = resolve_path(self._root, args.sub_directory)
        if isinstance(resolved, OutOfBounds):
            logger.info("rejected path", tool=DEFINITION.name, path=resolved.attempted)
            return NO_SUCH_DIRECTORY

        target = resolved.path
        if not target.is_dir():
            return NO_SUCH_DIRECTORY

        logger.info("listing", tool=DEFINITION.name, path=str(target))
        entries = [
            f"{child.name}/" if child.is_dir() else child.name
            for child in sorted(target.iterdir(), key=lambda p: p.name)
        ]
        if not entries:
            return EMPTY_DIRECTORY
        return cap_lines(entries, MAX_DIR_ENTRIES, "entries")
