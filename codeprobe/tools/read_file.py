"""Built-in tool: retrieve the full text of a project file."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import Field

from codeprobe.constants import MAX_FILE_BYTES
from codeprobe.tools._base import ToolArguments, ToolDefinition, ToolExecutor
from codeprobe.tools._paths import OutOfBounds, resolve_path
from codeprobe.tools._results import FILE_TOO_LARGE, NO_SUCH_FILE, normalized

if TYPE_CHECKING:
    from codeprobe.tools._paths import ProjectRoot

logger = structlog.get_logger()


class ReadFileArguments(ToolArguments):
    file_path: str = Field(description="Path to the file, relative to the project root.")


DEFINITION = ToolDefinition(
    name="read_file",
    description="Retrieve the full contents of a file in the project.",
    arguments=ReadFileArguments,
)


class ReadFileTool(ToolExecutor):
    """Read a whole file, refusing files larger than MAX_FILE_BYTES."""

    def __init__(self, root: ProjectRoot, max_bytes: int = MAX_FILE_BYTES) -> None:
        self._root = root
        self._max_bytes = max_bytes

    @normalized
    async def execute(self, args: ReadFileArguments) -> str:
        resolved = resolve_path(self._root, args.file_path)
        if isinstance(resolved, OutOfBounds):
            logger.info("rejected path", tool=DEFINITION.name, path=resolved.attempted)
            return NO_SUCH_FILE

        target = resolved.path
        if not target.is_file():
            return NO_SUCH_FILE

        size = target.stat().st_size
        if size > self._max_bytes:
            logger.info("file too large", tool=DEFINITION.name, path=str(target), size=size)
            return FILE_TOO_LARGE.format(size=size, limit=self._max_bytes)

        logger.info("retrieving", tool=DEFINITION.name, path=str(target))
        return target.read_text(encoding="utf-8", errors="replace")
