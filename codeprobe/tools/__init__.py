"""Built-in tool registry for agent tool calling.

Provides a ToolRegistry that binds tool names to their definitions and
adapters, validates call arguments against each tool's argument model, and
dispatches to the adapter. Adapters are bound to a single ProjectRoot when
the default registry is built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from codeprobe.constants import DEFAULT_TOOL_TIMEOUT_SECONDS, LOG_PREVIEW_CHARS
from codeprobe.tools._base import (
    InvalidArgumentError,
    ToolDefinition,
    ToolError,
    ToolExecutor,
    ToolRequest,
    UnknownToolError,
)
from codeprobe.tools._paths import ProjectRoot, ProjectRootError
from codeprobe.tools._results import preview

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = structlog.get_logger()

__all__ = [
    "InvalidArgumentError",
    "ProjectRoot",
    "ProjectRootError",
    "ToolDefinition",
    "ToolError",
    "ToolExecutor",
    "ToolRegistry",
    "ToolRequest",
    "UnknownToolError",
    "build_default_registry",
]


class ToolRegistry:
    """Container for tool definitions and their executors."""

    def __init__(self) -> None:
        self._tools: dict[str, tuple[ToolDefinition, ToolExecutor]] = {}

    def register(self, definition: ToolDefinition, executor: ToolExecutor) -> None:
        """Register a tool definition with its executor."""
        self._tools[definition.name] = (definition, executor)

    def definitions(self) -> list[ToolDefinition]:
        """Return all registered definitions in registration order."""
        return [defn for defn, _ in self._tools.values()]

    def get_openai_tools(self) -> list[dict[str, Any]]:
        """Return all tool definitions in OpenAI function-calling format."""
        return [
            {
                "type": "function",
                "function": {
                    "name": defn.name,
                    "description": defn.description,
                    "parameters": defn.parameters,
                },
            }
            for defn in self.definitions()
        ]

    async def dispatch(self, name: str, arguments: Mapping[str, Any]) -> str:
        """Validate *arguments* and run the tool called *name*.

        Raises UnknownToolError for an unregistered name and
        InvalidArgumentError when the arguments fail the tool's model.
        Every other failure is already a sentinel string from the adapter.
        """
        return await self.execute(ToolRequest.from_call(name, arguments))

    async def execute(self, request: ToolRequest) -> str:
        """Run a prepared ToolRequest. See dispatch()."""
        entry = self._tools.get(request.name)
        if entry is None:
            logger.warning("unknown tool requested", tool=request.name)
            raise UnknownToolError(request.name)
        definition, executor = entry

        try:
            args = definition.arguments.model_validate(request.arguments)
        except ValidationError as exc:
            details = [_format_error(err) for err in exc.errors()]
            logger.warning("invalid tool arguments", tool=request.name, details=details)
            raise InvalidArgumentError(request.name, details) from exc

        log = logger.bind(tool=request.name)
        log.info("tool call", reasoning=request.reasoning, arguments=args.model_dump(exclude={"reasoning"}))
        result = await executor.execute(args)
        log.info("tool result", chars=len(result), result=preview(result, LOG_PREVIEW_CHARS))
        return result

    @property
    def tool_names(self) -> list[str]:
        """Return sorted list of registered tool names."""
        return sorted(self._tools.keys())


def build_default_registry(root: ProjectRoot, timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS) -> ToolRegistry:
    """Create a ToolRegistry with all built-in tools bound to *root*."""
    from codeprobe.tools import git_history, glob_files, list_directory, read_file, search_files

    registry = ToolRegistry()
    registry.register(git_history.DEFINITION, git_history.GitHistoryTool(root, timeout=timeout))
    registry.register(list_directory.DEFINITION, list_directory.ListDirectoryTool(root))
    registry.register(search_files.DEFINITION, search_files.SearchFilesTool(root, timeout=timeout))
    registry.register(read_file.DEFINITION, read_file.ReadFileTool(root))
    registry.register(glob_files.DEFINITION, glob_files.GlobFilesTool(root, timeout=timeout))
    return registry


def _format_error(err: Mapping[str, Any]) -> str:
    """Render one pydantic error as ``field: message``."""
    location = ".".join(str(part) for part in err.get("loc", ())) or "arguments"
    return f"{location}: {err.get('msg', 'invalid value')}"
