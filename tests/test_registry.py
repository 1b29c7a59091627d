"""Tests for the tool registry: declaration, validation and dispatch."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from codeprobe.tools import (
    InvalidArgumentError,
    ToolDefinition,
    ToolRegistry,
    ToolRequest,
    UnknownToolError,
    build_default_registry,
)
from codeprobe.tools._base import ToolArguments

if TYPE_CHECKING:
    from codeprobe.tools import ProjectRoot


class _EchoArguments(ToolArguments):
    text: str


class _EchoTool:
    def __init__(self) -> None:
        self.seen: list[_EchoArguments] = []

    async def execute(self, args: _EchoArguments) -> str:
        self.seen.append(args)
        return args.text


def _make_registry() -> tuple[ToolRegistry, _EchoTool]:
    registry = ToolRegistry()
    tool = _EchoTool()
    registry.register(ToolDefinition(name="echo", description="Echo text", arguments=_EchoArguments), tool)
    return registry, tool


def test_default_registry_tools(root: ProjectRoot) -> None:
    registry = build_default_registry(root)
    assert registry.tool_names == [
        "find_files",
        "git_commit_history",
        "list_directory",
        "read_file",
        "search_files",
    ]
    assert [d.name for d in registry.definitions()] == [
        "git_commit_history",
        "list_directory",
        "search_files",
        "read_file",
        "find_files",
    ]


def test_openai_tools_declare_argument_schemas(root: ProjectRoot) -> None:
    tools = {t["function"]["name"]: t for t in build_default_registry(root).get_openai_tools()}
    assert all(t["type"] == "function" for t in tools.values())

    search = tools["search_files"]["function"]["parameters"]
    assert search["type"] == "object"
    assert set(search["properties"]) == {"reasoning", "pattern", "target", "recursive", "verbose"}
    assert search["required"] == ["pattern"]
    assert search["properties"]["target"]["default"] == "."
    assert search["properties"]["recursive"]["default"] is True

    history = tools["git_commit_history"]["function"]["parameters"]
    assert set(history["properties"]) == {"reasoning", "limit", "verbose"}
    assert "required" not in history

    assert tools["read_file"]["function"]["parameters"]["required"] == ["file_path"]
    assert tools["find_files"]["function"]["parameters"]["required"] == ["pattern"]
    assert set(tools["list_directory"]["function"]["parameters"]["properties"]) == {"reasoning", "sub_directory"}


def test_parameters_drop_pydantic_titles() -> None:
    registry, _ = _make_registry()
    params = registry.definitions()[0].parameters
    assert "title" not in params
    assert all("title" not in prop for prop in params["properties"].values())


def test_tool_request_lifts_reasoning() -> None:
    request = ToolRequest.from_call("echo", {"text": "hi", "reasoning": "checking"})
    assert request.name == "echo"
    assert request.reasoning == "checking"
    assert request.arguments["text"] == "hi"
    assert ToolRequest.from_call("echo", {"reasoning": None}).reasoning == ""


async def test_dispatch_validates_and_runs() -> None:
    registry, tool = _make_registry()
    result = await registry.dispatch("echo", {"text": "hello", "reasoning": "why not", "extra": 1})
    assert result == "hello"
    assert tool.seen[0].reasoning == "why not"


async def test_dispatch_unknown_tool() -> None:
    registry, _ = _make_registry()
    with pytest.raises(UnknownToolError, match="unknown tool: nope") as excinfo:
        await registry.dispatch("nope", {})
    assert excinfo.value.name == "nope"


async def test_dispatch_missing_required_argument() -> None:
    registry, tool = _make_registry()
    with pytest.raises(InvalidArgumentError) as excinfo:
        await registry.dispatch("echo", {"reasoning": "x"})
    assert excinfo.value.name == "echo"
    assert any(detail.startswith("text:") for detail in excinfo.value.details)
    assert tool.seen == []


async def test_dispatch_wrong_type(root: ProjectRoot) -> None:
    registry = build_default_registry(root)
    with pytest.raises(InvalidArgumentError, match="limit"):
        await registry.dispatch("git_commit_history", {"limit": "several"})


async def test_dispatch_runs_bound_adapter(root: ProjectRoot) -> None:
    registry = build_default_registry(root)
    assert await registry.dispatch("list_directory", {"sub_directory": "src", "reasoning": "look"}) == "a.ts\nb.ts"


async def test_dispatch_adapter_sentinels_are_plain_results(root: ProjectRoot) -> None:
    registry = build_default_registry(root)
    assert await registry.dispatch("read_file", {"file_path": "missing.txt"}) == "no such file"
    assert await registry.dispatch("search_files", {"pattern": " "}) == "no pattern to search for"
    assert await registry.dispatch("find_files", {"pattern": "../../etc/passwd"}) == (
        "path outside project: ../../etc/passwd"
    )
