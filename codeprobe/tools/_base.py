"""Base types for the tool framework."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from collections.abc import Mapping


class ToolArguments(BaseModel):
    """Base for every tool's argument model.

    ``reasoning`` is advertised on every tool so the model explains each call;
    it is logged and never affects what the tool does. Unknown keys are
    ignored rather than rejected since models routinely add stray fields.
    """

    model_config = ConfigDict(extra="ignore")

    reasoning: str | None = Field(default="", description="Explanation for why this tool is being called.")


@dataclass(frozen=True)
class ToolDefinition:
    """Declarative description of a tool (name, description, argument model)."""

    name: str
    description: str
    arguments: type[ToolArguments] = ToolArguments

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON Schema of the arguments, as advertised to the model."""
        schema = self.arguments.model_json_schema()
        schema.pop("title", None)
        for prop in schema.get("properties", {}).values():
            prop.pop("title", None)
        return schema


@dataclass(frozen=True)
class ToolRequest:
    """A single tool invocation as issued by the orchestrator."""

    name: str
    arguments: dict[str, Any] = field(default_factory=dict)
    reasoning: str = ""

    @classmethod
    def from_call(cls, name: str, arguments: Mapping[str, Any]) -> ToolRequest:
        """Build a request from raw call arguments, lifting out ``reasoning``."""
        args = dict(arguments)
        reasoning = args.get("reasoning", "")
        return cls(name=name, arguments=args, reasoning=str(reasoning) if reasoning else "")


class ToolExecutor(Protocol):
    """Interface that all tool adapters satisfy.

    Adapters are bound to a project root at construction and must return a
    string for every validated argument set.
    """

    async def execute(self, args: Any) -> str: ...


class ToolError(Exception):
    """Base for structured failures raised by the registry."""


class UnknownToolError(ToolError):
    """Raised when a tool name has no registered definition."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown tool: {name}")


class InvalidArgumentError(ToolError):
    """Raised when a tool call's arguments fail the tool's argument model."""

    def __init__(self, name: str, details: list[str]) -> None:
        self.name = name
        self.details = details
        super().__init__(f"invalid arguments for {name}: {'; '.join(details)}")
