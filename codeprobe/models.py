"""Conversation message models exchanged with the chat completions API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ToolCallFunction(BaseModel):
    """Function name and raw JSON arguments of a tool call."""

    name: str
    arguments: str = ""


class ToolCallPayload(BaseModel):
    """A tool call attached to an assistant message."""

    id: str
    type: str = "function"
    function: ToolCallFunction


class ConversationMessage(BaseModel):
    """One message of the conversation, in OpenAI chat format."""

    role: str
    content: str = ""
    tool_calls: list[ToolCallPayload] = Field(default_factory=list)
    tool_call_id: str = ""
    name: str = ""

    def to_openai(self) -> dict[str, object]:
        """Convert to an OpenAI-compatible message dict, omitting empty fields."""
        d: dict[str, object] = {"role": self.role}
        if self.content or not self.tool_calls:
            d["content"] = self.content
        if self.tool_calls:
            d["tool_calls"] = [tc.model_dump() for tc in self.tool_calls]
        if self.tool_call_id:
            d["tool_call_id"] = self.tool_call_id
        if self.name:
            d["name"] = self.name
        return d


class AgentLoopResult(BaseModel):
    """Outcome of one question answered by the agent loop."""

    final_content: str = ""
    tool_messages: list[ConversationMessage] = Field(default_factory=list)
    step_count: int = 0
    total_tokens_in: int = 0
    total_tokens_out: int = 0
    model: str = ""
    error: str = ""
