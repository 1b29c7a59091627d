"""Agentic loop: the model calls inspection tools until it can answer.

The loop:
1. Calls the model with the current message history and the tool declarations.
2. If the model returns tool_calls, dispatches each one in order through the
   ToolRegistry and appends the results as tool messages.
3. Repeats until the model answers with text only or the iteration cap is hit.

Registry failures (unknown tool, invalid arguments) are reported back to the
model as tool messages so it can correct the call.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

from codeprobe.constants import DEFAULT_MAX_ITERATIONS
from codeprobe.models import AgentLoopResult, ConversationMessage, ToolCallFunction, ToolCallPayload
from codeprobe.tools import ToolError, ToolRequest

if TYPE_CHECKING:
    from codeprobe.llm import ChatCompletionResponse, LLMClient, ToolCallPart
    from codeprobe.tools import ProjectRoot, ToolRegistry

logger = structlog.get_logger()

SYSTEM_PROMPT = (
    "You are a software engineer researching answers to questions about the codebase of a project "
    "called {name}. It uses git for version control. Use the available tools to inspect the project "
    "before answering; every path you pass is relative to the project root. "
    "Always explain in the 'reasoning' argument why you are calling a tool. "
    "When you have enough information, answer the question directly."
)


@dataclass
class LoopConfig:
    """Configuration for the agentic loop."""

    model: str = "llama3.2"
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    temperature: float = 0.2


@dataclass
class _LoopState:
    """Mutable accumulator for loop execution state."""

    model: str = ""
    total_tokens_in: int = 0
    total_tokens_out: int = 0
    step_count: int = 0
    final_content: str = ""
    error: str = ""
    tool_messages: list[ConversationMessage] = field(default_factory=list)


def build_messages(root: ProjectRoot, question: str) -> list[dict[str, object]]:
    """Assemble the system prompt and the user's question."""
    return [
        {"role": "system", "content": SYSTEM_PROMPT.format(name=root.name)},
        {"role": "user", "content": question},
    ]


class AgentLoopExecutor:
    """Executes the agentic tool-use loop.

    Constructor arguments:
        llm: client for chat completions.
        tool_registry: registry of inspection tools bound to one project root.
    """

    def __init__(self, llm: LLMClient, tool_registry: ToolRegistry) -> None:
        self._llm = llm
        self._tools = tool_registry

    async def run(
        self,
        messages: list[dict[str, object]],
        config: LoopConfig | None = None,
    ) -> AgentLoopResult:
        """Execute the loop until the model stops or the iteration cap is hit.

        *messages* is extended in place with every assistant and tool message.
        """
        cfg = config or LoopConfig()
        state = _LoopState(model=cfg.model)
        tools_array = self._tools.get_openai_tools()

        for iteration in range(cfg.max_iterations):
            done = await self._do_llm_iteration(cfg, tools_array, messages, state, iteration)
            if done:
                break
        else:
            logger.warning("agent loop hit max iterations", max_iterations=cfg.max_iterations)
            state.error = f"no answer after {cfg.max_iterations} iterations"

        return AgentLoopResult(
            final_content=state.final_content,
            tool_messages=state.tool_messages,
            step_count=state.step_count,
            total_tokens_in=state.total_tokens_in,
            total_tokens_out=state.total_tokens_out,
            model=state.model,
            error=state.error,
        )

    async def _do_llm_iteration(
        self,
        cfg: LoopConfig,
        tools_array: list[dict[str, object]],
        messages: list[dict[str, object]],
        state: _LoopState,
        iteration: int,
    ) -> bool:
        """Run one model round trip. Returns True when the loop should stop."""
        try:
            response = await self._llm.chat_completion(
                messages=messages,
                model=cfg.model,
                tools=tools_array or None,
                tool_choice="auto" if tools_array else None,
                temperature=cfg.temperature,
            )
        except Exception as exc:
            logger.exception("LLM call failed", iteration=iteration)
            state.error = f"LLM call failed: {exc}"
            return True

        state.total_tokens_in += response.tokens_in
        state.total_tokens_out += response.tokens_out
        if response.model:
            state.model = response.model

        if not response.tool_calls:
            logger.info("final answer", iteration=iteration, chars=len(response.content))
            state.final_content = response.content
            return True

        assistant_msg = _build_assistant_message(response)
        state.tool_messages.append(assistant_msg)
        messages.append(assistant_msg.to_openai())

        for tc in response.tool_calls:
            state.step_count += 1
            result_text = await self._execute_tool_call(tc)
            tool_msg = _build_tool_result_message(tc, result_text)
            state.tool_messages.append(tool_msg)
            messages.append(tool_msg.to_openai())

        return False

    async def _execute_tool_call(self, tc: ToolCallPart) -> str:
        """Dispatch one tool call, turning registry failures into text for the model."""
        try:
            arguments = json.loads(tc.arguments) if tc.arguments else {}
        except json.JSONDecodeError:
            logger.warning("tool arguments are not JSON", tool=tc.name, arguments=tc.arguments[:200])
            return f"Error: arguments for {tc.name} are not valid JSON"
        if not isinstance(arguments, dict):
            return f"Error: arguments for {tc.name} must be a JSON object"

        try:
            return await self._tools.execute(ToolRequest.from_call(tc.name, arguments))
        except ToolError as exc:
            return f"Error: {exc}"


def _build_assistant_message(response: ChatCompletionResponse) -> ConversationMessage:
    """Build a ConversationMessage for an assistant message with tool_calls."""
    return ConversationMessage(
        role="assistant",
        content=response.content,
        tool_calls=[
            ToolCallPayload(
                id=tc.id,
                type="function",
                function=ToolCallFunction(name=tc.name, arguments=tc.arguments),
            )
            for tc in response.tool_calls
        ],
    )


def _build_tool_result_message(tc: ToolCallPart, content: str) -> ConversationMessage:
    """Build a ConversationMessage for a tool result."""
    return ConversationMessage(
        role="tool",
        content=content,
        tool_call_id=tc.id,
        name=tc.name,
    )
