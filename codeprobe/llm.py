"""Client for OpenAI-compatible chat completion endpoints (Ollama, LiteLLM, vLLM)."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import httpx

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Raised when the completion endpoint returns an error response."""

    def __init__(self, status_code: int, model: str, body: str) -> None:
        self.status_code = status_code
        self.model = model
        self.body = body
        # Truncate body for the message but keep it accessible via .body
        short = body[:500] if len(body) > 500 else body
        super().__init__(f"LLM endpoint {status_code} for model={model}: {short}")


@dataclass(frozen=True)
class ToolCallPart:
    """A single tool call from an LLM response."""

    id: str
    name: str
    arguments: str


@dataclass(frozen=True)
class ChatCompletionResponse:
    """Parsed response from a chat completion with tool-calling support."""

    content: str
    tool_calls: list[ToolCallPart]
    finish_reason: str
    tokens_in: int
    tokens_out: int
    model: str


class LLMClient:
    """HTTP client for an OpenAI-compatible ``/v1/chat/completions`` API."""

    def __init__(self, base_url: str = "http://localhost:11434", api_key: str = "", timeout: float = 300.0) -> None:
        self._base_url = base_url.rstrip("/")
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(base_url=self._base_url, headers=headers, timeout=timeout)

    async def chat_completion(
        self,
        messages: list[dict[str, object]],
        model: str,
        tools: list[dict[str, object]] | None = None,
        tool_choice: str | dict[str, object] | None = None,
        temperature: float = 0.2,
    ) -> ChatCompletionResponse:
        """Send a chat completion with tool-calling support.

        Returns a ChatCompletionResponse that includes parsed tool_calls
        and finish_reason alongside the content and usage fields.
        """
        payload: dict[str, object] = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
        }
        if tools:
            payload["tools"] = tools
        if tool_choice is not None:
            payload["tool_choice"] = tool_choice

        logger.debug(
            "chat_completion model=%s tools=%d messages=%d temperature=%.2f",
            model,
            len(tools) if tools else 0,
            len(messages),
            temperature,
        )

        resp = await self._client.post("/v1/chat/completions", json=payload)
        if resp.status_code >= 400:
            body = resp.text
            logger.error(
                "LLM error status=%d model=%s body=%s",
                resp.status_code,
                model,
                body[:1000],
            )
            raise LLMError(resp.status_code, model, body)
        data: dict[str, object] = resp.json()

        choices = data.get("choices", [])
        if not isinstance(choices, list) or len(choices) == 0:
            return ChatCompletionResponse(
                content="",
                tool_calls=[],
                finish_reason="stop",
                tokens_in=0,
                tokens_out=0,
                model=model,
            )

        choice = choices[0]
        finish_reason = choice.get("finish_reason", "stop") if isinstance(choice, dict) else "stop"
        message = choice.get("message", {}) if isinstance(choice, dict) else {}
        content = (message.get("content", "") or "") if isinstance(message, dict) else ""

        tool_calls = _parse_tool_calls(message.get("tool_calls")) if isinstance(message, dict) else []

        usage = data.get("usage", {})
        tokens_in = usage.get("prompt_tokens", 0) if isinstance(usage, dict) else 0
        tokens_out = usage.get("completion_tokens", 0) if isinstance(usage, dict) else 0

        return ChatCompletionResponse(
            content=str(content),
            tool_calls=tool_calls,
            finish_reason=str(finish_reason or "stop"),
            tokens_in=int(tokens_in or 0),
            tokens_out=int(tokens_out or 0),
            model=str(data.get("model") or model),
        )

    async def health(self) -> bool:
        """Check that the endpoint answers its model listing."""
        try:
            resp = await self._client.get("/v1/models")
            return resp.status_code == 200
        except httpx.HTTPError:
            return False

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()


def _parse_tool_calls(raw: object) -> list[ToolCallPart]:
    """Parse tool_calls from a non-streaming chat completion response.

    Some servers (Ollama among them) send ``arguments`` as a JSON object
    rather than a JSON string; both are normalized to a string.
    """
    if not isinstance(raw, list):
        return []
    result: list[ToolCallPart] = []
    for index, tc in enumerate(raw):
        if not isinstance(tc, dict):
            continue
        func = tc.get("function")
        if not isinstance(func, dict) or "name" not in func:
            continue
        arguments = func.get("arguments", "")
        if isinstance(arguments, dict):
            arguments = json.dumps(arguments)
        result.append(
            ToolCallPart(
                id=str(tc.get("id") or f"call_{index}"),
                name=str(func["name"]),
                arguments=str(arguments or ""),
            )
        )
    return result
