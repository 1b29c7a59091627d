"""Runtime configuration loaded from environment variables."""

from __future__ import annotations

import logging
import os

from codeprobe.constants import DEFAULT_MAX_ITERATIONS, DEFAULT_TOOL_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


def _env_int(name: str, default: int) -> int:
    """Read a positive integer env var, falling back to *default* when unset or invalid."""
    raw = os.environ.get(name, "")
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("ignoring non-positive %s=%d, using %d", name, value, default)
        return default
    return value


class Settings:
    """Configuration for codeprobe, loaded from environment variables.

    Prefix: CODEPROBE_ for every setting. The LLM endpoint defaults to a local
    Ollama server, which exposes an OpenAI-compatible chat completions API.
    """

    llm_url: str
    llm_api_key: str
    model: str
    log_level: str
    log_format: str
    log_service: str
    tool_timeout: int
    max_iterations: int

    def __init__(self) -> None:
        self.llm_url = os.environ.get("CODEPROBE_LLM_URL", "http://localhost:11434")
        self.llm_api_key = os.environ.get("CODEPROBE_LLM_API_KEY", "")
        self.model = os.environ.get("CODEPROBE_MODEL", "llama3.2")
        self.log_level = os.environ.get("CODEPROBE_LOG_LEVEL", "info")
        self.log_format = os.environ.get("CODEPROBE_LOG_FORMAT", "console")
        self.log_service = os.environ.get("CODEPROBE_LOG_SERVICE", "codeprobe")
        self.tool_timeout = _env_int("CODEPROBE_TOOL_TIMEOUT", DEFAULT_TOOL_TIMEOUT_SECONDS)
        self.max_iterations = _env_int("CODEPROBE_MAX_ITERATIONS", DEFAULT_MAX_ITERATIONS)
