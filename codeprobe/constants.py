"""Centralized constants for codeprobe.

Limits and timeouts shared by the tool adapters, the agent loop and the
configuration defaults live here.
"""

from __future__ import annotations

# -- Tool output limits ------------------------------------------------------
MAX_OUTPUT_CHARS = 50_000  # History tool: head+tail cut beyond this.
MAX_TOOL_RESULTS = 500  # Find tool: max file paths returned.
MAX_DIR_ENTRIES = 500  # List tool: max entries.
MAX_SEARCH_MATCHES = 200  # Search tool: max grep output lines.
MAX_HISTORY_ENTRIES = 100  # History tool: upper clamp for `limit`.
MAX_FILE_BYTES = 2 * 1024 * 1024  # Read tool: files above this are refused.

# -- Directories never searched or matched -----------------------------------
EXCLUDED_DIRS = frozenset(
    {
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "dist",
        "build",
        "__pycache__",
        ".venv",
    }
)

# -- Execution ---------------------------------------------------------------
DEFAULT_TOOL_TIMEOUT_SECONDS = 30  # Per external process / glob walk.
DEFAULT_MAX_ITERATIONS = 20  # Agent loop: LLM round trips per question.
LOG_PREVIEW_CHARS = 300  # Trace lines: result preview length.
