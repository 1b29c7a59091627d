"""Subprocess helper shared by the process-backed tool adapters."""

from __future__ import annotations

import asyncio
import contextlib

import structlog

from codeprobe.constants import DEFAULT_TOOL_TIMEOUT_SECONDS

logger = structlog.get_logger()


async def run_subprocess(
    args: list[str],
    *,
    cwd: str | None = None,
    timeout: float = DEFAULT_TOOL_TIMEOUT_SECONDS,
) -> tuple[int, str, str]:
    """Run *args* without a shell and return ``(returncode, stdout, stderr)``.

    Arguments are passed as a vector, so nothing in them is ever interpreted
    by a shell. On timeout the process is killed and ``TimeoutError`` is
    re-raised. ``OSError`` (e.g. executable not found) propagates.
    """
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd or None,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except TimeoutError:
        logger.warning("subprocess timed out", args=args, timeout=timeout)
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        raise

    stdout = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr = (stderr_bytes or b"").decode("utf-8", errors="replace")
    return proc.returncode or 0, stdout, stderr
