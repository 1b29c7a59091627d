"""Helpers for building throwaway git repositories in tests."""

from __future__ import annotations

import shutil
import subprocess
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

_GIT_IDENTITY = [
    "-c",
    "user.name=Test Author",
    "-c",
    "user.email=author@example.com",
    "-c",
    "commit.gpgsign=false",
]

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


def git(cwd: Path, *args: str) -> str:
    """Run git with a fixed identity and return stdout."""
    completed = subprocess.run(
        ["git", *_GIT_IDENTITY, *args],
        cwd=cwd,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout
