"""Shared fixtures for the codeprobe test suite."""

from __future__ import annotations

import shutil
from typing import TYPE_CHECKING

import pytest
import structlog

from codeprobe.tools import ProjectRoot
from tests.repo_fixtures import git

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture(autouse=True, scope="session")
def _route_structlog_to_stdlib() -> None:
    """Send structlog output through stdlib logging so pytest captures it, not stdout."""
    structlog.configure(
        processors=[structlog.processors.KeyValueRenderer(key_order=["event"])],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Create a project directory with sources, a dependency cache and build output."""
    project = tmp_path / "project"
    project.mkdir()
    (project / "hello.txt").write_text("line one\nline two\nline three\n")
    (project / "sub").mkdir()
    (project / "sub" / "deep.py").write_text("def foo():\n    return 42\n")
    (project / "src").mkdir()
    (project / "src" / "a.ts").write_text("export const a = 1;\n")
    (project / "src" / "b.ts").write_text("export const b = 2;\n")
    (project / "node_modules" / "lib").mkdir(parents=True)
    (project / "node_modules" / "lib" / "index.py").write_text("def foo():\n    pass\n")
    (project / "dist").mkdir()
    (project / "dist" / "bundle.py").write_text("def foo(): ...\n")
    return project


@pytest.fixture
def root(workspace: Path) -> ProjectRoot:
    return ProjectRoot.from_path(workspace)


@pytest.fixture
def git_project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A repository with four commits: first, second, third, fourth."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    for index, message in enumerate(["first", "second", "third", "fourth"]):
        (repo / "notes.txt").write_text(f"revision {index}\n")
        git(repo, "add", "notes.txt")
        git(repo, "commit", "-q", "-m", message)
    return repo
