"""Tests for project root validation and path containment."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from codeprobe.tools._paths import (
    InBounds,
    OutOfBounds,
    ProjectRoot,
    ProjectRootError,
    escapes_root,
    relative_to_root,
    resolve_path,
)

if TYPE_CHECKING:
    from pathlib import Path


# --- ProjectRoot ---


def test_project_root_is_canonical(workspace: Path) -> None:
    root = ProjectRoot.from_path(str(workspace / "sub" / ".."))
    assert root.path == workspace.resolve()
    assert root.path.is_absolute()
    assert root.name == "project"


def test_project_root_missing(tmp_path: Path) -> None:
    with pytest.raises(ProjectRootError, match="does not exist"):
        ProjectRoot.from_path(tmp_path / "nope")


def test_project_root_not_a_directory(workspace: Path) -> None:
    with pytest.raises(ProjectRootError, match="not a directory"):
        ProjectRoot.from_path(workspace / "hello.txt")


# --- resolve_path ---


@pytest.mark.parametrize("fragment", [None, "", "   ", ".", "./"])
def test_empty_fragment_resolves_to_root(root: ProjectRoot, fragment: str | None) -> None:
    assert resolve_path(root, fragment) == InBounds(root.path)


@pytest.mark.parametrize("fragment", ["src", "src/a.ts", "sub/../src", "./hello.txt", "does/not/exist"])
def test_in_bounds_fragments_start_with_root(root: ProjectRoot, fragment: str) -> None:
    resolved = resolve_path(root, fragment)
    assert isinstance(resolved, InBounds)
    assert resolved.path.is_relative_to(root.path)
    assert str(resolved.path).startswith(str(root.path))


@pytest.mark.parametrize("fragment", ["..", "../..", "../../etc/passwd", "src/../../x", "/etc/passwd", "/"])
def test_escaping_fragments_are_out_of_bounds(root: ProjectRoot, fragment: str) -> None:
    assert isinstance(resolve_path(root, fragment), OutOfBounds)


def test_absolute_path_inside_root_is_accepted(root: ProjectRoot) -> None:
    resolved = resolve_path(root, str(root.path / "src"))
    assert resolved == InBounds(root.path / "src")


def test_sibling_with_shared_prefix_is_rejected(workspace: Path, root: ProjectRoot) -> None:
    sibling = workspace.parent / (workspace.name + "2")
    sibling.mkdir()
    (sibling / "secret.txt").write_text("s")
    assert isinstance(resolve_path(root, str(sibling / "secret.txt")), OutOfBounds)
    assert isinstance(resolve_path(root, f"../{sibling.name}/secret.txt"), OutOfBounds)


def test_root_string_embedded_elsewhere_is_rejected(tmp_path: Path, root: ProjectRoot) -> None:
    fragment = str(tmp_path / "elsewhere") + str(root.path)
    assert isinstance(resolve_path(root, fragment), OutOfBounds)


def test_symlink_escaping_root_is_rejected(tmp_path: Path, workspace: Path, root: ProjectRoot) -> None:
    outside = tmp_path / "outside"
    outside.mkdir()
    (outside / "secret.txt").write_text("s")
    os.symlink(outside, workspace / "link")
    assert isinstance(resolve_path(root, "link/secret.txt"), OutOfBounds)


def test_out_of_bounds_names_attempted_path(root: ProjectRoot) -> None:
    resolved = resolve_path(root, "../../etc/passwd")
    assert isinstance(resolved, OutOfBounds)
    assert resolved.attempted.endswith("etc/passwd")


# --- relative_to_root ---


def test_relative_to_root(root: ProjectRoot) -> None:
    assert relative_to_root(root, root.path) == "."
    assert relative_to_root(root, root.path / "src" / "a.ts") == "src/a.ts"


# --- escapes_root ---


@pytest.mark.parametrize(
    ("sub", "pattern", "expected"),
    [
        ("", "**/*.py", False),
        ("", "../../etc/passwd", True),
        ("", "/etc/*", True),
        ("src", "../*.txt", False),
        ("src", "../../*", True),
        ("sub", "x/../../hello.txt", False),
        ("", "*/../../*", True),
    ],
)
def test_escapes_root(root: ProjectRoot, sub: str, pattern: str, expected: bool) -> None:
    assert escapes_root(root, root.path / sub, pattern) is expected
