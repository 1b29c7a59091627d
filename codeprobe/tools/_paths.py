"""Project root and path containment.

Every path-bearing tool argument is resolved here before any I/O happens.
Containment is checked on canonical paths (symlinks, ``.`` and ``..``
resolved) and compared segment-wise, so ``/p2`` never passes for root ``/p``.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class ProjectRootError(Exception):
    """Raised when the project directory is missing or not a directory."""


@dataclass(frozen=True)
class ProjectRoot:
    """Absolute, canonical, existing directory that bounds all tool access."""

    path: Path

    @classmethod
    def from_path(cls, raw: str | Path) -> ProjectRoot:
        """Canonicalize *raw* and verify it is an existing directory."""
        try:
            path = Path(raw).expanduser().resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise ProjectRootError(f"project directory does not exist: {raw}") from exc
        if not path.is_dir():
            raise ProjectRootError(f"project path is not a directory: {raw}")
        return cls(path=path)

    @property
    def name(self) -> str:
        return self.path.name

    def __str__(self) -> str:
        return str(self.path)


@dataclass(frozen=True)
class InBounds:
    """A canonical path equal to the project root or beneath it."""

    path: Path


@dataclass(frozen=True)
class OutOfBounds:
    """A fragment that escapes the project root (or could not be resolved)."""

    attempted: str


ResolvedPath = InBounds | OutOfBounds


def resolve_path(root: ProjectRoot, fragment: str | None) -> ResolvedPath:
    """Resolve *fragment* against *root* and classify the result.

    Empty fragments resolve to the root. Absolute fragments are accepted only
    when they canonicalize to a location inside the root. Never raises.
    """
    if fragment is None or not fragment.strip():
        return InBounds(root.path)

    joined = root.path / fragment
    try:
        candidate = joined.resolve()
    except (OSError, RuntimeError, ValueError):
        return OutOfBounds(str(joined))

    if candidate == root.path or candidate.is_relative_to(root.path):
        return InBounds(candidate)
    return OutOfBounds(str(candidate))


def relative_to_root(root: ProjectRoot, path: Path) -> str:
    """Render an in-bounds *path* relative to *root* (``"."`` for the root itself)."""
    rel = path.relative_to(root.path)
    return str(rel) if rel.parts else "."


def escapes_root(root: ProjectRoot, base: Path, pattern: str) -> bool:
    """Return True if a glob *pattern* anchored at *base* could leave *root*.

    Absolute patterns always escape. Otherwise the wildcard-free walk of the
    pattern's segments is tracked lexically; a ``..`` that climbs above the
    root rejects the pattern before any globbing happens.
    """
    if Path(pattern).is_absolute():
        return True
    depth = len(base.relative_to(root.path).parts)
    for part in Path(pattern).parts:
        if part == "..":
            depth -= 1
            if depth < 0:
                return True
        elif part not in ("", "."):
            depth += 1
    return False
