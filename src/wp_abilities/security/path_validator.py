"""Containment checks for paths derived from ability input."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


class PathEscapeError(ValueError):
    """A user-supplied path resolved outside its permitted root."""


@dataclass(frozen=True)
class PathValidator:
    """Resolve relative names under one root and reject anything escaping it.

    Plugin slugs arrive from MCP clients, so ``../../wp-config`` style values
    must never reach the filesystem or the Plugin Check command line.
    """

    root: Path

    def __post_init__(self) -> None:
        object.__setattr__(self, "root", self.root.expanduser().resolve())

    def resolve(self, name: str | Path) -> Path:
        """Resolve *name* relative to the root, raising on escape."""
        candidate = Path(name).expanduser()
        if candidate.is_absolute():
            raise PathEscapeError(f"Absolute paths are not allowed: {name}")
        resolved = (self.root / candidate).resolve()
        if not self.contains(resolved):
            raise PathEscapeError(f"Path escapes {self.root}: {name}")
        return resolved

    def contains(self, path: Path) -> bool:
        """Return whether *path* is the root or lies beneath it."""
        return path.expanduser().resolve().is_relative_to(self.root)

    def existing(self, *names: str) -> Path | None:
        """Return the first of *names* that resolves inside the root and exists."""
        for name in names:
            resolved = self.resolve(name)
            if resolved.exists():
                return resolved
        return None
