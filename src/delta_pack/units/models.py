"""Typed models for discovered build units."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class BuildKind(str, Enum):
    """Build toolchain family selected from descriptor content."""

    MODERN = "modern"
    LEGACY = "legacy"


@dataclass(slots=True, frozen=True)
class BuildUnit:
    """Project boundary identified by the absolute path of its descriptor."""

    descriptor_path: Path

    @property
    def name(self) -> str:
        """Return descriptor filename without extension."""
        return self.descriptor_path.stem

    @property
    def directory(self) -> Path:
        """Return directory holding the descriptor."""
        return self.descriptor_path.parent

    def relative_directory(self, repo_root: Path) -> Path:
        """Return descriptor directory relative to repo_root."""
        return self.directory.relative_to(repo_root.resolve())
