"""Typed models for build outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from delta_pack.errors import BuildFailedError
from delta_pack.units.models import BuildKind, BuildUnit


class BuildStatus(str, Enum):
    """Outcome of one build unit."""

    BUILT = "built"
    FAILED = "failed"
    MISSING_ARTIFACT = "missing_artifact"
    SKIPPED = "skipped"


@dataclass(slots=True, frozen=True)
class BuildResult:
    """Result of building one unit into its isolated output directory."""

    unit: BuildUnit
    kind: BuildKind
    output_directory: Path
    status: BuildStatus
    artifact_path: Path | None = None
    exit_code: int | None = None
    message: str = ""

    def __post_init__(self) -> None:
        if self.artifact_path is not None and self.artifact_path.stem != self.unit.name:
            raise ValueError(
                f"Artifact {self.artifact_path.name} does not belong to unit {self.unit.name}."
            )

    @property
    def succeeded(self) -> bool:
        """Return True when the process exited cleanly and the artifact exists."""
        return self.status is BuildStatus.BUILT and self.artifact_path is not None

    def failure(self) -> BuildFailedError | None:
        """Return a BuildFailedError describing a non-successful result."""
        if self.succeeded:
            return None
        return BuildFailedError(unit_name=self.unit.name, reason=self.message or self.status.value)
