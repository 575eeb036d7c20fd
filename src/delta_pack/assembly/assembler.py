"""Assemble copied static files and build artifacts into one package tree."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Iterable
from pathlib import Path

from delta_pack.build.models import BuildResult
from delta_pack.diff.models import ChangeRecord
from delta_pack.errors import CopyFailedError
from delta_pack.units.models import BuildUnit

logger = logging.getLogger(__name__)

ARTIFACT_DIR_NAME = "bin"


def ensure_directory(path: Path) -> Path:
    """Create path and missing parents; an existing directory is not an error."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as error:
        raise CopyFailedError(
            path=str(path),
            reason=f"Cannot create directory {path}: {error}",
        ) from error
    return path


def copy_file(source: Path, destination: Path) -> Path:
    """Copy source over destination after creating its parent directory.

    The copy lands in a sibling temp file first and is then renamed into place,
    so a failed copy never leaves a truncated destination behind.
    """
    ensure_directory(destination.parent)
    partial = destination.with_name(f".{destination.name}.partial")
    try:
        shutil.copy2(source, partial)
        os.replace(partial, destination)
    except OSError as error:
        partial.unlink(missing_ok=True)
        raise CopyFailedError(
            path=str(source),
            reason=f"Cannot copy {source} to {destination}: {error}",
        ) from error
    return destination


def copy_static(
    static_files: Iterable[ChangeRecord], repo_root: Path, package_root: Path
) -> tuple[Path, ...]:
    """Copy each static file to the same repository-relative path under package_root."""
    root = repo_root.resolve()
    copied: list[Path] = []
    for record in static_files:
        source = root / record.path
        if not source.is_file():
            raise CopyFailedError(
                path=record.path,
                reason=f"Changed file is missing from the working tree: {record.path}",
                hint="Check out the target revision before packaging.",
            )
        destination = package_root / record.path
        copy_file(source, destination)
        logger.debug("Copied %s", record.path)
        copied.append(destination)
    return tuple(copied)


def artifact_destination(
    unit: BuildUnit, artifact_name: str, repo_root: Path, package_root: Path
) -> Path:
    """Return <package_root>/<descriptor dir relative to repo>/bin/<artifact_name>."""
    return package_root / unit.relative_directory(repo_root) / ARTIFACT_DIR_NAME / artifact_name


def place_artifact(result: BuildResult, repo_root: Path, package_root: Path) -> Path:
    """Copy a successful unit's artifact into its bin directory in the package."""
    artifact = result.artifact_path
    if artifact is None:
        raise ValueError(f"Unit {result.unit.name} has no artifact to place.")
    destination = artifact_destination(result.unit, artifact.name, repo_root, package_root)
    copy_file(artifact, destination)
    logger.info("Placed %s at %s", artifact.name, destination)
    return destination
