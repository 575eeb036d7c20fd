"""Map compiled-source changes to their nearest enclosing build unit."""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Iterable
from pathlib import Path

from delta_pack.diff.models import ChangeRecord
from delta_pack.units.models import BuildUnit

logger = logging.getLogger(__name__)


def find_descriptor(start_dir: Path, repo_root: Path, pattern: str) -> Path | None:
    """Walk upward from start_dir to repo_root and return the nearest descriptor.

    Each level is searched non-recursively; the lexicographically first match
    wins. Returns None when no level up to and including repo_root matches, or
    when start_dir lies outside repo_root.
    """
    root = repo_root.resolve()
    current = start_dir.resolve()
    if not current.is_relative_to(root):
        return None
    while True:
        match = _first_match(current, pattern)
        if match is not None:
            return match
        if current == root:
            return None
        current = current.parent


def resolve_units(
    compiled_files: Iterable[ChangeRecord],
    repo_root: Path,
    pattern: str,
) -> tuple[BuildUnit, ...]:
    """Resolve unique build units for compiled changes, ordered by descriptor path."""
    root = repo_root.resolve()
    units: dict[Path, BuildUnit] = {}
    for record in compiled_files:
        source = root / record.path
        descriptor = find_descriptor(source.parent, root, pattern)
        if descriptor is None:
            logger.warning("No build unit found for %s; it will not be rebuilt", record.path)
            continue
        units.setdefault(descriptor, BuildUnit(descriptor_path=descriptor))
    return tuple(units[key] for key in sorted(units))


def _first_match(directory: Path, pattern: str) -> Path | None:
    try:
        with os.scandir(directory) as entries:
            names = sorted(
                entry.name
                for entry in entries
                if entry.is_file() and fnmatch.fnmatch(entry.name.lower(), pattern.lower())
            )
    except OSError:
        return None
    if not names:
        return None
    return directory / names[0]
