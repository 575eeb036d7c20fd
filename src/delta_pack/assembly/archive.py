"""Zip archive of an assembled package tree."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from delta_pack.errors import CopyFailedError

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIX = ".zip"


def archive_path_for(package_root: Path) -> Path:
    """Return <package_root>.zip."""
    return package_root.with_name(f"{package_root.name}{ARCHIVE_SUFFIX}")


def archive_package(package_root: Path) -> Path:
    """Compress package_root into <package_root>.zip, replacing any existing archive."""
    target = archive_path_for(package_root)
    files = sorted(
        (path for path in package_root.rglob("*") if path.is_file()),
        key=lambda path: path.relative_to(package_root).as_posix(),
    )
    try:
        if target.exists():
            target.unlink()
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for path in files:
                archive.write(path, arcname=path.relative_to(package_root).as_posix())
    except OSError as error:
        raise CopyFailedError(
            path=str(target),
            reason=f"Cannot write archive {target}: {error}",
        ) from error
    logger.info("Archived %d file(s) to %s", len(files), target)
    return target
