"""Package tree assembly and archiving."""

from .archive import ARCHIVE_SUFFIX, archive_package, archive_path_for
from .assembler import (
    ARTIFACT_DIR_NAME,
    artifact_destination,
    copy_file,
    copy_static,
    ensure_directory,
    place_artifact,
)

__all__ = [
    "ARCHIVE_SUFFIX",
    "ARTIFACT_DIR_NAME",
    "archive_package",
    "archive_path_for",
    "artifact_destination",
    "copy_file",
    "copy_static",
    "ensure_directory",
    "place_artifact",
]
