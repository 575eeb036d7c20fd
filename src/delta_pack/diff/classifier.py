"""Parse git name-status output and partition changes by file kind."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from delta_pack.diff.git import name_status
from delta_pack.diff.models import ChangeRecord, ClassifiedChangeSet, RevisionRange

logger = logging.getLogger(__name__)

DELETION_STATUS = "D"
FIELD_DELIMITER = "\0"
TWO_PATH_STATUSES = frozenset({"R", "C"})


def normalize_change_path(raw_path: str) -> str:
    """Normalize a git path (always forward slashes) to the platform separator."""
    return os.path.normpath(raw_path.strip().replace("/", os.sep))


def parse_name_status(output: str) -> tuple[ChangeRecord, ...]:
    """Parse `git diff --name-status -z` output into change records, dropping deletions.

    Each record is a status field followed by one path, or by two paths
    (source, destination) for renames and copies.
    """
    fields = output.split(FIELD_DELIMITER)
    records: list[ChangeRecord] = []
    index = 0
    while index < len(fields):
        status = fields[index].strip().upper()
        index += 1
        if not status:
            continue
        path_count = 2 if status[0] in TWO_PATH_STATUSES else 1
        paths = fields[index : index + path_count]
        index += path_count
        if len(paths) < path_count:
            logger.debug("Skipping truncated name-status record: %r", status)
            break
        if status.startswith(DELETION_STATUS):
            continue
        # Renames and copies ship the destination path.
        path = paths[-1]
        if not path.strip():
            continue
        records.append(ChangeRecord(status=status[0], path=normalize_change_path(path)))
    return tuple(records)


def extension_of(path: str) -> str:
    """Return lowercase extension of a repository-relative path."""
    return PurePosixPath(path.replace(os.sep, "/")).suffix.lower()


def partition_records(
    records: Iterable[ChangeRecord],
    static_extensions: Iterable[str],
    compiled_extension: str,
) -> ClassifiedChangeSet:
    """Split records into static and compiled buckets, preserving input order."""
    static_set = {extension.lower() for extension in static_extensions}
    compiled = compiled_extension.lower()
    ordered = tuple(records)
    static_files: list[ChangeRecord] = []
    compiled_files: list[ChangeRecord] = []
    for record in ordered:
        suffix = extension_of(record.path)
        if suffix == compiled:
            compiled_files.append(record)
        elif suffix in static_set:
            static_files.append(record)
    return ClassifiedChangeSet(
        records=ordered,
        static_files=tuple(static_files),
        compiled_files=tuple(compiled_files),
    )


def classify_range(
    repo_root: Path,
    revisions: RevisionRange,
    static_extensions: Iterable[str],
    compiled_extension: str,
) -> ClassifiedChangeSet:
    """Diff two revisions and classify the resulting changes."""
    records = parse_name_status(name_status(repo_root, revisions))
    change_set = partition_records(records, static_extensions, compiled_extension)
    logger.info(
        "Classified %d change(s) in %s: %d static, %d compiled, %d other",
        change_set.total_changes,
        revisions.expression,
        len(change_set.static_files),
        len(change_set.compiled_files),
        change_set.unclassified_count,
    )
    return change_set
