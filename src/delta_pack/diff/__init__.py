"""Revision diff parsing and classification."""

from .classifier import (
    classify_range,
    extension_of,
    normalize_change_path,
    parse_name_status,
    partition_records,
)
from .git import commit_count, commit_log, diff_stat, resolve_revision, revision_range
from .models import ChangeRecord, ClassifiedChangeSet, RevisionRange

__all__ = [
    "ChangeRecord",
    "ClassifiedChangeSet",
    "RevisionRange",
    "classify_range",
    "commit_count",
    "commit_log",
    "diff_stat",
    "extension_of",
    "normalize_change_path",
    "parse_name_status",
    "partition_records",
    "resolve_revision",
    "revision_range",
]
