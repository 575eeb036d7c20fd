"""Typed models for classified revision diffs."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class ChangeRecord:
    """One changed path from a name-status comparison; never a deletion."""

    status: str
    path: str


@dataclass(slots=True, frozen=True)
class ClassifiedChangeSet:
    """Change records partitioned into static and compiled buckets."""

    records: tuple[ChangeRecord, ...]
    static_files: tuple[ChangeRecord, ...]
    compiled_files: tuple[ChangeRecord, ...]

    @property
    def total_changes(self) -> int:
        """Return count of non-deleted records, including unclassified ones."""
        return len(self.records)

    @property
    def unclassified_count(self) -> int:
        """Return count of records matching neither bucket."""
        return len(self.records) - len(self.static_files) - len(self.compiled_files)


@dataclass(slots=True, frozen=True)
class RevisionRange:
    """Inclusive-exclusive revision pair handed to git diff."""

    from_revision: str
    to_revision: str

    @property
    def expression(self) -> str:
        """Return git range expression for display and log commands."""
        return f"{self.from_revision}..{self.to_revision}"
