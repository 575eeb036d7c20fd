"""Delta-to-package pipeline: classify, resolve, build, assemble, archive."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial
from pathlib import Path
from typing import Protocol

from delta_pack.assembly import archive_package, copy_static, ensure_directory, place_artifact
from delta_pack.build import (
    BuildDispatcher,
    CommandRunner,
    UnitOutcome,
    build_strategy_registry,
    build_units,
    subprocess_runner,
)
from delta_pack.config import PackConfig
from delta_pack.diff import (
    ClassifiedChangeSet,
    RevisionRange,
    classify_range,
    commit_log,
    diff_stat,
)
from delta_pack.environment import ToolAvailability
from delta_pack.errors import BuildFailedError
from delta_pack.logging import PipelineEvent, new_event
from delta_pack.units import BuildUnit, resolve_units

logger = logging.getLogger(__name__)


class AuditSink(Protocol):
    """Anything that accepts pipeline events."""

    def append(self, event: PipelineEvent) -> None: ...


@dataclass(slots=True, frozen=True)
class PackageRequest:
    """Inputs for one packaging run."""

    repo_root: Path
    revisions: RevisionRange
    package_root: Path
    archive: bool = False


@dataclass(slots=True, frozen=True)
class PreviewReport:
    """Read-only view of what a run would copy and build."""

    revisions: RevisionRange
    change_set: ClassifiedChangeSet
    units: tuple[BuildUnit, ...]
    commits: tuple[str, ...] = ()
    diff_stat: str = ""

    def counts(self) -> dict[str, int]:
        """Return change counts for display and dry-run reporting."""
        return {
            "total": self.change_set.total_changes,
            "static": len(self.change_set.static_files),
            "compiled": len(self.change_set.compiled_files),
            "units": len(self.units),
        }


@dataclass(slots=True, frozen=True)
class PipelineSummary:
    """What a run actually produced, next to what it attempted."""

    static_files_copied: int
    static_files_attempted: int
    units_built: int
    units_attempted: int
    package_folder: Path
    archive_path: Path | None = None
    failures: tuple[BuildFailedError, ...] = ()
    outcomes: tuple[UnitOutcome, ...] = field(default=(), repr=False)

    def to_dict(self) -> dict[str, object]:
        """Return serializable summary record."""
        return {
            "static_files_copied": self.static_files_copied,
            "static_files_attempted": self.static_files_attempted,
            "units_built": self.units_built,
            "units_attempted": self.units_attempted,
            "package_folder": str(self.package_folder),
            "archive_path": str(self.archive_path) if self.archive_path is not None else None,
            "failures": [
                {"unit": failure.unit_name, "reason": failure.reason} for failure in self.failures
            ],
        }


def default_package_name(repo_root: Path, now: datetime | None = None) -> str:
    """Return <repo>_delta_<yyyymmdd_HHMMSS> for a new package folder."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"{repo_root.name}_delta_{stamp}"


def preview(
    repo_root: Path,
    revisions: RevisionRange,
    config: PackConfig,
    *,
    include_log: bool = True,
) -> PreviewReport:
    """Classify the diff and resolve build units without touching the filesystem."""
    change_set = classify_range(
        repo_root,
        revisions,
        config.static_extensions,
        config.build.compiled_extension,
    )
    units = resolve_units(change_set.compiled_files, repo_root, config.build.descriptor_pattern)
    commits: tuple[str, ...] = ()
    stat = ""
    if include_log:
        commits = tuple(commit_log(repo_root, revisions))
        stat = diff_stat(repo_root, revisions)
    return PreviewReport(
        revisions=revisions,
        change_set=change_set,
        units=units,
        commits=commits,
        diff_stat=stat,
    )


def make_dispatcher(
    config: PackConfig,
    tools: ToolAvailability,
    runner: CommandRunner = subprocess_runner,
) -> BuildDispatcher:
    """Build a dispatcher wired to the configured toolchain."""
    return BuildDispatcher(
        build_strategy_registry(config.build),
        artifact_extension=config.build.artifact_extension,
        runner=runner,
        legacy_available=tools.legacy,
    )


def run_pipeline(
    request: PackageRequest,
    config: PackConfig,
    *,
    dispatcher: BuildDispatcher,
    build_root: Path,
    report: PreviewReport | None = None,
    audit: AuditSink | None = None,
    run_id: str = "run",
) -> PipelineSummary:
    """Assemble the delta package for request.

    build_root must already exist and stay in place until this returns; the
    caller owns its cleanup. Per-unit build failures are recorded in the
    summary; copy failures raise CopyFailedError.
    """
    repo_root = request.repo_root.resolve()
    if report is None:
        report = preview(repo_root, request.revisions, config, include_log=False)
    change_set = report.change_set
    package_root = ensure_directory(request.package_root)

    copied = copy_static(change_set.static_files, repo_root, package_root)
    _emit(
        audit,
        new_event(
            run_id,
            "static_copy",
            subject=str(package_root),
            metadata={"attempted": len(change_set.static_files), "copied": len(copied)},
        ),
    )

    outcomes = build_units(
        report.units,
        build_root,
        dispatcher,
        max_workers=config.max_workers,
        place=partial(place_artifact, repo_root=repo_root, package_root=package_root),
    )
    failures: list[BuildFailedError] = []
    for outcome in outcomes:
        result = outcome.result
        failure = result.failure()
        if failure is not None:
            failures.append(failure)
        _emit(
            audit,
            new_event(
                run_id,
                "unit_build",
                ok=result.succeeded,
                subject=result.unit.name,
                metadata={
                    "kind": result.kind.value,
                    "status": result.status.value,
                    "exit_code": result.exit_code,
                    "seconds": round(outcome.seconds, 3),
                    "message": result.message,
                },
            ),
        )

    archive_path: Path | None = None
    if request.archive:
        archive_path = archive_package(package_root)
        _emit(audit, new_event(run_id, "archive", subject=str(archive_path)))

    summary = PipelineSummary(
        static_files_copied=len(copied),
        static_files_attempted=len(change_set.static_files),
        units_built=sum(1 for outcome in outcomes if outcome.placed_path is not None),
        units_attempted=len(outcomes),
        package_folder=package_root,
        archive_path=archive_path,
        failures=tuple(failures),
        outcomes=outcomes,
    )
    _emit(
        audit,
        new_event(run_id, "summary", ok=not failures, metadata=summary.to_dict()),
    )
    logger.info(
        "Package ready at %s: %d/%d static file(s), %d/%d unit(s)",
        package_root,
        summary.static_files_copied,
        summary.static_files_attempted,
        summary.units_built,
        summary.units_attempted,
    )
    return summary


def _emit(audit: AuditSink | None, event: PipelineEvent) -> None:
    if audit is not None:
        audit.append(event)
