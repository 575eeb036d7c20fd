"""Command-line entrypoint for building delta packages."""

from __future__ import annotations

import argparse
import shutil
import sys
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

from delta_pack.build import CommandRunner, subprocess_runner
from delta_pack.config import (
    CliOverrides,
    PackConfig,
    load_effective_config,
    validate_repo_root,
    validate_revision_count,
)
from delta_pack.diff import RevisionRange, resolve_revision, revision_range
from delta_pack.environment import (
    ToolAvailability,
    check_dependencies,
    cleanup_stale_build_roots,
    create_build_root,
    ensure_required,
)
from delta_pack.errors import (
    CopyFailedError,
    DeltaPackError,
    DiffUnavailableError,
    InvalidInputError,
    ToolMissingError,
)
from delta_pack.logging import JsonlAuditLogger, configure_logging, new_event
from delta_pack.pipeline import (
    AuditSink,
    PackageRequest,
    PipelineSummary,
    PreviewReport,
    default_package_name,
    make_dispatcher,
    preview,
    run_pipeline,
)

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_INVALID_INPUT = 2
EXIT_DIFF_UNAVAILABLE = 3
EXIT_TOOL_MISSING = 4
EXIT_COPY_FAILED = 5

AUDIT_DIR_NAME = ".delta_pack"

Prompt = Callable[[str], str]


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for one packaging run."""
    parser = argparse.ArgumentParser(
        prog="delta-pack",
        description="Build an incremental deployment package from a git commit range.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--repo", default=None, help="Repository path. Defaults to cwd.")
    source.add_argument("--project", default=None, help="Named project from the config file.")
    parser.add_argument(
        "--commits",
        type=int,
        default=1,
        help="Package the last N commits (HEAD~N..HEAD). Default: 1.",
    )
    parser.add_argument("--from", dest="from_rev", default=None, help="Start revision (exclusive).")
    parser.add_argument(
        "--to",
        dest="to_rev",
        default="HEAD",
        help="End revision; must be the checked-out commit. Default: HEAD.",
    )
    parser.add_argument("--output", default=None, help="Folder that receives the package.")
    parser.add_argument("--name", default=None, help="Package folder name.")
    parser.add_argument("--config", default=None, help="Path to delta_pack.toml.")
    parser.add_argument("--jobs", type=int, default=None, help="Parallel build workers.")
    parser.add_argument(
        "--zip",
        action=argparse.BooleanOptionalAction,
        default=False,
        help="Also write <package>.zip next to the package folder.",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be copied and built without writing anything.",
    )
    parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation.")
    parser.add_argument("--no-audit", action="store_true", help="Do not write the JSONL audit log.")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR.")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the delta-pack command."""
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.log_level)
    return run_cli(args, out=sys.stdout, prompt=input)


def run_cli(
    args: argparse.Namespace,
    *,
    out: TextIO,
    prompt: Prompt,
    runner: CommandRunner = subprocess_runner,
    tools: ToolAvailability | None = None,
) -> int:
    """Run one packaging session and map pipeline errors to exit codes."""
    try:
        return _run(args, out=out, prompt=prompt, runner=runner, tools=tools)
    except InvalidInputError as error:
        return _fail(out, "Invalid input", error, EXIT_INVALID_INPUT)
    except DiffUnavailableError as error:
        return _fail(out, "Diff unavailable", error, EXIT_DIFF_UNAVAILABLE)
    except ToolMissingError as error:
        return _fail(out, "Tool missing", error, EXIT_TOOL_MISSING)
    except CopyFailedError as error:
        return _fail(out, "Copy failed", error, EXIT_COPY_FAILED)


def _run(
    args: argparse.Namespace,
    *,
    out: TextIO,
    prompt: Prompt,
    runner: CommandRunner,
    tools: ToolAvailability | None,
) -> int:
    config = load_effective_config(
        config_path=Path(args.config) if args.config else None,
        overrides=CliOverrides(
            output_folder=Path(args.output) if args.output else None,
            max_workers=args.jobs,
        ),
    )
    repo_root, output_folder = _resolve_locations(args, config)

    available = tools if tools is not None else check_dependencies(config.build)
    ensure_required(available, config.build, needs_build=False)

    revisions = _resolve_revisions(args, repo_root)
    report = preview(repo_root, revisions, config)
    _print_preview(out, repo_root, report)

    if args.dry_run:
        out.write("Dry run: nothing was copied or built.\n")
        return EXIT_OK

    ensure_required(available, config.build, needs_build=bool(report.units))

    package_root = output_folder / (args.name or default_package_name(repo_root))
    if not args.yes and not _confirm(prompt, package_root):
        out.write("Aborted.\n")
        return EXIT_ABORTED

    run_id = datetime.now(tz=UTC).strftime("%Y%m%dT%H%M%S%fZ")
    audit: AuditSink | None = None
    if not args.no_audit:
        audit = JsonlAuditLogger(output_folder / AUDIT_DIR_NAME / "audit.jsonl")
        audit.append(
            new_event(
                run_id,
                "preview",
                subject=str(repo_root),
                metadata={
                    "range": revisions.expression,
                    "config": config.to_public_dict(),
                    **report.counts(),
                },
            )
        )

    cleanup_stale_build_roots()
    build_root = create_build_root()
    try:
        summary = run_pipeline(
            PackageRequest(
                repo_root=repo_root,
                revisions=revisions,
                package_root=package_root,
                archive=bool(args.zip),
            ),
            config,
            dispatcher=make_dispatcher(config, available, runner),
            build_root=build_root,
            report=report,
            audit=audit,
            run_id=run_id,
        )
    finally:
        shutil.rmtree(build_root, ignore_errors=True)
    _print_summary(out, summary)
    return EXIT_OK


def _resolve_locations(args: argparse.Namespace, config: PackConfig) -> tuple[Path, Path]:
    output_folder = config.output_folder
    if args.project:
        entry = config.project(args.project)
        repo = entry.repo_path
        if args.output is None and entry.package_root is not None:
            output_folder = entry.package_root.resolve()
    else:
        repo = Path(args.repo) if args.repo else Path.cwd()
    return validate_repo_root(repo), output_folder


def _resolve_revisions(args: argparse.Namespace, repo_root: Path) -> RevisionRange:
    _require_checked_out(repo_root, args.to_rev)
    if args.from_rev:
        resolve_revision(repo_root, args.from_rev)
        return RevisionRange(from_revision=args.from_rev, to_revision=args.to_rev)
    count = validate_revision_count(args.commits)
    return revision_range(repo_root, count, head=args.to_rev)


def _require_checked_out(repo_root: Path, revision: str) -> None:
    # Static files and builds read the working tree, so the range must end at HEAD.
    if resolve_revision(repo_root, revision) != resolve_revision(repo_root, "HEAD"):
        raise InvalidInputError(
            reason=f"--to {revision} is not the checked-out commit.",
            hint=f"Check out {revision} first (git checkout {revision}) and run again.",
        )


def _confirm(prompt: Prompt, package_root: Path) -> bool:
    try:
        answer = prompt(f"Create package at {package_root}? [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _print_preview(out: TextIO, repo_root: Path, report: PreviewReport) -> None:
    counts = report.counts()
    out.write(f"Repository: {repo_root}\n")
    out.write(f"Range: {report.revisions.expression}\n")
    if report.commits:
        out.write("Commits:\n")
        for line in report.commits:
            out.write(f"  {line}\n")
    if report.diff_stat:
        out.write(f"Diff: {report.diff_stat}\n")
    out.write(
        f"Changes: {counts['total']} total, {counts['static']} static, "
        f"{counts['compiled']} compiled, {counts['units']} build unit(s)\n"
    )
    for unit in report.units:
        out.write(f"  unit {unit.name}: {unit.relative_directory(repo_root).as_posix()}\n")


def _print_summary(out: TextIO, summary: PipelineSummary) -> None:
    out.write(
        f"Static files copied: {summary.static_files_copied}/{summary.static_files_attempted}\n"
    )
    out.write(f"Units built: {summary.units_built}/{summary.units_attempted}\n")
    for failure in summary.failures:
        out.write(f"  failed {failure.unit_name}: {failure.reason}\n")
    out.write(f"Package folder: {summary.package_folder}\n")
    if summary.archive_path is not None:
        out.write(f"Archive: {summary.archive_path}\n")


def _fail(out: TextIO, label: str, error: DeltaPackError, code: int) -> int:
    out.write(f"{label}: {error.reason}\n")
    if error.hint:
        out.write(f"  hint: {error.hint}\n")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
