"""Thin git CLI wrappers used by the diff classifier."""

from __future__ import annotations

import subprocess
from pathlib import Path

from delta_pack.diff.models import RevisionRange
from delta_pack.errors import DiffUnavailableError

GIT_TIMEOUT_SECONDS = 120


def run_git(repo_root: Path, args: list[str]) -> str:
    """Run one git command in repo_root and return stdout; raise on failure."""
    try:
        completed = subprocess.run(
            ["git", "-c", "core.quotepath=off", *args],
            cwd=repo_root,
            check=False,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as error:
        raise DiffUnavailableError(
            reason="git executable was not found.",
            hint="Install git and make sure it is on PATH.",
        ) from error
    except subprocess.TimeoutExpired as error:
        raise DiffUnavailableError(
            reason=f"git {' '.join(args)} timed out after {GIT_TIMEOUT_SECONDS}s."
        ) from error
    if completed.returncode != 0:
        message = completed.stderr.strip() or f"git {args[0]} failed"
        raise DiffUnavailableError(reason=message)
    return completed.stdout


def commit_count(repo_root: Path, revision: str = "HEAD") -> int:
    """Return number of commits reachable from revision."""
    output = run_git(repo_root, ["rev-list", "--count", revision]).strip()
    try:
        return int(output)
    except ValueError as error:
        raise DiffUnavailableError(reason=f"Unexpected rev-list output: {output!r}") from error


def revision_range(repo_root: Path, count: int, head: str = "HEAD") -> RevisionRange:
    """Map a commit count onto HEAD~count..HEAD, rejecting counts beyond history."""
    available = commit_count(repo_root, head)
    if count >= available:
        raise DiffUnavailableError(
            reason=(
                f"Requested {count} commit(s) but {head} only has {available} commit(s) "
                "with a parent to diff against."
            ),
            hint=f"Request at most {max(available - 1, 0)} commit(s).",
        )
    return RevisionRange(from_revision=f"{head}~{count}", to_revision=head)


def name_status(repo_root: Path, revisions: RevisionRange) -> str:
    """Return raw NUL-separated name-status output between two revisions.

    -z keeps paths verbatim; without it git C-quotes names containing quotes,
    backslashes or control characters even when core.quotepath is off.
    """
    return run_git(
        repo_root,
        ["diff", "--name-status", "-z", revisions.from_revision, revisions.to_revision],
    )


def commit_log(repo_root: Path, revisions: RevisionRange) -> list[str]:
    """Return one-line commit summaries in the range, newest first."""
    output = run_git(repo_root, ["log", "--oneline", "--no-decorate", revisions.expression])
    return [line for line in output.splitlines() if line.strip()]


def diff_stat(repo_root: Path, revisions: RevisionRange) -> str:
    """Return git's shortstat summary for the range."""
    return run_git(
        repo_root,
        ["diff", "--shortstat", revisions.from_revision, revisions.to_revision],
    ).strip()


def resolve_revision(repo_root: Path, revision: str) -> str:
    """Return the full commit hash for revision."""
    return run_git(repo_root, ["rev-parse", "--verify", f"{revision}^{{commit}}"]).strip()
