"""One-time setup phase run by the orchestrator before packaging."""

from __future__ import annotations

import logging
import shutil
import tempfile
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from delta_pack.config import BuildConfig
from delta_pack.errors import ToolMissingError

logger = logging.getLogger(__name__)

BUILD_ROOT_PREFIX = "delta_pack_build_"
STALE_AFTER_SECONDS = 6 * 60 * 60

ToolLocator = Callable[[str], str | None]


@dataclass(slots=True, frozen=True)
class ToolAvailability:
    """Which external commands were found on the host."""

    git: bool
    modern: bool
    legacy: bool


def check_dependencies(config: BuildConfig, which: ToolLocator = shutil.which) -> ToolAvailability:
    """Probe PATH for git and both build tools."""
    availability = ToolAvailability(
        git=which("git") is not None,
        modern=which(config.modern_tool) is not None,
        legacy=which(config.legacy_tool) is not None,
    )
    if not availability.legacy:
        logger.warning(
            "%s not found; legacy build units will be skipped", config.legacy_tool
        )
    return availability


def ensure_required(tools: ToolAvailability, config: BuildConfig, *, needs_build: bool) -> None:
    """Raise ToolMissingError for absent commands the run cannot do without."""
    if not tools.git:
        raise ToolMissingError(
            tool="git",
            reason="git executable was not found.",
            hint="Install git and make sure it is on PATH.",
        )
    if needs_build and not tools.modern:
        raise ToolMissingError(
            tool=config.modern_tool,
            reason=f"{config.modern_tool} was not found; compiled changes cannot be rebuilt.",
            hint=f"Install the {config.modern_tool} SDK or run with --dry-run.",
        )


def create_build_root(temp_dir: Path | None = None) -> Path:
    """Create a fresh shared build root under the system temp directory."""
    base = temp_dir if temp_dir is not None else Path(tempfile.gettempdir())
    return Path(tempfile.mkdtemp(prefix=BUILD_ROOT_PREFIX, dir=base))


def cleanup_stale_build_roots(
    temp_dir: Path | None = None,
    *,
    older_than_seconds: float = STALE_AFTER_SECONDS,
    now: float | None = None,
) -> tuple[Path, ...]:
    """Remove build roots left behind by earlier interrupted runs."""
    base = temp_dir if temp_dir is not None else Path(tempfile.gettempdir())
    cutoff = (now if now is not None else time.time()) - older_than_seconds
    removed: list[Path] = []
    for candidate in sorted(base.glob(f"{BUILD_ROOT_PREFIX}*")):
        if not candidate.is_dir():
            continue
        try:
            if candidate.stat().st_mtime > cutoff:
                continue
            shutil.rmtree(candidate)
        except OSError as error:
            logger.warning("Could not remove stale build root %s: %s", candidate, error)
            continue
        removed.append(candidate)
    if removed:
        logger.info("Removed %d stale build root(s)", len(removed))
    return tuple(removed)
