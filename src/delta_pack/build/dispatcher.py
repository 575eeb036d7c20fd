"""Dispatch build units to their toolchain and collect artifacts."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

from delta_pack.build.models import BuildResult, BuildStatus
from delta_pack.build.runner import CommandRunner, subprocess_runner
from delta_pack.build.strategies import StrategyRegistry
from delta_pack.units.descriptor import DEFAULT_RULE, ModernProjectRule, classify_descriptor_file
from delta_pack.units.models import BuildKind, BuildUnit

logger = logging.getLogger(__name__)

ArtifactPlacer = Callable[[BuildResult], Path]


@dataclass(slots=True, frozen=True)
class UnitOutcome:
    """Build result plus the package location of its artifact, if placed."""

    result: BuildResult
    placed_path: Path | None
    seconds: float


class BuildDispatcher:
    """Classify each unit, run its build command, and locate the artifact."""

    def __init__(
        self,
        registry: StrategyRegistry,
        *,
        artifact_extension: str = ".dll",
        runner: CommandRunner = subprocess_runner,
        rule: ModernProjectRule = DEFAULT_RULE,
        legacy_available: bool = True,
    ) -> None:
        self._registry = registry
        self._artifact_extension = artifact_extension
        self._runner = runner
        self._rule = rule
        self._legacy_available = legacy_available

    def classify(self, unit: BuildUnit) -> BuildKind:
        """Return the build kind for unit from its descriptor content."""
        return classify_descriptor_file(unit.descriptor_path, self._rule)

    def build(self, unit: BuildUnit, output_directory: Path) -> BuildResult:
        """Build one unit into output_directory; never raises for build failures."""
        try:
            kind = self.classify(unit)
        except OSError as error:
            logger.warning("Cannot read descriptor for %s: %s", unit.name, error)
            return BuildResult(
                unit=unit,
                kind=BuildKind.LEGACY,
                output_directory=output_directory,
                status=BuildStatus.FAILED,
                message=f"descriptor unreadable: {error}",
            )
        strategy = self._registry.select(kind)
        if kind is BuildKind.LEGACY and not self._legacy_available:
            logger.warning(
                "Skipping legacy unit %s: %s is not available on this host",
                unit.name,
                strategy.tool,
            )
            return BuildResult(
                unit=unit,
                kind=kind,
                output_directory=output_directory,
                status=BuildStatus.SKIPPED,
                message=f"{strategy.tool} not available",
            )

        output_directory.mkdir(parents=True, exist_ok=True)
        command = strategy.command(unit, output_directory)
        logger.info("Building %s (%s): %s", unit.name, kind.value, " ".join(command))
        try:
            completed = self._runner(command, unit.directory)
        except OSError as error:
            logger.warning("Build of %s could not start: %s", unit.name, error)
            return BuildResult(
                unit=unit,
                kind=kind,
                output_directory=output_directory,
                status=BuildStatus.FAILED,
                message=f"could not start {strategy.tool}: {error}",
            )
        if completed.returncode != 0:
            logger.warning(
                "Build of %s failed with exit code %d\n%s",
                unit.name,
                completed.returncode,
                completed.tail(),
            )
            return BuildResult(
                unit=unit,
                kind=kind,
                output_directory=output_directory,
                status=BuildStatus.FAILED,
                exit_code=completed.returncode,
                message=f"{strategy.tool} exited with code {completed.returncode}",
            )

        artifact = locate_artifact(output_directory, unit.name, self._artifact_extension)
        if artifact is None:
            logger.warning(
                "Build of %s succeeded but %s%s was not found under %s",
                unit.name,
                unit.name,
                self._artifact_extension,
                output_directory,
            )
            return BuildResult(
                unit=unit,
                kind=kind,
                output_directory=output_directory,
                status=BuildStatus.MISSING_ARTIFACT,
                exit_code=completed.returncode,
                message=f"{unit.name}{self._artifact_extension} not found after build",
            )
        return BuildResult(
            unit=unit,
            kind=kind,
            output_directory=output_directory,
            status=BuildStatus.BUILT,
            artifact_path=artifact,
            exit_code=completed.returncode,
        )


def locate_artifact(output_directory: Path, unit_name: str, extension: str) -> Path | None:
    """Return the first file named <unit_name><extension> beneath output_directory."""
    if not output_directory.is_dir():
        return None
    target = f"{unit_name}{extension}"
    matches = sorted(
        (path for path in output_directory.rglob(target) if path.is_file()),
        key=lambda path: (len(path.relative_to(output_directory).parts), path.as_posix()),
    )
    if not matches:
        return None
    return matches[0]


def assign_output_directories(
    units: Iterable[BuildUnit], build_root: Path
) -> dict[BuildUnit, Path]:
    """Key each unit's output directory by name; taken names get -2, -3 suffixes.

    A suffixed name is also checked against every directory already handed out,
    so a unit literally named Foo-2 never shares a directory with the second Foo.
    """
    ordered = sorted(units, key=lambda item: item.descriptor_path)
    taken: set[str] = set()
    assigned: dict[BuildUnit, Path] = {}
    for unit in ordered:
        candidate = unit.name
        counter = 1
        while candidate.lower() in taken:
            counter += 1
            candidate = f"{unit.name}-{counter}"
        taken.add(candidate.lower())
        assigned[unit] = build_root / candidate
    return assigned


def build_units(
    units: Iterable[BuildUnit],
    build_root: Path,
    dispatcher: BuildDispatcher,
    *,
    max_workers: int = 1,
    place: ArtifactPlacer | None = None,
) -> tuple[UnitOutcome, ...]:
    """Build every unit on a bounded pool and return outcomes ordered by descriptor path.

    max_workers=1 runs the units one after another on a single worker. Build
    failures never abort sibling units; errors raised by ``place`` propagate
    once all submitted work has finished.
    """
    directories = assign_output_directories(units, build_root)
    if not directories:
        return ()
    build_root.mkdir(parents=True, exist_ok=True)

    def work(unit: BuildUnit) -> UnitOutcome:
        started = time.perf_counter()
        result = dispatcher.build(unit, directories[unit])
        placed: Path | None = None
        if result.succeeded and place is not None:
            placed = place(result)
        return UnitOutcome(result=result, placed_path=placed, seconds=time.perf_counter() - started)

    outcomes: list[UnitOutcome] = []
    workers = max(1, min(max_workers, len(directories)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="delta_pack_build") as pool:
        futures = [pool.submit(work, unit) for unit in directories]
        for future in as_completed(futures):
            outcomes.append(future.result())
    outcomes.sort(key=lambda item: item.result.unit.descriptor_path)
    return tuple(outcomes)
