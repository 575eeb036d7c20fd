"""Build command strategies for modern and legacy toolchains."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from delta_pack.config import BuildConfig
from delta_pack.units.models import BuildKind, BuildUnit


class BuildStrategy(Protocol):
    """Command builder for one toolchain family."""

    kind: BuildKind
    tool: str

    def command(self, unit: BuildUnit, output_directory: Path) -> list[str]:
        """Return argv that builds unit into output_directory."""
        ...


@dataclass(slots=True, frozen=True)
class ModernPublishStrategy:
    """Self-contained build graph published with the modern CLI."""

    tool: str = "dotnet"
    configuration: str = "Release"
    kind: BuildKind = BuildKind.MODERN

    def command(self, unit: BuildUnit, output_directory: Path) -> list[str]:
        return [
            self.tool,
            "publish",
            str(unit.descriptor_path),
            "-c",
            self.configuration,
            "-o",
            str(output_directory),
        ]


@dataclass(slots=True, frozen=True)
class LegacyBuildStrategy:
    """Descriptor driven by the external full build tool."""

    tool: str = "msbuild"
    configuration: str = "Release"
    target: str = "Build"
    kind: BuildKind = BuildKind.LEGACY

    def command(self, unit: BuildUnit, output_directory: Path) -> list[str]:
        # OutDir must end with a separator or the tool treats it as a file prefix.
        out_dir = str(output_directory)
        if not out_dir.endswith(os.sep):
            out_dir = f"{out_dir}{os.sep}"
        return [
            self.tool,
            str(unit.descriptor_path),
            f"/t:{self.target}",
            f"/p:Configuration={self.configuration}",
            f"/p:OutDir={out_dir}",
        ]


@dataclass(slots=True)
class StrategyRegistry:
    """Strategies keyed by build kind."""

    _strategies: dict[BuildKind, BuildStrategy] = field(default_factory=dict)

    def register(self, strategy: BuildStrategy) -> None:
        """Register a strategy for its kind, replacing any previous one."""
        self._strategies[strategy.kind] = strategy

    def select(self, kind: BuildKind) -> BuildStrategy:
        """Return the strategy for kind."""
        strategy = self._strategies.get(kind)
        if strategy is None:
            raise LookupError(f"No build strategy registered for {kind.value} units")
        return strategy


def build_strategy_registry(config: BuildConfig) -> StrategyRegistry:
    """Build strategy registry from effective build config."""
    registry = StrategyRegistry()
    registry.register(
        ModernPublishStrategy(tool=config.modern_tool, configuration=config.configuration)
    )
    registry.register(
        LegacyBuildStrategy(tool=config.legacy_tool, configuration=config.configuration)
    )
    return registry
