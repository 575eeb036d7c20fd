"""Build dispatch for discovered units."""

from .dispatcher import (
    BuildDispatcher,
    UnitOutcome,
    assign_output_directories,
    build_units,
    locate_artifact,
)
from .models import BuildResult, BuildStatus
from .runner import CommandResult, CommandRunner, subprocess_runner
from .strategies import (
    BuildStrategy,
    LegacyBuildStrategy,
    ModernPublishStrategy,
    StrategyRegistry,
    build_strategy_registry,
)

__all__ = [
    "BuildDispatcher",
    "BuildResult",
    "BuildStatus",
    "BuildStrategy",
    "CommandResult",
    "CommandRunner",
    "LegacyBuildStrategy",
    "ModernPublishStrategy",
    "StrategyRegistry",
    "UnitOutcome",
    "assign_output_directories",
    "build_strategy_registry",
    "build_units",
    "locate_artifact",
]
