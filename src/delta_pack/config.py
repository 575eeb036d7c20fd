"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import os
import tempfile
import tomllib
from dataclasses import dataclass
from pathlib import Path

from delta_pack.errors import InvalidInputError

CONFIG_FILE_NAME = "delta_pack.toml"
MAX_REVISION_COUNT = 1_000
MAX_WORKERS_CAP = 64

DEFAULT_STATIC_EXTENSIONS = (
    ".aspx",
    ".ascx",
    ".asax",
    ".ashx",
    ".master",
    ".cshtml",
    ".html",
    ".htm",
    ".css",
    ".js",
    ".json",
    ".xml",
    ".config",
    ".txt",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".svg",
    ".ico",
)


@dataclass(slots=True, frozen=True)
class BuildConfig:
    """Build toolchain settings."""

    compiled_extension: str = ".cs"
    descriptor_pattern: str = "*.csproj"
    artifact_extension: str = ".dll"
    configuration: str = "Release"
    modern_tool: str = "dotnet"
    legacy_tool: str = "msbuild"


@dataclass(slots=True, frozen=True)
class ProjectEntry:
    """Named repository shortcut from the config file."""

    name: str
    repo_path: Path
    package_root: Path | None


@dataclass(slots=True, frozen=True)
class PackConfig:
    """Fully merged packaging configuration."""

    output_folder: Path
    static_extensions: tuple[str, ...]
    max_workers: int
    build: BuildConfig
    projects: tuple[ProjectEntry, ...]

    def project(self, name: str) -> ProjectEntry:
        """Return the named project entry, matching case-insensitively."""
        wanted = name.strip().lower()
        for entry in self.projects:
            if entry.name.lower() == wanted:
                return entry
        known = ", ".join(entry.name for entry in self.projects) or "none configured"
        raise InvalidInputError(
            reason=f"Unknown project '{name}'.",
            hint=f"Known projects: {known}.",
        )

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for audit events."""
        return {
            "output_folder": str(self.output_folder),
            "static_extensions": list(self.static_extensions),
            "max_workers": self.max_workers,
            "build": {
                "compiled_extension": self.build.compiled_extension,
                "descriptor_pattern": self.build.descriptor_pattern,
                "artifact_extension": self.build.artifact_extension,
                "configuration": self.build.configuration,
                "modern_tool": self.build.modern_tool,
                "legacy_tool": self.build.legacy_tool,
            },
            "projects": [entry.name for entry in self.projects],
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional startup overrides applied at highest precedence."""

    output_folder: Path | None = None
    max_workers: int | None = None


def default_config() -> PackConfig:
    """Build the hardcoded defaults used when no config file is present."""
    return PackConfig(
        output_folder=Path(tempfile.gettempdir()).resolve(),
        static_extensions=DEFAULT_STATIC_EXTENSIONS,
        max_workers=max(1, os.cpu_count() or 1),
        build=BuildConfig(),
        projects=(),
    )


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load an optional TOML config document; a missing file yields no settings."""
    if not config_path.exists():
        return {}
    try:
        with config_path.open("rb") as handle:
            payload = tomllib.load(handle)
    except tomllib.TOMLDecodeError as error:
        raise InvalidInputError(
            reason=f"{config_path.name} is not valid TOML: {error}",
            hint="Fix the syntax error or remove the file to use defaults.",
        ) from error
    return payload


def merge_config(
    base: PackConfig, payload: dict[str, object], overrides: CliOverrides
) -> PackConfig:
    """Merge defaults, config file, then CLI overrides."""
    build_payload = _get_table(payload, "build")

    output_folder = base.output_folder
    if "default_output_folder" in payload:
        output_folder = Path(_string(payload["default_output_folder"], "default_output_folder"))

    static_extensions = base.static_extensions
    if "static_extensions" in payload:
        static_extensions = tuple(
            _normalize_extension(item)
            for item in _tuple_of_strings(payload["static_extensions"], "static_extensions")
        )

    max_workers = _optional_positive_int_with_cap(
        payload.get("max_workers"), "max_workers", base.max_workers, MAX_WORKERS_CAP
    )

    build = BuildConfig(
        compiled_extension=_normalize_extension(
            _optional_string(build_payload, "compiled_extension", base.build.compiled_extension)
        ),
        descriptor_pattern=_optional_string(
            build_payload, "descriptor_pattern", base.build.descriptor_pattern
        ),
        artifact_extension=_normalize_extension(
            _optional_string(build_payload, "artifact_extension", base.build.artifact_extension)
        ),
        configuration=_optional_string(build_payload, "configuration", base.build.configuration),
        modern_tool=_optional_string(build_payload, "modern_tool", base.build.modern_tool),
        legacy_tool=_optional_string(build_payload, "legacy_tool", base.build.legacy_tool),
    )

    projects = base.projects
    if "projects" in payload:
        projects = _projects(payload["projects"])

    merged = PackConfig(
        output_folder=output_folder,
        static_extensions=static_extensions,
        max_workers=max_workers,
        build=build,
        projects=projects,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: PackConfig, overrides: CliOverrides) -> PackConfig:
    """Apply startup overrides at highest precedence."""
    max_workers = _optional_positive_int_with_cap(
        overrides.max_workers, "overrides.max_workers", config.max_workers, MAX_WORKERS_CAP
    )
    output_folder = overrides.output_folder or config.output_folder
    return PackConfig(
        output_folder=output_folder.resolve(),
        static_extensions=config.static_extensions,
        max_workers=max_workers,
        build=config.build,
        projects=config.projects,
    )


def load_effective_config(
    config_path: Path | None = None, overrides: CliOverrides | None = None
) -> PackConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    path = config_path if config_path is not None else Path.cwd() / CONFIG_FILE_NAME
    if config_path is not None and not config_path.exists():
        raise InvalidInputError(
            reason=f"Config file not found: {config_path}",
            hint="Pass an existing --config path or omit it to use defaults.",
        )
    payload = load_config_file(path)
    return merge_config(default_config(), payload, overrides or CliOverrides())


def validate_revision_count(count: int) -> int:
    """Return count when within the accepted range, else raise InvalidInputError."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise InvalidInputError(reason="Revision count must be an integer.")
    if count < 1 or count > MAX_REVISION_COUNT:
        raise InvalidInputError(
            reason=f"Revision count {count} is out of range.",
            hint=f"Choose a value between 1 and {MAX_REVISION_COUNT}.",
        )
    return count


def validate_repo_root(repo_root: Path) -> Path:
    """Resolve repo_root and require it to be an existing directory."""
    resolved = repo_root.expanduser().resolve()
    if not resolved.is_dir():
        raise InvalidInputError(
            reason=f"Repository path does not exist: {resolved}",
            hint="Pass --repo with a git working tree or select a configured --project.",
        )
    return resolved


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise InvalidInputError(reason=f"Config section '{key}' must be a table.")
    return value


def _string(value: object, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(reason=f"Config field '{field}' must be a non-empty string.")
    return value.strip()


def _optional_string(payload: dict[str, object], field: str, default: str) -> str:
    if field not in payload:
        return default
    return _string(payload[field], f"build.{field}")


def _tuple_of_strings(value: object, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise InvalidInputError(reason=f"Config field '{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise InvalidInputError(reason=f"Config field '{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _normalize_extension(value: str) -> str:
    lowered = value.strip().lower()
    if not lowered.startswith("."):
        lowered = f".{lowered}"
    return lowered


def _projects(value: object) -> tuple[ProjectEntry, ...]:
    if not isinstance(value, list):
        raise InvalidInputError(reason="Config field 'projects' must be an array of tables.")
    entries: list[ProjectEntry] = []
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise InvalidInputError(reason=f"Config field 'projects[{index}]' must be a table.")
        name = _string(item.get("name"), f"projects[{index}].name")
        repo_path = Path(_string(item.get("repo_path"), f"projects[{index}].repo_path"))
        package_root: Path | None = None
        if "package_root" in item:
            package_root = Path(_string(item["package_root"], f"projects[{index}].package_root"))
        entries.append(ProjectEntry(name=name, repo_path=repo_path, package_root=package_root))
    return tuple(entries)


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidInputError(reason=f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise InvalidInputError(reason=f"Config field '{name}' must be <= {cap}.")
    return value
