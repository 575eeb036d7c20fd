from __future__ import annotations

import os
from pathlib import Path

from delta_pack.config import (
    DEFAULT_STATIC_EXTENSIONS,
    BuildConfig,
    CliOverrides,
    load_effective_config,
)


def test_missing_file_falls_back_to_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)

    config = load_effective_config()

    assert config.static_extensions == DEFAULT_STATIC_EXTENSIONS
    assert config.build == BuildConfig()
    assert config.projects == ()
    assert config.max_workers == max(1, os.cpu_count() or 1)
    assert config.output_folder.is_absolute()


def test_merge_order_defaults_then_file_then_cli(tmp_path: Path) -> None:
    config_path = tmp_path / "delta_pack.toml"
    config_path.write_text(
        "\n".join(
            [
                f'default_output_folder = "{(tmp_path / "from-file").as_posix()}"',
                'static_extensions = ["CSS", ".Js"]',
                "max_workers = 3",
                "",
                "[build]",
                'legacy_tool = "MSBuild.exe"',
                'artifact_extension = "exe"',
            ]
        ),
        encoding="utf-8",
    )

    from_file = load_effective_config(config_path)
    overridden = load_effective_config(
        config_path,
        CliOverrides(output_folder=tmp_path / "from-cli", max_workers=1),
    )

    assert from_file.output_folder == (tmp_path / "from-file").resolve()
    assert from_file.static_extensions == (".css", ".js")
    assert from_file.max_workers == 3
    assert from_file.build.legacy_tool == "MSBuild.exe"
    assert from_file.build.artifact_extension == ".exe"
    assert from_file.build.modern_tool == "dotnet"
    assert overridden.output_folder == (tmp_path / "from-cli").resolve()
    assert overridden.max_workers == 1
    assert overridden.static_extensions == (".css", ".js")


def test_projects_are_looked_up_case_insensitively(tmp_path: Path) -> None:
    config_path = tmp_path / "delta_pack.toml"
    config_path.write_text(
        "\n".join(
            [
                "[[projects]]",
                'name = "Shop"',
                f'repo_path = "{(tmp_path / "shop").as_posix()}"',
                f'package_root = "{(tmp_path / "deploy").as_posix()}"',
                "",
                "[[projects]]",
                'name = "Admin"',
                f'repo_path = "{(tmp_path / "admin").as_posix()}"',
            ]
        ),
        encoding="utf-8",
    )

    config = load_effective_config(config_path)

    assert [entry.name for entry in config.projects] == ["Shop", "Admin"]
    assert config.project("shop").package_root == tmp_path / "deploy"
    assert config.project("ADMIN").package_root is None
