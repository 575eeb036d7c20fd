from __future__ import annotations

from pathlib import Path

import pytest
from conftest import MODERN_DESCRIPTOR, write

from delta_pack.assembly import place_artifact
from delta_pack.build import BuildResult, BuildStatus
from delta_pack.units import BuildKind, BuildUnit


def _result(repo: Path, relative_descriptor: str, out: Path) -> BuildResult:
    descriptor = write(repo, relative_descriptor, MODERN_DESCRIPTOR).resolve()
    unit = BuildUnit(descriptor)
    artifact = out / f"{unit.name}.dll"
    artifact.parent.mkdir(parents=True, exist_ok=True)
    artifact.write_bytes(b"assembly")
    return BuildResult(
        unit=unit,
        kind=BuildKind.MODERN,
        output_directory=out,
        status=BuildStatus.BUILT,
        artifact_path=artifact,
        exit_code=0,
    )


def test_artifact_lands_in_bin_under_descriptor_directory(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    result = _result(repo, "lib/Foo/Foo.csproj", tmp_path / "build" / "Foo")

    placed = place_artifact(result, repo, tmp_path / "pkg")

    assert placed == tmp_path / "pkg" / "lib" / "Foo" / "bin" / "Foo.dll"
    assert placed.read_bytes() == b"assembly"


def test_placement_overwrites_previous_artifact(tmp_path: Path) -> None:
    repo = tmp_path / "repo"
    result = _result(repo, "Web.csproj", tmp_path / "build" / "Web")
    write(tmp_path / "pkg", "bin/Web.dll", "old")

    placed = place_artifact(result, repo, tmp_path / "pkg")

    assert placed == tmp_path / "pkg" / "bin" / "Web.dll"
    assert placed.read_bytes() == b"assembly"


def test_result_without_artifact_cannot_be_placed(tmp_path: Path) -> None:
    unit = BuildUnit(write(tmp_path, "Foo.csproj", MODERN_DESCRIPTOR).resolve())
    result = BuildResult(
        unit=unit,
        kind=BuildKind.MODERN,
        output_directory=tmp_path / "out",
        status=BuildStatus.MISSING_ARTIFACT,
    )

    with pytest.raises(ValueError):
        place_artifact(result, tmp_path, tmp_path / "pkg")
