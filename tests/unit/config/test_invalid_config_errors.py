from __future__ import annotations

from pathlib import Path

import pytest

from delta_pack.config import (
    MAX_REVISION_COUNT,
    load_effective_config,
    validate_repo_root,
    validate_revision_count,
)
from delta_pack.errors import InvalidInputError


def _write(tmp_path: Path, *lines: str) -> Path:
    path = tmp_path / "delta_pack.toml"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def test_malformed_toml_is_invalid_input(tmp_path: Path) -> None:
    path = _write(tmp_path, "static_extensions = [", "")

    with pytest.raises(InvalidInputError, match="not valid TOML"):
        load_effective_config(path)


def test_wrong_field_type_names_the_field(tmp_path: Path) -> None:
    path = _write(tmp_path, 'static_extensions = ".css"')

    with pytest.raises(InvalidInputError, match="static_extensions"):
        load_effective_config(path)


def test_invalid_section_type_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, 'build = "dotnet"')

    with pytest.raises(InvalidInputError, match="section 'build'"):
        load_effective_config(path)


def test_invalid_worker_count_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "max_workers = 0")

    with pytest.raises(InvalidInputError, match="max_workers"):
        load_effective_config(path)


def test_project_without_repo_path_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "[[projects]]", 'name = "Shop"')

    with pytest.raises(InvalidInputError, match=r"projects\[0\]\.repo_path"):
        load_effective_config(path)


def test_explicit_missing_config_path_raises(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError, match="not found"):
        load_effective_config(tmp_path / "absent.toml")


def test_unknown_project_lists_known_names(tmp_path: Path) -> None:
    path = _write(tmp_path, "[[projects]]", 'name = "Shop"', 'repo_path = "."')

    with pytest.raises(InvalidInputError) as excinfo:
        load_effective_config(path).project("billing")

    assert "Shop" in excinfo.value.hint


@pytest.mark.parametrize("count", [0, -1, MAX_REVISION_COUNT + 1])
def test_revision_count_out_of_range(count: int) -> None:
    with pytest.raises(InvalidInputError, match="out of range"):
        validate_revision_count(count)


def test_revision_count_in_range_is_returned() -> None:
    assert validate_revision_count(1) == 1
    assert validate_revision_count(MAX_REVISION_COUNT) == MAX_REVISION_COUNT


def test_missing_repository_path_is_invalid(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError, match="does not exist"):
        validate_repo_root(tmp_path / "nowhere")
    assert validate_repo_root(tmp_path) == tmp_path.resolve()
