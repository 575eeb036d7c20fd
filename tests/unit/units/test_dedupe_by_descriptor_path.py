from __future__ import annotations

import os
from pathlib import Path

from conftest import MODERN_DESCRIPTOR, write

from delta_pack.diff import ChangeRecord
from delta_pack.units import BuildUnit, resolve_units


def test_two_files_in_one_unit_yield_one_unit(tmp_path: Path) -> None:
    write(tmp_path, "lib/Foo/Foo.csproj", MODERN_DESCRIPTOR)
    write(tmp_path, "lib/Foo/A.cs", "class A {}")
    write(tmp_path, "lib/Foo/Sub/B.cs", "class B {}")
    changes = [
        ChangeRecord(status="M", path=os.path.join("lib", "Foo", "A.cs")),
        ChangeRecord(status="A", path=os.path.join("lib", "Foo", "Sub", "B.cs")),
    ]

    units = resolve_units(changes, tmp_path, "*.csproj")

    assert len(units) == 1
    assert units[0].name == "Foo"


def test_same_name_in_different_directories_stays_distinct(tmp_path: Path) -> None:
    write(tmp_path, "web/Shared/Shared.csproj", MODERN_DESCRIPTOR)
    write(tmp_path, "api/Shared/Shared.csproj", MODERN_DESCRIPTOR)
    write(tmp_path, "web/Shared/W.cs", "class W {}")
    write(tmp_path, "api/Shared/A.cs", "class A {}")
    changes = [
        ChangeRecord(status="M", path=os.path.join("web", "Shared", "W.cs")),
        ChangeRecord(status="M", path=os.path.join("api", "Shared", "A.cs")),
    ]

    units = resolve_units(changes, tmp_path, "*.csproj")

    assert [unit.relative_directory(tmp_path).as_posix() for unit in units] == [
        "api/Shared",
        "web/Shared",
    ]


def test_units_compare_by_descriptor_path(tmp_path: Path) -> None:
    descriptor = write(tmp_path, "lib/Foo/Foo.csproj", MODERN_DESCRIPTOR).resolve()

    assert BuildUnit(descriptor) == BuildUnit(Path(str(descriptor)))
    assert len({BuildUnit(descriptor), BuildUnit(Path(str(descriptor)))}) == 1
