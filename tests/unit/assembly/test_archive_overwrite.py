from __future__ import annotations

import zipfile
from pathlib import Path

from conftest import write

from delta_pack.assembly import archive_package, archive_path_for


def test_archive_sits_next_to_package_root(tmp_path: Path) -> None:
    package = tmp_path / "shop_delta"
    write(package, "site.css", "body {}")
    write(package, "lib/Foo/bin/Foo.dll", "dll")

    archive = archive_package(package)

    assert archive == tmp_path / "shop_delta.zip"
    assert archive == archive_path_for(package)
    with zipfile.ZipFile(archive) as handle:
        assert handle.namelist() == ["lib/Foo/bin/Foo.dll", "site.css"]


def test_existing_archive_is_replaced(tmp_path: Path) -> None:
    package = tmp_path / "pkg"
    write(package, "a.txt", "a")
    (tmp_path / "pkg.zip").write_bytes(b"not a zip")

    archive = archive_package(package)

    with zipfile.ZipFile(archive) as handle:
        assert handle.namelist() == ["a.txt"]
        assert handle.read("a.txt") == b"a"
