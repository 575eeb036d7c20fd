from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from delta_pack.build import CommandResult
from delta_pack.config import PackConfig, load_effective_config

MODERN_DESCRIPTOR = '<Project Sdk="Microsoft.NET.Sdk">\n  <PropertyGroup />\n</Project>\n'
LEGACY_DESCRIPTOR = (
    '<?xml version="1.0" encoding="utf-8"?>\n'
    '<Project ToolsVersion="15.0" '
    'xmlns="http://schemas.microsoft.com/developer/msbuild/2003">\n'
    "  <Import Project=\"$(MSBuildToolsPath)\\Microsoft.CSharp.targets\" />\n"
    "</Project>\n"
)


class FakeBuildRunner:
    """Records build commands and drops <descriptor stem>.dll into the output dir."""

    def __init__(self, fail: Sequence[str] = (), skip_artifact: Sequence[str] = ()) -> None:
        self.calls: list[list[str]] = []
        self._fail = set(fail)
        self._skip_artifact = set(skip_artifact)

    def __call__(self, command: Sequence[str], cwd: Path) -> CommandResult:
        argv = list(command)
        self.calls.append(argv)
        descriptor = Path(next(arg for arg in argv if arg.endswith(".csproj")))
        name = descriptor.stem
        if name in self._fail:
            return CommandResult(returncode=1, stdout="", stderr=f"error CS0001 in {name}")
        out_dir = _output_dir(argv)
        out_dir.mkdir(parents=True, exist_ok=True)
        if name not in self._skip_artifact:
            (out_dir / f"{name}.dll").write_bytes(f"binary:{name}".encode())
        (out_dir / f"{name}.pdb").write_bytes(b"symbols")
        return CommandResult(returncode=0, stdout=f"built {name}", stderr="")

    def tools_used(self) -> list[str]:
        return [call[0] for call in self.calls]


def _output_dir(argv: list[str]) -> Path:
    if "-o" in argv:
        return Path(argv[argv.index("-o") + 1])
    for arg in argv:
        if arg.startswith("/p:OutDir="):
            return Path(arg.split("=", 1)[1])
    raise AssertionError(f"No output directory in {argv}")


@pytest.fixture
def fake_runner() -> FakeBuildRunner:
    return FakeBuildRunner()


@pytest.fixture
def make_runner() -> Callable[..., FakeBuildRunner]:
    return FakeBuildRunner


def write(root: Path, relative: str, content: str) -> Path:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def run_git(repo: Path, *args: str) -> str:
    completed = subprocess.run(
        [
            "git",
            "-c",
            "user.name=Delta Tester",
            "-c",
            "user.email=delta@example.com",
            "-c",
            "commit.gpgsign=false",
            *args,
        ],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
    )
    return completed.stdout


def commit_all(repo: Path, message: str) -> None:
    run_git(repo, "add", "-A")
    run_git(repo, "commit", "-q", "-m", message)


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


@pytest.fixture
def scenario_repo(tmp_path: Path) -> Path:
    """Two-commit repo whose last commit adds site.css and Foo.cs and deletes old.txt."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git(repo, "init", "-q")
    write(repo, "old.txt", "legacy notes\n")
    write(repo, "lib/Foo/Foo.csproj", MODERN_DESCRIPTOR)
    write(repo, "README.md", "# shop\n")
    commit_all(repo, "initial import")

    write(repo, "site.css", "body { color: black; }\n")
    write(repo, "lib/Foo/Foo.cs", "namespace Foo { public class Foo {} }\n")
    (repo / "old.txt").unlink()
    commit_all(repo, "style and Foo changes")
    return repo


def empty_config(tmp_path: Path) -> PackConfig:
    """Load defaults through an empty config file so the cwd never leaks in."""
    path = tmp_path / "delta_pack.toml"
    if not path.exists():
        path.write_text("", encoding="utf-8")
    return load_effective_config(path)
