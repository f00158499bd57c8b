from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import List, Sequence, Tuple

import pytest

import project_config
from ports.package_manager_port import CommandResult
from scaffold import journal
from scaffold.settings import ENV_PREFIX, ScaffoldSettings

ROOT = Path(__file__).resolve().parents[1]
SHIPPED_TEMPLATES = ROOT / "templates"


class FakePackageManager:
    """In-process stand-in for cargo that writes a minimal unit skeleton."""

    name = "fake"
    manifest_name = "Cargo.toml"

    def __init__(
        self,
        executable: str | None = None,
        *,
        fail_init: bool = False,
        fail_add: bool = False,
        test_code: int = 0,
    ) -> None:
        self.executable = executable
        self.fail_init = fail_init
        self.fail_add = fail_add
        self.test_code = test_code
        self.calls: List[Tuple[str, ...]] = []

    def init(self, unit_path: Path) -> CommandResult:
        self.calls.append(("init", str(unit_path)))
        argv = ("fake", "init", unit_path.name)
        if self.fail_init:
            return CommandResult(argv, 101, stderr="error: destination is not writable")
        (unit_path / "src").mkdir(parents=True)
        (unit_path / "Cargo.toml").write_text(
            f'[package]\nname = "{unit_path.name}"\nversion = "0.1.0"\nedition = "2021"\n\n[dependencies]\n',
            encoding="utf-8",
        )
        (unit_path / "src" / "main.rs").write_text(
            'fn main() {\n    println!("Hello, world!");\n}\n', encoding="utf-8"
        )
        return CommandResult(argv, 0)

    def add_path_dependency(self, unit_path: Path, dependency: str) -> CommandResult:
        self.calls.append(("add", str(unit_path), dependency))
        argv = ("fake", "add", "--path", dependency)
        if self.fail_add or not (unit_path / dependency).is_dir():
            return CommandResult(argv, 101, stderr=f"error: failed to load manifest at `{dependency}`")
        manifest = unit_path / self.manifest_name
        name = Path(dependency).name
        with manifest.open("a", encoding="utf-8") as fh:
            fh.write(f'{name} = {{ path = "{dependency}" }}\n')
        return CommandResult(argv, 0)

    def test(self, unit_path: Path) -> CommandResult:
        self.calls.append(("test", str(unit_path)))
        return CommandResult(("fake", "test"), self.test_code)

    def run(self, unit_path: Path, args: Sequence[str] = ()) -> CommandResult:
        self.calls.append(("run", str(unit_path), *args))
        return CommandResult(("fake", "run", *args), 0)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch: pytest.MonkeyPatch):
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX) or key.startswith("CLI_" + ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)
    project_config.reload()
    journal.configure(None)
    yield
    journal.configure(None)


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    target = tmp_path / "templates"
    target.mkdir()
    for name in ("main.tmpl.rs", "puzzle.tmpl.rs"):
        shutil.copyfile(SHIPPED_TEMPLATES / name, target / name)
    return target


@pytest.fixture
def shared_lib(tmp_path: Path) -> Path:
    lib = tmp_path / "aoc"
    (lib / "src").mkdir(parents=True)
    (lib / "Cargo.toml").write_text('[package]\nname = "aoc"\nversion = "0.1.0"\n', encoding="utf-8")
    (lib / "src" / "lib.rs").write_text("", encoding="utf-8")
    return lib


@pytest.fixture
def settings(tmp_path: Path, templates_dir: Path, shared_lib: Path) -> ScaffoldSettings:
    return ScaffoldSettings(
        templates_dir=templates_dir,
        units_root=tmp_path / "units",
        shared_lib_path=shared_lib,
        pad_width=2,
        journal_dir=tmp_path / "journal",
    )


@pytest.fixture
def fake_pm() -> FakePackageManager:
    return FakePackageManager()
