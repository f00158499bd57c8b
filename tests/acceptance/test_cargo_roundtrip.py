from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from scaffold.settings import ScaffoldSettings
from scaffold.workflow import prepare, run_unit, run_unit_tests

pytestmark = pytest.mark.skipif(shutil.which("cargo") is None, reason="cargo is not installed")


def test_prepared_unit_builds_and_tests_with_cargo(tmp_path: Path, templates_dir: Path) -> None:
    settings = ScaffoldSettings(
        templates_dir=templates_dir,
        units_root=tmp_path / "units",
        pad_width=2,
    )

    report = prepare("1", settings)

    assert report.unit.name == "day01"
    assert (report.unit / "Cargo.toml").is_file()
    assert not (report.unit / ".git").exists()
    assert run_unit_tests("1", settings) == 0

    (report.unit / "input.txt").write_text("hello\n", encoding="utf-8")
    assert run_unit("1", settings) == 0
