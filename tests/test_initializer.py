from __future__ import annotations

import os
from pathlib import Path

import pytest

from conftest import FakePackageManager
from contracts.errors import AlreadyExists, CollaboratorError, FilesystemError
from scaffold.initializer import UnitInitializer


def test_initialize_creates_unit_without_default_entry(settings, fake_pm) -> None:
    unit = UnitInitializer(settings, fake_pm).initialize("1")

    assert unit == settings.units_root / "day01"
    assert (unit / "Cargo.toml").is_file()
    assert not (unit / "src" / "main.rs").exists()
    assert fake_pm.calls == [("init", str(unit))]


def test_existing_unit_is_rejected_before_the_collaborator_runs(settings, fake_pm) -> None:
    (settings.units_root / "day01").mkdir(parents=True)

    with pytest.raises(AlreadyExists) as excinfo:
        UnitInitializer(settings, fake_pm).initialize("01")

    assert excinfo.value.step == "check-unit-absent"
    assert fake_pm.calls == []


def test_collaborator_failure_surfaces_its_message(settings) -> None:
    manager = FakePackageManager(fail_init=True)

    with pytest.raises(CollaboratorError) as excinfo:
        UnitInitializer(settings, manager).initialize("02")

    assert "destination is not writable" in str(excinfo.value)
    assert excinfo.value.step == "init-unit"


def test_missing_default_entry_is_tolerated(settings) -> None:
    class NoEntryManager(FakePackageManager):
        def init(self, unit_path: Path):
            result = super().init(unit_path)
            (unit_path / "src" / "main.rs").unlink()
            return result

    unit = UnitInitializer(settings, NoEntryManager()).initialize("03")
    assert (unit / "Cargo.toml").is_file()


@pytest.mark.skipif(os.geteuid() == 0, reason="root ignores directory permissions")
def test_unremovable_default_entry_is_a_filesystem_error(settings) -> None:
    class ReadOnlySrcManager(FakePackageManager):
        def init(self, unit_path: Path):
            result = super().init(unit_path)
            (unit_path / "src").chmod(0o555)
            return result

    with pytest.raises(FilesystemError):
        UnitInitializer(settings, ReadOnlySrcManager()).initialize("04")
    (settings.units_root / "day04" / "src").chmod(0o755)


def test_rollback_removes_a_unit_created_by_the_same_run(settings) -> None:
    class BrokenAfterInit(FakePackageManager):
        def init(self, unit_path: Path):
            result = super().init(unit_path)
            (unit_path / "src" / "main.rs").unlink()
            (unit_path / "src" / "main.rs").mkdir()
            return result

    with pytest.raises(FilesystemError):
        UnitInitializer(settings, BrokenAfterInit()).initialize("05", rollback=True)

    assert not (settings.units_root / "day05").exists()
