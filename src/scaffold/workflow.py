"""User-facing scaffolding operations: prepare, install, test, run and list."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from contracts.errors import ScaffoldError, UnitNotFound
from ports.package_manager_port import PackageManager, get_package_manager

from . import journal
from .actions import Action, ActionOutcome, ActionPlan, EventSink
from .initializer import UnitInitializer
from .installer import TemplateInstaller
from .lock import scaffold_lock
from .settings import ScaffoldSettings
from .unit_path import identifier_from_name

_LOGGER = logging.getLogger(__name__)


@dataclass
class PrepareReport:
    """Result of :func:`prepare` or :func:`install`."""

    identifier: str
    unit: Path
    outcomes: List[ActionOutcome] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "unit": str(self.unit),
            "steps": [
                {"step": o.name, "status": o.status, "detail": o.detail} for o in self.outcomes
            ],
        }


@dataclass(frozen=True)
class UnitStatus:
    identifier: str
    name: str
    path: Path
    data_files: Dict[str, Optional[int]]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "identifier": self.identifier,
            "name": self.name,
            "path": str(self.path),
            "data_files": dict(self.data_files),
        }


def package_manager_for(settings: ScaffoldSettings) -> PackageManager:
    return get_package_manager(settings.package_manager, settings.package_manager_executable)


def _journal_sink(operation: str, unit_name: str) -> EventSink:
    def sink(event: Dict[str, Any]) -> None:
        payload = {"event": f"scaffold.{operation}", "unit": unit_name}
        payload.update(event)
        journal.append_event(payload)

    return sink


def _run_plan(
    operation: str,
    identifier: str,
    settings: ScaffoldSettings,
    actions_for: Callable[[], List[Action]],
    rollback: bool | None,
) -> PrepareReport:
    journal.configure(settings.journal_dir)
    unit = settings.unit_path(identifier)
    sink = _journal_sink(operation, unit.name)
    plan = ActionPlan(
        actions_for(),
        rollback=settings.rollback_on_failure if rollback is None else rollback,
        on_event=sink,
    )
    report = PrepareReport(identifier=identifier, unit=unit, outcomes=plan.report.outcomes)
    with scaffold_lock(settings.units_root):
        sink({"step": operation, "status": "started"})
        try:
            plan.execute()
        except ScaffoldError as exc:
            sink({"step": operation, "status": "failed", "error": exc.kind, "failed_step": exc.step})
            raise
        sink({"step": operation, "status": "completed"})
    return report


def prepare(
    identifier: str,
    settings: ScaffoldSettings,
    package_manager: PackageManager | None = None,
    *,
    register_dependency: bool | None = None,
    rollback: bool | None = None,
) -> PrepareReport:
    """Initialize a new unit for *identifier* and install its templates.

    Runs under the units-root lock and stops at the first failing step.
    Completed steps stay on disk unless rollback is enabled.
    """

    manager = package_manager or package_manager_for(settings)
    initializer = UnitInitializer(settings, manager)
    installer = TemplateInstaller(settings, manager)
    unit = settings.unit_path(identifier)
    _LOGGER.info("Preparing %s", unit)

    def actions() -> List[Action]:
        return initializer.actions(identifier) + installer.actions(
            identifier, register_dependency=register_dependency
        )

    return _run_plan("prepare", identifier, settings, actions, rollback)


def install(
    identifier: str,
    settings: ScaffoldSettings,
    package_manager: PackageManager | None = None,
    *,
    register_dependency: bool | None = None,
    rollback: bool | None = None,
) -> PrepareReport:
    """Run only the template installer against an existing unit."""

    manager = package_manager or package_manager_for(settings)
    installer = TemplateInstaller(settings, manager)

    def actions() -> List[Action]:
        return installer.actions(identifier, register_dependency=register_dependency)

    return _run_plan("install", identifier, settings, actions, rollback)


def _existing_unit(identifier: str, settings: ScaffoldSettings) -> Path:
    unit = settings.unit_path(identifier)
    if not unit.is_dir():
        raise UnitNotFound(f"Unit {unit.name} does not exist at {unit}", step="locate-unit", path=unit)
    return unit


def run_unit_tests(
    identifier: str,
    settings: ScaffoldSettings,
    package_manager: PackageManager | None = None,
) -> int:
    """Run the unit's test suite and return the package manager's exit code."""

    unit = _existing_unit(identifier, settings)
    manager = package_manager or package_manager_for(settings)
    journal.configure(settings.journal_dir)
    try:
        result = manager.test(unit)
    except ScaffoldError as exc:
        exc.step = exc.step or "test"
        raise
    journal.append_event(
        {"event": "scaffold.test", "unit": unit.name, "step": "test", "returncode": result.returncode}
    )
    return result.returncode


def run_unit(
    identifier: str,
    settings: ScaffoldSettings,
    package_manager: PackageManager | None = None,
    *,
    input_name: str | None = None,
) -> int:
    """Build and run the unit's entry point against one of its data files."""

    unit = _existing_unit(identifier, settings)
    manager = package_manager or package_manager_for(settings)
    data = input_name or (settings.data_files[0] if settings.data_files else "input.txt")
    try:
        result = manager.run(unit, (data,))
    except ScaffoldError as exc:
        exc.step = exc.step or "run"
        raise
    return result.returncode


def list_units(settings: ScaffoldSettings) -> List[UnitStatus]:
    """Return the units found under the units root, sorted by name."""

    root = settings.units_root
    if not root.is_dir():
        return []
    units: List[UnitStatus] = []
    for entry in sorted(root.iterdir()):
        if not entry.is_dir():
            continue
        identifier = identifier_from_name(entry.name, pattern=settings.unit_pattern)
        if identifier is None:
            continue
        sizes: Dict[str, Optional[int]] = {}
        for name in settings.data_files:
            path = entry / name
            sizes[name] = path.stat().st_size if path.is_file() else None
        units.append(UnitStatus(identifier=identifier, name=entry.name, path=entry, data_files=sizes))
    return units


__all__ = [
    "PrepareReport",
    "UnitStatus",
    "install",
    "list_units",
    "package_manager_for",
    "prepare",
    "run_unit",
    "run_unit_tests",
]
