"""Unit Initializer: create a unit through the package manager."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List

from contracts.errors import AlreadyExists, CollaboratorError, FilesystemError
from ports.package_manager_port import PackageManager

from .actions import Action, ActionPlan, EventSink, Skip
from .settings import ScaffoldSettings

_LOGGER = logging.getLogger(__name__)


class UnitInitializer:
    """Create the unit directory and drop the package manager's default entry point.

    The steps are exposed as :class:`Action` objects so :mod:`scaffold.workflow`
    can chain them with the template installer in a single plan.
    """

    def __init__(self, settings: ScaffoldSettings, package_manager: PackageManager) -> None:
        self.settings = settings
        self.package_manager = package_manager

    def actions(self, identifier: str) -> List[Action]:
        unit = self.settings.unit_path(identifier)
        default_entry = unit / self.settings.default_entry
        created = {"unit": False}
        removed: dict[str, bytes] = {}

        def check_absent() -> str:
            if unit.exists():
                raise AlreadyExists(f"Unit {unit.name} already exists at {unit}", path=unit)
            try:
                self.settings.units_root.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot create units root {self.settings.units_root}: {exc}",
                    path=self.settings.units_root,
                ) from exc
            return str(unit)

        def init_unit() -> str:
            result = self.package_manager.init(unit)
            if unit.exists():
                created["unit"] = True
            if not result.ok:
                raise CollaboratorError(
                    f"{self.package_manager.name} init failed: {result.message()}", path=unit
                )
            if not unit.is_dir():
                raise CollaboratorError(
                    f"{self.package_manager.name} init reported success but {unit} is missing",
                    path=unit,
                )
            return " ".join(result.argv)

        def undo_init() -> None:
            if created["unit"] and unit.exists():
                shutil.rmtree(unit)

        def remove_default_entry() -> str:
            try:
                removed["bytes"] = default_entry.read_bytes()
                default_entry.unlink()
            except FileNotFoundError:
                raise Skip(f"{self.settings.default_entry} not present") from None
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot remove default entry point {default_entry}: {exc}", path=default_entry
                ) from exc
            return self.settings.default_entry

        def restore_default_entry() -> None:
            if "bytes" in removed and not default_entry.exists():
                default_entry.parent.mkdir(parents=True, exist_ok=True)
                default_entry.write_bytes(removed["bytes"])

        return [
            Action("check-unit-absent", check_absent),
            Action("init-unit", init_unit, undo_init),
            Action("remove-default-entry", remove_default_entry, restore_default_entry),
        ]

    def initialize(
        self,
        identifier: str,
        *,
        rollback: bool | None = None,
        on_event: EventSink | None = None,
    ) -> Path:
        """Run the initializer steps on their own and return the unit path."""

        plan = ActionPlan(
            self.actions(identifier),
            rollback=self.settings.rollback_on_failure if rollback is None else rollback,
            on_event=on_event,
        )
        plan.execute()
        unit = self.settings.unit_path(identifier)
        _LOGGER.info("Initialized unit %s", unit)
        return unit


__all__ = ["UnitInitializer"]
