"""Template Installer: populate an initialized unit.

Steps, in order: verify the unit and the templates, install the entry point
(copy by default, hard link on request), copy the logic template, create the
empty data placeholders and, optionally, register the shared library as a
local path dependency.  The logic file is always a full copy.  Existing entry
and logic files are never overwritten, so per-unit edits survive a re-run;
only a file that still shares the template inode is replaced by a copy.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Dict, List

from contracts.errors import (
    CollaboratorError,
    DependencyRegistrationError,
    FilesystemError,
    TemplateMissing,
    UnitNotFound,
)
from ports.package_manager_port import PackageManager

from .actions import Action, ActionPlan, EventSink, Skip
from .settings import ScaffoldSettings

_LOGGER = logging.getLogger(__name__)


def _same_inode(a: Path, b: Path) -> bool:
    try:
        return os.path.samefile(a, b)
    except OSError:
        return False


def _same_content(a: Path, b: Path) -> bool:
    try:
        return a.stat().st_size == b.stat().st_size and a.read_bytes() == b.read_bytes()
    except OSError:
        return False


def copy_template(template: Path, target: Path) -> None:
    """Write an independent copy of *template* at *target*.

    Any existing *target* is unlinked first so a file that shares the
    template's inode is detached instead of written through.
    """

    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists() or target.is_symlink():
        target.unlink()
    shutil.copyfile(template, target)


def link_template(template: Path, target: Path) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists() or target.is_symlink():
        target.unlink()
    os.link(template, target)


def create_placeholder(path: Path) -> bool:
    """Create an empty file at *path*; return ``False`` if it already existed."""

    try:
        with path.open("x", encoding="utf-8"):
            pass
    except FileExistsError:
        return False
    return True


class TemplateInstaller:
    """Install entry/logic templates, data placeholders and the dependency edge."""

    def __init__(self, settings: ScaffoldSettings, package_manager: PackageManager) -> None:
        self.settings = settings
        self.package_manager = package_manager

    def actions(self, identifier: str, *, register_dependency: bool | None = None) -> List[Action]:
        settings = self.settings
        unit = settings.unit_path(identifier)
        entry_template = settings.entry_template_path
        logic_template = settings.logic_template_path
        entry_target = unit / settings.entry_target
        logic_target = unit / settings.logic_target
        register = settings.register_dependency if register_dependency is None else register_dependency

        created = {"entry": False, "logic": False}
        created_data: List[str] = []
        previous_entry: Dict[str, bytes] = {}
        previous_logic: Dict[str, bytes] = {}
        manifest_snapshot: Dict[str, bytes] = {}

        def verify() -> str:
            if not unit.is_dir():
                raise UnitNotFound(f"Unit {unit.name} does not exist at {unit}", path=unit)
            for template in (entry_template, logic_template):
                if not template.is_file():
                    raise TemplateMissing(f"Template {template} is missing", path=template)
            return str(unit)

        def install_entry() -> str:
            aliased = _same_inode(entry_template, entry_target)
            if settings.entry_mode == "hardlink":
                if aliased:
                    raise Skip("entry point already linked to the template")
                installer = link_template
            else:
                installer = copy_template
            if not aliased and entry_target.exists():
                if _same_content(entry_template, entry_target):
                    raise Skip("entry point already matches the template")
                raise Skip(f"keeping existing {settings.entry_target}")
            if aliased:
                _LOGGER.warning("%s shares the template inode; detaching it", entry_target)
                previous_entry["bytes"] = entry_target.read_bytes()
            try:
                installer(entry_template, entry_target)
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot {settings.entry_mode} {entry_template} to {entry_target}: {exc}",
                    path=entry_target,
                ) from exc
            created["entry"] = True
            return f"{settings.entry_mode} {settings.entry_target}"

        def undo_entry() -> None:
            if not created["entry"]:
                return
            if entry_target.exists():
                entry_target.unlink()
            if "bytes" in previous_entry:
                entry_target.write_bytes(previous_entry["bytes"])

        def install_logic() -> str:
            if _same_inode(logic_template, logic_target):
                _LOGGER.warning("%s shares the template inode; detaching it", logic_target)
                previous_logic["bytes"] = logic_target.read_bytes()
            elif logic_target.exists():
                raise Skip(f"keeping existing {settings.logic_target}")
            try:
                copy_template(logic_template, logic_target)
            except OSError as exc:
                raise FilesystemError(
                    f"Cannot copy {logic_template} to {logic_target}: {exc}", path=logic_target
                ) from exc
            if _same_inode(logic_template, logic_target):
                raise FilesystemError(
                    f"{logic_target} aliases its template after copying", path=logic_target
                )
            created["logic"] = True
            return f"copy {settings.logic_target}"

        def undo_logic() -> None:
            if not created["logic"]:
                return
            if logic_target.exists():
                logic_target.unlink()
            if "bytes" in previous_logic:
                logic_target.write_bytes(previous_logic["bytes"])

        def create_data_files() -> str:
            created_data.clear()
            for name in settings.data_files:
                try:
                    if create_placeholder(unit / name):
                        created_data.append(name)
                except OSError as exc:
                    raise FilesystemError(f"Cannot create {unit / name}: {exc}", path=unit / name) from exc
            if not created_data:
                raise Skip("all data files already present")
            return ", ".join(created_data)

        def undo_data_files() -> None:
            for name in created_data:
                path = unit / name
                if path.exists() and path.stat().st_size == 0:
                    path.unlink()

        def register_shared_lib() -> str:
            shared = settings.shared_lib_path
            if shared is None:
                raise DependencyRegistrationError(
                    "Dependency registration requested but no shared library path is configured"
                )
            if not shared.is_dir():
                raise DependencyRegistrationError(
                    f"Shared library {shared} does not exist", path=shared
                )
            relative = os.path.relpath(shared, unit)
            manifest = unit / self.package_manager.manifest_name
            if manifest.exists():
                manifest_snapshot["bytes"] = manifest.read_bytes()
            try:
                result = self.package_manager.add_path_dependency(unit, relative)
            except CollaboratorError as exc:
                raise DependencyRegistrationError(str(exc), path=shared) from exc
            if not result.ok:
                raise DependencyRegistrationError(
                    f"{self.package_manager.name} could not add {relative}: {result.message()}",
                    path=manifest,
                )
            return relative

        def restore_manifest() -> None:
            if "bytes" in manifest_snapshot:
                (unit / self.package_manager.manifest_name).write_bytes(manifest_snapshot["bytes"])

        actions = [
            Action("verify-unit", verify),
            Action("install-entry", install_entry, undo_entry),
            Action("install-logic", install_logic, undo_logic),
            Action("create-data-files", create_data_files, undo_data_files),
        ]
        if register:
            actions.append(Action("register-dependency", register_shared_lib, restore_manifest))
        return actions

    def install(
        self,
        identifier: str,
        *,
        register_dependency: bool | None = None,
        rollback: bool | None = None,
        on_event: EventSink | None = None,
    ) -> Path:
        """Run the installer steps on their own and return the unit path."""

        plan = ActionPlan(
            self.actions(identifier, register_dependency=register_dependency),
            rollback=self.settings.rollback_on_failure if rollback is None else rollback,
            on_event=on_event,
        )
        plan.execute()
        return self.settings.unit_path(identifier)


__all__ = ["TemplateInstaller", "copy_template", "create_placeholder", "link_template"]
