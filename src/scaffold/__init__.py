"""Daily puzzle unit scaffolding: initializer, installer and workflow."""

from __future__ import annotations

from .initializer import UnitInitializer
from .installer import TemplateInstaller
from .settings import ScaffoldSettings, resolve_settings
from .unit_path import unit_name_for, unit_path_for
from .workflow import install, list_units, prepare, run_unit, run_unit_tests

__all__ = [
    "ScaffoldSettings",
    "TemplateInstaller",
    "UnitInitializer",
    "install",
    "list_units",
    "prepare",
    "resolve_settings",
    "run_unit",
    "run_unit_tests",
    "unit_name_for",
    "unit_path_for",
]
