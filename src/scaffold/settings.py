"""Explicit scaffolding configuration and its precedence resolution.

Values are layered as ``config.toml`` < ``PUZZLE_SCAFFOLD_*`` environment
variables < ``CLI_PUZZLE_SCAFFOLD_*`` overrides.  The command line turns its
flags into the last layer, so every caller resolves settings through the same
code path.  Relative paths from the TOML file are anchored at the file's
directory; relative paths from the environment are anchored at the current
working directory at resolution time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from contracts.errors import ConfigurationError
from contracts.loader import validate_scaffold_section
from project_config import default_config_path, get_section

from .unit_path import DEFAULT_PATTERN, unit_name_for, unit_path_for

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "PUZZLE_SCAFFOLD_"
CLI_PREFIX = "CLI_" + ENV_PREFIX
ENTRY_MODES = ("copy", "hardlink")
_REQUIRED = frozenset({"templates_dir", "units_root", "package_manager"})

# field name -> (environment suffix, value kind)
_OVERRIDABLE: Dict[str, Tuple[str, str]] = {
    "templates_dir": ("TEMPLATES_DIR", "path"),
    "units_root": ("UNITS_ROOT", "path"),
    "shared_lib_path": ("SHARED_LIB", "path"),
    "register_dependency": ("REGISTER_DEPENDENCY", "bool"),
    "entry_mode": ("ENTRY_MODE", "mode"),
    "rollback_on_failure": ("ROLLBACK", "bool"),
    "journal_dir": ("JOURNAL_DIR", "path"),
    "package_manager": ("PACKAGE_MANAGER", "str"),
}


@dataclass(frozen=True)
class ScaffoldSettings:
    """Everything the initializer and installer need, with absolute paths."""

    templates_dir: Path
    units_root: Path
    shared_lib_path: Optional[Path] = None
    unit_pattern: str = DEFAULT_PATTERN
    pad_width: int = 0
    entry_template: str = "main.tmpl.rs"
    logic_template: str = "puzzle.tmpl.rs"
    entry_target: str = "src/main.rs"
    logic_target: str = "src/puzzle.rs"
    default_entry: str = "src/main.rs"
    data_files: Tuple[str, ...] = ("input.txt", "sample.txt")
    entry_mode: str = "copy"
    register_dependency: bool = False
    package_manager: str = "cargo"
    package_manager_executable: Optional[str] = None
    rollback_on_failure: bool = False
    journal_dir: Optional[Path] = None
    sources: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.entry_mode not in ENTRY_MODES:
            raise ConfigurationError(
                f"entry_mode must be one of {', '.join(ENTRY_MODES)}, got {self.entry_mode!r}",
                step="load-config",
            )

    @property
    def entry_template_path(self) -> Path:
        return self.templates_dir / self.entry_template

    @property
    def logic_template_path(self) -> Path:
        return self.templates_dir / self.logic_template

    def unit_name(self, identifier: str) -> str:
        return unit_name_for(identifier, pattern=self.unit_pattern, pad_width=self.pad_width)

    def unit_path(self, identifier: str) -> Path:
        return unit_path_for(
            identifier,
            self.units_root,
            pattern=self.unit_pattern,
            pad_width=self.pad_width,
        )


def build_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Merge process environment with optional overrides."""

    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def _coerce_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalised = value.strip().lower()
        if normalised in {"1", "true", "yes", "on"}:
            return True
        if normalised in {"0", "false", "no", "off"}:
            return False
    return None


def _env_path(value: str) -> Path:
    return Path(value).expanduser().resolve()


def _coerce_override(kind: str, raw: str, key: str) -> Any:
    if kind == "path":
        return _env_path(raw) if raw.strip() else None
    if kind == "bool":
        parsed = _coerce_bool(raw)
        if parsed is None:
            _LOGGER.warning("Ignoring %s=%r: not a boolean", key, raw)
        return parsed
    if kind == "mode":
        mode = raw.strip().lower()
        if mode not in ENTRY_MODES:
            raise ConfigurationError(
                f"{key} must be one of {', '.join(ENTRY_MODES)}, got {raw!r}",
                step="load-config",
            )
        return mode
    return raw.strip() or None


def _toml_values(section: Mapping[str, Any], path: Path) -> Dict[str, Any]:
    base_dir = path.parent
    values: Dict[str, Any] = {
        "templates_dir": (base_dir / section.get("templates_dir", "templates")).resolve(),
        "units_root": (base_dir / section.get("units_root", ".")).resolve(),
    }
    if "shared_lib_path" in section:
        values["shared_lib_path"] = (base_dir / section["shared_lib_path"]).resolve()
    if "journal_dir" in section:
        values["journal_dir"] = (base_dir / section["journal_dir"]).resolve()
    for key in ("register_dependency", "entry_mode", "rollback_on_failure"):
        if key in section:
            values[key] = section[key]

    unit = get_section("scaffold.unit", {}, path=path)
    if "pattern" in unit:
        values["unit_pattern"] = unit["pattern"]
    for key in ("pad_width", "default_entry", "entry_target", "logic_target"):
        if key in unit:
            values[key] = unit[key]
    if "data_files" in unit:
        values["data_files"] = tuple(unit["data_files"])

    templates = get_section("scaffold.templates", {}, path=path)
    if "entry" in templates:
        values["entry_template"] = templates["entry"]
    if "logic" in templates:
        values["logic_template"] = templates["logic"]

    manager = get_section("scaffold.package_manager", {}, path=path)
    if "name" in manager:
        values["package_manager"] = manager["name"]
    if "executable" in manager:
        values["package_manager_executable"] = manager["executable"]
    return values


def resolve_settings(
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ScaffoldSettings:
    """Load ``[scaffold]`` from *config_path* and apply environment overrides."""

    path = Path(config_path).resolve() if config_path is not None else default_config_path()
    section = get_section("scaffold", {}, path=path)
    if not isinstance(section, dict):
        raise ConfigurationError(f"[scaffold] in {path} must be a table", step="load-config", path=path)
    validate_scaffold_section(section, source=path)

    values = _toml_values(section, path)
    sources = {name: "config" for name in values}

    resolved_env = dict(env) if env is not None else build_env()
    for prefix, source in ((ENV_PREFIX, "env"), (CLI_PREFIX, "cli")):
        for name, (suffix, kind) in _OVERRIDABLE.items():
            key = prefix + suffix
            raw = resolved_env.get(key)
            if raw is None:
                continue
            value = _coerce_override(kind, raw, key)
            if value is None and (kind == "bool" or name in _REQUIRED):
                continue
            values[name] = value
            sources[name] = source

    _LOGGER.debug("Resolved scaffold settings from %s: %s", path, sources)
    return ScaffoldSettings(**values, sources=sources)


__all__ = [
    "CLI_PREFIX",
    "ENTRY_MODES",
    "ENV_PREFIX",
    "ScaffoldSettings",
    "build_env",
    "resolve_settings",
]
