"""Schema loading and validation for the scaffolding configuration."""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, List, Mapping

import jsonschema

from .errors import ConfigurationError

_SCHEMA_ROOT = Path(__file__).resolve().parent / "schemas"
_CONFIG_SCHEMA = "scaffold_config.schema.json"

_schema_cache: Dict[str, Dict[str, Any]] = {}
_compiled_cache: Dict[str, Any] = {}


def load_schema(schema_name: str = _CONFIG_SCHEMA) -> Dict[str, Any]:
    """Load a JSON schema bundled with the ``contracts`` package."""

    if "/" in schema_name or "\\" in schema_name:
        raise ValueError("Schema names must not contain path separators")

    if schema_name in _schema_cache:
        return copy.deepcopy(_schema_cache[schema_name])

    schema = json.loads((_SCHEMA_ROOT / schema_name).read_text("utf-8"))
    _schema_cache[schema_name] = schema
    return copy.deepcopy(schema)


def compile_schema(schema_name: str = _CONFIG_SCHEMA) -> Any:
    """Return a cached validator instance for *schema_name*."""

    if schema_name in _compiled_cache:
        return _compiled_cache[schema_name]

    schema = load_schema(schema_name)
    validator_cls = jsonschema.validators.validator_for(schema, default=jsonschema.Draft202012Validator)
    validator_cls.check_schema(schema)
    validator = validator_cls(schema)
    _compiled_cache[schema_name] = validator
    return validator


def _jsonschema_path(exc: jsonschema.ValidationError) -> str:
    path = list(exc.absolute_path)
    if not path:
        return "$"
    components: List[str] = ["$"]
    for part in path:
        if isinstance(part, int):
            components.append(f"[{part}]")
        else:
            components.append(f".{part}")
    return "".join(components)


def collect_issues(section: Mapping[str, Any]) -> List[str]:
    """Return human readable schema violations for the ``[scaffold]`` table."""

    validator = compile_schema()
    errors = sorted(validator.iter_errors(dict(section)), key=lambda e: list(e.absolute_path))
    return [f"{_jsonschema_path(err)}: {err.message}" for err in errors]


def validate_scaffold_section(section: Mapping[str, Any], *, source: str | Path | None = None) -> None:
    """Raise :class:`ConfigurationError` when *section* violates the schema."""

    issues = collect_issues(section)
    if issues:
        where = f" in {source}" if source is not None else ""
        raise ConfigurationError(
            f"Invalid [scaffold] configuration{where}: " + "; ".join(issues),
            step="load-config",
            path=source,
        )


__all__ = ["collect_issues", "compile_schema", "load_schema", "validate_scaffold_section"]
