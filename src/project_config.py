"""Utility helpers for loading the scaffolding configuration file."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]

from contracts.errors import ConfigurationError

_CONFIG_FILENAME = "config.toml"


def default_config_path() -> Path:
    """Return the ``config.toml`` shipped at the project root."""

    return Path(__file__).resolve().parents[1] / _CONFIG_FILENAME


@lru_cache(maxsize=8)
def _load(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError as exc:
        raise ConfigurationError(
            f"Configuration file '{path}' was not found", path=path
        ) from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Configuration file '{path}' is not valid TOML: {exc}", path=path) from exc


def get_config(path: str | Path | None = None) -> Dict[str, Any]:
    """Load and cache the configuration at *path* as a dictionary."""

    resolved = Path(path).resolve() if path is not None else default_config_path()
    return _load(resolved)


def get_section(section: str, default: Any = None, *, path: str | Path | None = None) -> Any:
    """Retrieve a nested configuration value using dotted notation."""

    data: Any = get_config(path)
    for part in section.split("."):
        if isinstance(data, dict) and part in data:
            data = data[part]
        else:
            if default is not None:
                return default
            raise KeyError(f"Configuration path '{section}' not found")
    return data


def reload() -> None:
    """Drop every cached configuration file."""

    _load.cache_clear()


__all__ = ["default_config_path", "get_config", "get_section", "reload"]
