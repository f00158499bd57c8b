"""Identifier to unit name/path mapping."""

from __future__ import annotations

import re
from pathlib import Path

from contracts.errors import InvalidIdentifier

DEFAULT_PATTERN = "day{id}"
PLACEHOLDER = "{id}"
MAX_IDENTIFIER_LENGTH = 32

_IDENTIFIER_RE = re.compile(r"^[A-Za-z0-9]+$")
_NAME_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.-]*$")


def normalize_identifier(identifier: str, *, pad_width: int = 0) -> str:
    """Validate *identifier* and apply zero padding to all-digit values."""

    if not isinstance(identifier, str):
        raise InvalidIdentifier(f"Identifier must be a string, got {type(identifier).__name__}")
    if not identifier:
        raise InvalidIdentifier("Identifier must not be empty")
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifier(
            f"Identifier {identifier[:MAX_IDENTIFIER_LENGTH]!r}... exceeds {MAX_IDENTIFIER_LENGTH} characters"
        )
    if not _IDENTIFIER_RE.match(identifier):
        raise InvalidIdentifier(f"Identifier {identifier!r} must be alphanumeric")
    if pad_width and identifier.isdigit():
        return identifier.zfill(pad_width)
    return identifier


def _check_pattern(pattern: str) -> None:
    if pattern.count(PLACEHOLDER) != 1:
        raise InvalidIdentifier(f"Unit pattern {pattern!r} must contain '{PLACEHOLDER}' exactly once")


def unit_name_for(identifier: str, *, pattern: str = DEFAULT_PATTERN, pad_width: int = 0) -> str:
    """Return the unit directory name for *identifier*.

    >>> unit_name_for("7", pad_width=2)
    'day07'
    """

    _check_pattern(pattern)
    name = pattern.replace(PLACEHOLDER, normalize_identifier(identifier, pad_width=pad_width))
    if not _NAME_RE.match(name) or name in {".", ".."}:
        raise InvalidIdentifier(f"Unit name {name!r} is not a safe path segment")
    return name


def unit_path_for(
    identifier: str,
    units_root: str | Path,
    *,
    pattern: str = DEFAULT_PATTERN,
    pad_width: int = 0,
) -> Path:
    """Return the canonical unit path under *units_root*; never touches the filesystem."""

    return Path(units_root) / unit_name_for(identifier, pattern=pattern, pad_width=pad_width)


def identifier_from_name(name: str, *, pattern: str = DEFAULT_PATTERN) -> str | None:
    """Invert :func:`unit_name_for`; ``None`` when *name* does not match *pattern*."""

    _check_pattern(pattern)
    prefix, suffix = pattern.split(PLACEHOLDER)
    if not name.startswith(prefix) or not name.endswith(suffix):
        return None
    identifier = name[len(prefix) : len(name) - len(suffix)]
    if not identifier or not _IDENTIFIER_RE.match(identifier):
        return None
    return identifier


__all__ = [
    "DEFAULT_PATTERN",
    "identifier_from_name",
    "normalize_identifier",
    "unit_name_for",
    "unit_path_for",
]
