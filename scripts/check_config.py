#!/usr/bin/env python3
"""Validate scaffolding configuration files and the templates they point at."""

from __future__ import annotations

import posixpath
import re
import sys
from pathlib import Path
from typing import List

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from contracts.errors import ScaffoldError
from scaffold.settings import ScaffoldSettings, resolve_settings

_INCLUDE_RE = re.compile(r'include_(?:str|bytes)!\(\s*"([^"]+)"\s*\)')


def _embedded_data_files(settings: ScaffoldSettings) -> List[str]:
    """Unit-relative paths the logic template embeds at compile time."""

    text = settings.logic_template_path.read_text(encoding="utf-8")
    base = posixpath.dirname(settings.logic_target)
    return [posixpath.normpath(posixpath.join(base, ref)) for ref in _INCLUDE_RE.findall(text)]


def _problems(settings: ScaffoldSettings) -> List[str]:
    problems: List[str] = []
    if not settings.templates_dir.is_dir():
        problems.append(f"templates_dir does not exist: {settings.templates_dir}")
    for path in (settings.entry_template_path, settings.logic_template_path):
        if not path.is_file():
            problems.append(f"template missing: {path}")
    if settings.logic_template_path.is_file():
        for name in _embedded_data_files(settings):
            if name not in settings.data_files:
                problems.append(f"logic template embeds {name} but data_files does not create it")
    if settings.register_dependency:
        if settings.shared_lib_path is None:
            problems.append("register_dependency is on but shared_lib_path is unset")
        elif not settings.shared_lib_path.is_dir():
            problems.append(f"shared library does not exist: {settings.shared_lib_path}")
    return problems


def check(path: Path) -> List[str]:
    try:
        settings = resolve_settings(path, env={})
    except ScaffoldError as exc:
        return [str(exc)]
    return _problems(settings)


def main(argv: List[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    paths = [Path(arg) for arg in args] or [ROOT / "config.toml"]

    failures = 0
    for path in paths:
        problems = check(path)
        if problems:
            failures += 1
            for line in problems:
                print(f"{path}: {line}")
        else:
            print(f"{path}: ok")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
