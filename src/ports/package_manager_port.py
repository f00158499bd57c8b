"""Facade over the external package manager that owns unit manifests."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Protocol, Sequence, Tuple

from contracts.errors import CollaboratorError, ConfigurationError

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one package manager invocation."""

    argv: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def message(self) -> str:
        text = (self.stderr or self.stdout or "").strip()
        if text:
            return text
        return f"{' '.join(self.argv)} exited with status {self.returncode}"


class PackageManager(Protocol):
    """Operations the scaffolding procedure needs from a package manager."""

    name: str
    manifest_name: str

    def init(self, unit_path: Path) -> CommandResult:
        """Create a new buildable unit at ``unit_path``."""

    def add_path_dependency(self, unit_path: Path, dependency: str) -> CommandResult:
        """Register ``dependency`` (relative to the unit) as a local path dependency."""

    def test(self, unit_path: Path) -> CommandResult:
        """Run the unit's test suite with output going to the terminal."""

    def run(self, unit_path: Path, args: Sequence[str] = ()) -> CommandResult:
        """Build and run the unit's entry point."""


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class CargoPackageManager:
    """Cargo backend: ``init``, ``add --path``, ``test`` and ``run``."""

    name = "cargo"
    manifest_name = "Cargo.toml"

    def __init__(self, executable: str | None = None, *, runner: Runner | None = None) -> None:
        self.executable = executable or "cargo"
        self._runner = runner or subprocess.run

    def _execute(self, args: Sequence[str], *, cwd: Path, capture: bool = True) -> CommandResult:
        argv = (self.executable, *args)
        _LOGGER.debug("Running %s in %s", " ".join(argv), cwd)
        try:
            completed = self._runner(
                list(argv),
                cwd=str(cwd),
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise CollaboratorError(
                f"{self.executable!r} was not found; is {self.name} installed and on PATH?",
                path=cwd,
            ) from exc
        except OSError as exc:
            raise CollaboratorError(f"Could not start {self.executable!r}: {exc}", path=cwd) from exc
        return CommandResult(
            argv=argv,
            returncode=completed.returncode,
            stdout=(completed.stdout or "") if capture else "",
            stderr=(completed.stderr or "") if capture else "",
        )

    def init(self, unit_path: Path) -> CommandResult:
        return self._execute(
            ("init", "--bin", "--vcs", "none", unit_path.name),
            cwd=unit_path.parent,
        )

    def add_path_dependency(self, unit_path: Path, dependency: str) -> CommandResult:
        return self._execute(("add", "--path", dependency), cwd=unit_path)

    def test(self, unit_path: Path) -> CommandResult:
        return self._execute(("test",), cwd=unit_path, capture=False)

    def run(self, unit_path: Path, args: Sequence[str] = ()) -> CommandResult:
        return self._execute(("run", "--quiet", "--", *args), cwd=unit_path, capture=False)


_BACKENDS: Dict[str, Callable[..., PackageManager]] = {
    "cargo": CargoPackageManager,
}


def register_backend(name: str, factory: Callable[..., PackageManager]) -> None:
    """Make ``factory`` available under ``name`` for :func:`get_package_manager`."""

    _BACKENDS[name.strip().lower()] = factory


def available_backends() -> Tuple[str, ...]:
    return tuple(sorted(_BACKENDS))


def get_package_manager(name: str, executable: str | None = None) -> PackageManager:
    """Instantiate the backend registered under ``name``."""

    key = (name or "").strip().lower()
    factory = _BACKENDS.get(key)
    if factory is None:
        raise ConfigurationError(
            f"Unknown package manager {name!r}; available: {', '.join(available_backends())}",
            step="load-config",
        )
    return factory(executable)


__all__ = [
    "CargoPackageManager",
    "CommandResult",
    "PackageManager",
    "available_backends",
    "get_package_manager",
    "register_backend",
]
