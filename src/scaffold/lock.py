"""Advisory lock guarding a units root during scaffolding."""

from __future__ import annotations

import errno
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from contracts.errors import FilesystemError, ScaffoldLocked

try:
    import fcntl as _fcntl
    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False
    logging.getLogger(__name__).warning(
        "fcntl not available (non-POSIX). Scaffold locking is disabled. "
        "Do not run concurrent scaffolding for the same units root on this platform."
    )

LOCK_FILENAME = ".scaffold.lock"


def lock_path_for(units_root: Path) -> Path:
    return units_root / LOCK_FILENAME


@contextmanager
def scaffold_lock(units_root: Path) -> Iterator[Path]:
    """Hold an exclusive, non-blocking lock on ``<units_root>/.scaffold.lock``.

    The lock file is kept between runs; only the ``flock`` is released.  A
    concurrent holder makes this raise :class:`ScaffoldLocked` immediately.
    """

    path = lock_path_for(units_root)
    try:
        units_root.mkdir(parents=True, exist_ok=True)
        fh = open(path, "a", encoding="utf-8")
    except OSError as exc:
        raise FilesystemError(f"Cannot open lock file {path}: {exc}", step="lock", path=path) from exc

    with fh:
        if _HAS_FCNTL:
            try:
                _fcntl.flock(fh, _fcntl.LOCK_EX | _fcntl.LOCK_NB)
            except OSError as exc:
                if exc.errno in (errno.EAGAIN, errno.EACCES, errno.EWOULDBLOCK):
                    raise ScaffoldLocked(
                        f"Another scaffolding run holds {path}", step="lock", path=path
                    ) from exc
                raise FilesystemError(f"Cannot lock {path}: {exc}", step="lock", path=path) from exc
        try:
            yield path
        finally:
            if _HAS_FCNTL:
                _fcntl.flock(fh, _fcntl.LOCK_UN)


__all__ = ["LOCK_FILENAME", "lock_path_for", "scaffold_lock"]
