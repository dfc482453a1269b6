"""Shared temporary directory handles.

A :class:`TemporaryPath` is one owner of a directory. Owners created with
:meth:`TemporaryPath.clone` share a release flag; when the last owner is
closed (or garbage collected) the directory tree is removed unless some owner
released it first.
"""

from __future__ import annotations

import shutil
import tempfile
import threading
import weakref
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType

from loguru import logger

from rbuild import env


class _SharedPath:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._owners = 0
        self._released = False

    @property
    def released(self) -> bool:
        with self._lock:
            return self._released

    def release(self) -> None:
        with self._lock:
            self._released = True

    def acquire(self) -> None:
        with self._lock:
            self._owners += 1

    def drop(self) -> None:
        with self._lock:
            self._owners -= 1
            remove = self._owners == 0 and not self._released
        if remove and self.path.exists():
            try:
                shutil.rmtree(self.path)
            except OSError as exc:
                logger.warning(f"Failed to remove temporary path {self.path}: {exc}")


class TemporaryPath:
    """One owner of a directory that is deleted after its last owner closes."""

    def __init__(self, path: str | Path) -> None:
        self._attach(_SharedPath(Path(path)))

    @classmethod
    def _from_shared(cls, shared: _SharedPath) -> TemporaryPath:
        handle = cls.__new__(cls)
        handle._attach(shared)
        return handle

    def _attach(self, shared: _SharedPath) -> None:
        shared.acquire()
        self._shared = shared
        self._finalizer = weakref.finalize(self, shared.drop)

    @property
    def path(self) -> Path:
        return self._shared.path

    @property
    def released(self) -> bool:
        return self._shared.released

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def release(self) -> None:
        """Keep the directory on disk once every owner is gone."""
        self._shared.release()

    def clone(self) -> TemporaryPath:
        return TemporaryPath._from_shared(self._shared)

    def close(self) -> None:
        self._finalizer()

    def __enter__(self) -> TemporaryPath:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"TemporaryPath({str(self.path)!r}, released={self.released})"


def default_base_dir(environ: Mapping[str, str] | None = None) -> Path:
    return env.host_output_dir(environ) or Path(tempfile.gettempdir())


def create_temporary_path(
    name: str,
    base_dir: str | Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> TemporaryPath:
    """Create ``<base>/<name>`` (idempotently) and return its first owner.

    The base is *base_dir*, else ``OUT_DIR``, else the system temp directory.
    Raises ``OSError`` when the directory cannot be created.
    """
    base = Path(base_dir) if base_dir is not None else default_base_dir(environ)
    path = base / name
    path.mkdir(parents=True, exist_ok=True)
    return TemporaryPath(path)
