"""Local directory source."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from rbuild.errors import BuildCreateError, BuildStepError
from rbuild.observability import BuildLog


class DirectorySource:
    """A source tree that already exists on disk; setup does nothing."""

    name = "directory"

    def __init__(self, path: str | Path) -> None:
        target = Path(path)
        if not target.exists():
            raise BuildCreateError(
                "Source directory does not exist.",
                context={"path": str(target)},
            )
        if not target.is_dir():
            raise BuildCreateError(
                "Source path is not a directory.",
                context={"path": str(target)},
            )
        if not os.access(target, os.R_OK | os.X_OK):
            raise BuildCreateError(
                "Source directory is not accessible.",
                context={"path": str(target)},
            )
        self._path = target.resolve()
        self._initialized = False

    @property
    def path(self) -> Path:
        return self._path

    def hash_payload(self) -> Any:
        return {"kind": "directory", "path": str(self._path)}

    def setup(self, log: BuildLog | None = None) -> None:
        if self._initialized:
            raise BuildStepError("the source has already been initialized")
        self._initialized = True

    def local_directory(self) -> Path:
        return self._path

    def cleanup(self) -> None:
        pass
