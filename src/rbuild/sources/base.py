"""Protocol for build sources."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol

from rbuild.observability import BuildLog

SOURCE_SETUP_STEP = "source setup"


class BuildSource(Protocol):
    name: str

    def hash_payload(self) -> Any:
        """Return JSON-compatible data identifying the source and its revision."""

    def setup(self, log: BuildLog | None = None) -> None:
        """Populate the local source tree; raises ``BuildStepError``; may run once.

        Progress is recorded into *log* under the ``source setup`` step.
        """

    def local_directory(self) -> Path:
        """Return the local source tree after a successful :meth:`setup`."""

    def cleanup(self) -> None:
        """Drop the source's hold on its working tree without forcing deletion."""
