"""Typed interface for build steps."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from rbuild.build import Build
    from rbuild.result import BuildResult


class BuildStep(Protocol):
    name: str

    def hash_payload(self) -> Any:
        """Return JSON-compatible data identifying the step's options."""

    def execute(self, build: Build, result: BuildResult) -> None:
        """Run the step, recording artifacts into *result*; raises ``BuildStepError``."""
