"""Typed build error model with stable, machine-readable error codes."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rbuild.result import BuildResult


class ErrorCode(StrEnum):
    """Stable error identifiers used across API surfaces."""

    BUILD_CREATE = "E_BUILD_CREATE"
    BUILD_STEP = "E_BUILD_STEP"
    MANIFEST = "E_MANIFEST"
    BUILD = "E_BUILD"


class RbuildError(Exception):
    """Base error class that carries code, optional hint, and context."""

    code: str
    hint: str | None
    context: Mapping[str, str]

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code.value
        self.hint = hint
        self.context = dict(context or {})

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.hint:
            parts.append(f"Hint: {self.hint}")
        if self.context:
            for k, v in self.context.items():
                if v:
                    parts.append(f"  {k}: {v}")
        return "\n".join(parts)

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "code": self.code,
            "message": str(self),
            "context": dict(self.context),
        }
        if self.hint is not None:
            payload["hint"] = self.hint
        return payload


class BuildCreateError(RbuildError):
    """A build could not be constructed from its configuration."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
    ) -> None:
        super().__init__(message, code=ErrorCode.BUILD_CREATE, hint=hint, context=context)


class BuildStepError(RbuildError):
    """A source setup or build step failed.

    ``stdout`` and ``stderr`` hold the verbatim output of the failing
    subprocess (or an I/O error description) so a failure can be diagnosed
    without re-running the tool.
    """

    detail: str
    stdout: str
    stderr: str

    def __init__(
        self,
        detail: str,
        *,
        stdout: str = "",
        stderr: str = "",
        hint: str | None = None,
        context: Mapping[str, str] | None = None,
        code: ErrorCode = ErrorCode.BUILD_STEP,
    ) -> None:
        super().__init__(detail, code=code, hint=hint, context=context)
        self.detail = detail
        self.stdout = stdout
        self.stderr = stderr

    @classmethod
    def from_io(cls, detail: str, error: OSError) -> BuildStepError:
        return cls(detail, stderr=f"IOError: {error}")

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["detail"] = self.detail
        # Sizes only; the captured text stays on the exception.
        payload["output"] = {"stdout": len(self.stdout), "stderr": len(self.stderr)}
        return payload


class ManifestParseError(BuildStepError):
    """An install manifest line could not be split into source and target."""

    line: str

    def __init__(self, detail: str, *, line: str, stdout: str = "", stderr: str = "") -> None:
        super().__init__(
            detail,
            stdout=stdout,
            stderr=stderr,
            context={"line": line},
            code=ErrorCode.MANIFEST,
        )
        self.line = line


class BuildError(RbuildError):
    """A build failed in ``step``; wraps the step's :class:`BuildStepError`."""

    step: str
    error: BuildStepError
    result: BuildResult | None

    def __init__(
        self,
        step: str,
        error: BuildStepError,
        *,
        result: BuildResult | None = None,
    ) -> None:
        super().__init__(
            f'Build step "{step}" errored: {error.detail}',
            code=ErrorCode.BUILD,
            hint=error.hint,
            context={"step": step, "cause": error.code},
        )
        self.step = step
        self.error = error
        self.result = result

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["step"] = self.step
        payload["error"] = self.error.to_dict()
        return payload

    def pretty_format(self) -> str:
        parts = [f'Build step "{self.step}" errored: {self.error.detail}\n']
        if self.error.stdout:
            parts.append("----------------- Stdout -----------------\n")
            parts.append(self.error.stdout)
        if self.error.stderr:
            parts.append("----------------- Stderr -----------------\n")
            parts.append(self.error.stderr)
        return "".join(parts)


__all__ = [
    "BuildCreateError",
    "BuildError",
    "BuildStepError",
    "ErrorCode",
    "ManifestParseError",
    "RbuildError",
]
