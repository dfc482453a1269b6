"""Build orchestration.

A :class:`Build` is created once from a :class:`BuildConfig`. Creation
resolves unset options from the environment, derives the build hash and
creates the working directory ``build_<name>_<token>``; identical
configurations always map to the same directory, so a repeated build reuses
the previous tree.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from types import TracebackType
from typing import Any

from rbuild import env
from rbuild.errors import BuildCreateError, BuildError, BuildStepError
from rbuild.keys import hash_token, identity_hash
from rbuild.observability import BuildLog
from rbuild.paths import TemporaryPath, create_temporary_path, default_base_dir
from rbuild.result import BuildResult, LibraryType
from rbuild.sources.base import SOURCE_SETUP_STEP, BuildSource
from rbuild.steps.base import BuildStep


@dataclass(frozen=True, slots=True)
class BuildConfig:
    name: str | None = None
    source: BuildSource | None = None
    steps: tuple[BuildStep, ...] = ()
    library_type: LibraryType | None = None
    install_prefix: str | Path | None = None
    build_dir: str | Path | None = None
    # None resolves from the environment, then defaults to True.
    remove_build_dir: bool | None = None
    log: BuildLog | None = field(default=None, compare=False)


def identity_payload(
    *,
    name: str,
    source: BuildSource,
    install_prefix: Path | None,
    library_type: LibraryType,
    steps: Sequence[BuildStep],
) -> dict[str, Any]:
    return {
        "name": name,
        "source": source.hash_payload(),
        "install_prefix": str(install_prefix) if install_prefix is not None else None,
        "library_type": library_type.name.lower(),
        "steps": [
            {"index": index, "name": step.name, "payload": step.hash_payload()}
            for index, step in enumerate(steps)
        ],
    }


class Build:
    """A named source plus ordered steps, bound to a working directory."""

    def __init__(
        self,
        *,
        name: str,
        source: BuildSource,
        steps: Sequence[BuildStep],
        library_type: LibraryType,
        install_prefix: Path | None,
        build_hash: int,
        build_path: TemporaryPath,
        install_path: Path | None = None,
        log: BuildLog | None = None,
    ) -> None:
        self._name = name
        self._source = source
        self._steps = tuple(steps)
        self._library_type = library_type
        self._install_prefix = install_prefix
        self._build_hash = build_hash
        self._build_path = build_path
        self._install_path = install_path or install_prefix or build_path.path / "install"
        self.log = log if log is not None else BuildLog(build=name)

    @classmethod
    def create(
        cls,
        config: BuildConfig,
        *,
        environ: Mapping[str, str] | None = None,
    ) -> Build:
        """Validate *config*, resolve environment fallbacks and create the build."""
        name = config.name
        if not name:
            raise BuildCreateError("Build name is required.", hint="Set BuildConfig.name.")
        if "/" in name or "\\" in name:
            raise BuildCreateError(
                "Build name must not contain path separators.",
                context={"name": name},
            )
        if config.source is None:
            raise BuildCreateError(
                "Build source is required.",
                hint="Set BuildConfig.source.",
                context={"name": name},
            )

        install_prefix = Path(config.install_prefix) if config.install_prefix else None
        if install_prefix is None:
            install_prefix = env.install_prefix_from_env(name, environ)
        library_type = config.library_type
        if library_type is None:
            library_type = env.library_type_from_env(name, environ) or LibraryType.SHARED
        remove_build_dir = config.remove_build_dir
        if remove_build_dir is None:
            remove_build_dir = env.remove_build_dir_from_env(name, environ)
        if remove_build_dir is None:
            remove_build_dir = True

        build_hash = identity_hash(
            identity_payload(
                name=name,
                source=config.source,
                install_prefix=install_prefix,
                library_type=library_type,
                steps=config.steps,
            )
        )
        base_dir = Path(config.build_dir) if config.build_dir else None
        if base_dir is None:
            base_dir = env.build_dir_from_env(name, environ)
        if base_dir is None:
            base_dir = default_base_dir(environ)
        token = hash_token(build_hash)
        directory_name = f"build_{name}_{token}"
        # Kept outside the build directory, which may be removed on close.
        install_path = install_prefix or base_dir / f"install_{name}_{token}"
        try:
            build_path = create_temporary_path(directory_name, base_dir, environ=environ)
        except OSError as exc:
            raise BuildCreateError(
                "Failed to create build directory.",
                hint=str(exc),
                context={"name": name, "directory": directory_name},
            ) from exc
        if not remove_build_dir:
            build_path.release()

        return cls(
            name=name,
            source=config.source,
            steps=config.steps,
            library_type=library_type,
            install_prefix=install_prefix,
            build_hash=build_hash,
            build_path=build_path,
            install_path=install_path,
            log=config.log,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def source(self) -> BuildSource:
        return self._source

    @property
    def steps(self) -> tuple[BuildStep, ...]:
        return self._steps

    @property
    def library_type(self) -> LibraryType:
        return self._library_type

    @property
    def install_prefix(self) -> Path | None:
        return self._install_prefix

    @property
    def install_path(self) -> Path:
        """Directory the steps install into: the prefix, else a sibling of the build path."""
        return self._install_path

    @property
    def build_path(self) -> Path:
        return self._build_path.path

    @property
    def build_hash(self) -> int:
        return self._build_hash

    @property
    def build_token(self) -> str:
        return hash_token(self._build_hash)

    def execute(self) -> BuildResult:
        """Set up the source, then run every step in order.

        Raises :class:`BuildError` naming the first failing phase. Results
        recorded by earlier steps are attached to the error, never returned.
        """
        result = BuildResult()
        try:
            self._source.setup(self.log)
        except BuildStepError as exc:
            self.log.warning(exc.detail, operation="source_setup", step=SOURCE_SETUP_STEP)
            raise BuildError(SOURCE_SETUP_STEP, exc, result=result) from exc

        for step in self._steps:
            self.log.info("Running build step.", operation="step_start", step=step.name)
            try:
                step.execute(self, result)
            except BuildStepError as exc:
                self.log.warning(exc.detail, operation="step_failed", step=step.name)
                raise BuildError(step.name, exc, result=result) from exc
            self.log.info("Build step completed.", operation="step_complete", step=step.name)
        return result

    def close(self) -> None:
        """Drop the build's working directory handle and the source's checkout."""
        self._source.cleanup()
        self._build_path.close()

    def __enter__(self) -> Build:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
