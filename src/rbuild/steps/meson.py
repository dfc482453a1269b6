"""Meson build step: setup, compile, install.

Setup may fail because meson wants bundled subproject wrap files promoted
first. Its stdout then names them via ``meson wrap promote <path>``; the
configured promote callback decides which files to promote before setup is
retried. Every other tool failure is fatal.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, Self

from rbuild.errors import BuildStepError
from rbuild.process import run_command
from rbuild.result import BuildResult, LibraryType
from rbuild.steps.manifest import collect_libraries, parse_install_manifest

if TYPE_CHECKING:
    from rbuild.build import Build

PROMOTE_MARKER = "meson wrap promote "
DEFAULT_MAX_PROMOTE_ROUNDS = 5

PromoteCallback = Callable[[str], Sequence[str]]

_DEFAULT_LIBRARY = {LibraryType.STATIC: "static", LibraryType.SHARED: "shared"}


@dataclass(slots=True)
class MesonBuild:
    name: ClassVar[str] = "meson build"

    options: dict[str, str] = field(default_factory=dict)
    promote_callback: PromoteCallback | None = None
    max_promote_rounds: int = DEFAULT_MAX_PROMOTE_ROUNDS
    meson: str = "meson"

    def option(self, key: str, value: str) -> Self:
        self.options[key] = value
        return self

    def on_promote(self, callback: PromoteCallback) -> Self:
        self.promote_callback = callback
        return self

    def hash_payload(self) -> Any:
        return dict(sorted(self.options.items()))

    def execute(self, build: Build, result: BuildResult) -> None:
        build_path = build.build_path
        source_path = build.source.local_directory()

        self._setup(build, source_path)
        run_command(
            [self.meson, "compile", "-C", build_path],
            detail="failed to execute build",
        )
        installed = run_command(
            [self.meson, "install", "-C", build_path],
            detail="failed to install build",
        )
        manifest = parse_install_manifest(installed.stdout, stderr=installed.stderr)
        collect_libraries(manifest, result, log=build.log, step=self.name)

    def setup_command(self, build: Build, source_path: Path) -> list[str | Path]:
        build_path = build.build_path
        prefix = build.install_path
        argv: list[str | Path] = [
            self.meson,
            "setup",
            "--prefix",
            prefix,
            f"-Ddefault_library={_DEFAULT_LIBRARY[build.library_type]}",
        ]
        if (build_path / "meson-private" / "coredata.dat").exists():
            argv.append("--reconfigure")
        argv.extend(f"-D{key}={value}" for key, value in sorted(self.options.items()))
        argv.extend([build_path, source_path])
        return argv

    def _setup(self, build: Build, source_path: Path) -> None:
        rounds = 0
        while True:
            try:
                run_command(self.setup_command(build, source_path), detail="failed to setup build")
                return
            except BuildStepError as error:
                files = self._files_to_promote(error)
                if not files:
                    raise
                if rounds >= self.max_promote_rounds:
                    raise BuildStepError(
                        f"wrap promotion did not resolve setup after {rounds} rounds",
                        stdout=error.stdout,
                        stderr=error.stderr,
                        hint="Check the promote callback output against meson's request.",
                    ) from error
                rounds += 1
                for file in files:
                    build.log.info(
                        f"Promoting wrap file {file}",
                        operation="promote_wrap",
                        step=self.name,
                        round=rounds,
                    )
                    run_command(
                        [self.meson, "wrap", "promote", file],
                        detail=f"failed to execute promote command for {file}",
                        cwd=source_path,
                    )

    def _files_to_promote(self, error: BuildStepError) -> list[str]:
        line = next((line for line in error.stdout.splitlines() if PROMOTE_MARKER in line), None)
        if line is None or self.promote_callback is None:
            return []
        argument = line.split(PROMOTE_MARKER, 1)[1].strip()
        return list(self.promote_callback(argument))
