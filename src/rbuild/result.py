"""Build result accumulator and host linkage directives."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Any, TextIO

import cbor2


class LibraryType(StrEnum):
    """Linkage kind; values are the host's link-lib kind names."""

    STATIC = "static"
    SHARED = "dylib"


class LinkSearchKind(StrEnum):
    DEPENDENCY = "dependency"
    CRATE = "crate"
    NATIVE = "native"
    FRAMEWORK = "framework"
    ALL = "all"


STATIC_LIBRARY_EXTENSIONS = frozenset({"a", "lib"})
SHARED_LIBRARY_EXTENSIONS = frozenset({"so", "dll", "dylib"})
_LIBRARY_EXTENSIONS = STATIC_LIBRARY_EXTENSIONS | SHARED_LIBRARY_EXTENSIONS


@dataclass(frozen=True, slots=True)
class BuildLibrary:
    name: str
    kind: LibraryType | None = None

    @property
    def link_name(self) -> str:
        """Name as the linker expects it: ``libfoo.a`` becomes ``foo``."""
        path = Path(self.name)
        stem = path.stem if path.suffix.lstrip(".") in _LIBRARY_EXTENSIONS else path.name
        if stem.startswith("lib") and len(stem) > 3:
            return stem[3:]
        return stem

    def directive(self) -> str:
        if self.kind is None:
            return self.link_name
        return f"{self.kind}={self.link_name}"


@dataclass(frozen=True, slots=True)
class BuildLibraryPath:
    path: Path
    kind: LinkSearchKind = LinkSearchKind.ALL

    def directive(self) -> str:
        if self.kind is LinkSearchKind.ALL:
            return str(self.path)
        return f"{self.kind}={self.path}"


@dataclass(slots=True)
class BuildResult:
    libraries: list[BuildLibrary] = field(default_factory=list)
    library_paths: list[BuildLibraryPath] = field(default_factory=list)
    emits: list[str] = field(default_factory=list)

    def add_library(self, name: str, kind: LibraryType | None = None) -> BuildResult:
        self.libraries.append(BuildLibrary(name=name, kind=kind))
        return self

    def add_library_path(
        self,
        path: str | Path,
        kind: LinkSearchKind | None = None,
    ) -> BuildResult:
        entry = BuildLibraryPath(path=Path(path), kind=kind or LinkSearchKind.ALL)
        if entry not in self.library_paths:
            self.library_paths.append(entry)
        return self

    def add_emit(self, line: str) -> BuildResult:
        self.emits.append(line)
        return self

    def cargo_lines(self) -> list[str]:
        lines = [f"cargo:rustc-link-search={path.directive()}" for path in self.library_paths]
        lines.extend(f"cargo:rustc-link-lib={library.directive()}" for library in self.libraries)
        lines.extend(f"cargo:{emit}" for emit in self.emits)
        return lines

    def emit_cargo(self, stream: TextIO | None = None) -> None:
        out = sys.stdout if stream is None else stream
        for line in self.cargo_lines():
            print(line, file=out)

    def to_json(self, path: str | Path | None = None) -> str:
        encoded = json.dumps(self._payload(), indent=2, sort_keys=True) + "\n"
        if path is not None:
            Path(path).write_text(encoded, encoding="utf-8")
        return encoded

    def to_cbor(self, path: str | Path | None = None) -> bytes:
        encoded = cbor2.dumps(self._payload(), canonical=True)
        if path is not None:
            Path(path).write_bytes(encoded)
        return encoded

    def _payload(self) -> dict[str, Any]:
        return {
            "libraries": [
                {"name": library.name, "kind": library.kind.name.lower() if library.kind else None}
                for library in self.libraries
            ],
            "library_paths": [
                {"path": str(entry.path), "kind": str(entry.kind)} for entry in self.library_paths
            ],
            "emits": list(self.emits),
        }
