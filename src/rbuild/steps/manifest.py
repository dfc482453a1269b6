"""Install manifest parsing.

meson reports every installed file as ``Installing <source> to <target>``.
"""

from __future__ import annotations

from pathlib import Path

from rbuild.errors import ManifestParseError
from rbuild.observability import BuildLog
from rbuild.result import (
    SHARED_LIBRARY_EXTENSIONS,
    STATIC_LIBRARY_EXTENSIONS,
    BuildResult,
    LibraryType,
    LinkSearchKind,
)

INSTALL_MARKER = "Installing "
TARGET_SEPARATOR = " to "


def parse_install_manifest(stdout: str, *, stderr: str = "") -> dict[str, str]:
    """Map installed source paths to their targets; the last entry for a source wins."""
    installed: dict[str, str] = {}
    for full_line in stdout.splitlines():
        if not full_line.startswith(INSTALL_MARKER):
            continue
        elements = full_line[len(INSTALL_MARKER) :].split(TARGET_SEPARATOR)
        if len(elements) > 2:
            raise ManifestParseError(
                f'Meson line "{full_line}" contains more than one "{TARGET_SEPARATOR}" parts.',
                line=full_line,
                stdout=stdout,
                stderr=stderr,
            )
        if len(elements) < 2 or not elements[0] or not elements[1]:
            raise ManifestParseError(
                f'Meson line "{full_line}" misses the key or value.',
                line=full_line,
                stdout=stdout,
                stderr=stderr,
            )
        installed[elements[0]] = elements[1]
    return installed


def library_type_for(path: Path) -> LibraryType | None:
    extension = path.suffix.lstrip(".")
    if extension in STATIC_LIBRARY_EXTENSIONS:
        return LibraryType.STATIC
    if extension in SHARED_LIBRARY_EXTENSIONS:
        return LibraryType.SHARED
    return None


def collect_libraries(
    installed: dict[str, str],
    result: BuildResult,
    *,
    log: BuildLog | None = None,
    step: str | None = None,
) -> None:
    """Record installed libraries and their directories into *result*."""
    for source_raw, target_raw in installed.items():
        source = Path(source_raw)
        kind = library_type_for(source)
        if kind is None:
            continue
        target = Path(target_raw)
        if not target.is_dir():
            if log is not None:
                log.warning(
                    f'meson printed install for file "{source}" to "{target}", '
                    "but target isn't a directory.",
                    operation="collect_libraries",
                    step=step,
                )
            continue
        result.add_library(source.name, kind)
        result.add_library_path(target, LinkSearchKind.NATIVE)
