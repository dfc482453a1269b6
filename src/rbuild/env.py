"""Environment-variable configuration lookup.

Every setting follows the same two-tier pattern: a per-build variable
``rbuild_<name>_<setting>`` wins over the general ``rbuild_<setting>``.
Path settings additionally fall back to the host-provided ``OUT_DIR``.

All helpers take the environment as a mapping so callers and tests can pass
their own instead of ``os.environ``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from rbuild.errors import BuildCreateError
from rbuild.result import LibraryType

ENV_PREFIX = "rbuild"
HOST_OUTPUT_DIR = "OUT_DIR"

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


def lookup(
    build_name: str,
    setting: str,
    environ: Mapping[str, str] | None = None,
) -> tuple[str, str] | None:
    """Return ``(variable, value)`` of the first non-empty variable for *setting*."""
    env = os.environ if environ is None else environ
    for variable in (f"{ENV_PREFIX}_{build_name}_{setting}", f"{ENV_PREFIX}_{setting}"):
        value = env.get(variable)
        if value:
            return variable, value
    return None


def parse_library_type(value: str) -> LibraryType | None:
    match value.strip().lower():
        case "static":
            return LibraryType.STATIC
        case "shared":
            return LibraryType.SHARED
    return None


def library_type_from_env(
    build_name: str,
    environ: Mapping[str, str] | None = None,
) -> LibraryType | None:
    found = lookup(build_name, "library_type", environ)
    if found is None:
        return None
    variable, value = found
    library_type = parse_library_type(value)
    if library_type is None:
        raise BuildCreateError(
            "Invalid library type in environment.",
            hint="Use `static` or `shared`.",
            context={"variable": variable, "value": value},
        )
    return library_type


def install_prefix_from_env(
    build_name: str,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    return _path_setting(build_name, "install_prefix", environ)


def build_dir_from_env(
    build_name: str,
    environ: Mapping[str, str] | None = None,
) -> Path | None:
    return _path_setting(build_name, "build_path", environ)


def remove_build_dir_from_env(
    build_name: str,
    environ: Mapping[str, str] | None = None,
) -> bool | None:
    found = lookup(build_name, "remove_build_dir", environ)
    if found is None:
        return None
    variable, value = found
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise BuildCreateError(
        "Invalid boolean in environment.",
        hint="Use one of 1/0, true/false, yes/no, on/off.",
        context={"variable": variable, "value": value},
    )


def host_output_dir(environ: Mapping[str, str] | None = None) -> Path | None:
    env = os.environ if environ is None else environ
    value = env.get(HOST_OUTPUT_DIR)
    return Path(value) if value else None


def _path_setting(
    build_name: str,
    setting: str,
    environ: Mapping[str, str] | None,
) -> Path | None:
    found = lookup(build_name, setting, environ)
    if found is not None:
        return Path(found[1])
    return host_output_dir(environ)
