"""Build step implementations."""

from .base import BuildStep
from .manifest import collect_libraries, parse_install_manifest
from .meson import MesonBuild

__all__ = ["BuildStep", "MesonBuild", "collect_libraries", "parse_install_manifest"]
