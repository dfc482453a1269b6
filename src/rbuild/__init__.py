"""Public package entrypoint for rbuild, a build orchestration helper."""

from .build import Build, BuildConfig
from .errors import (
    BuildCreateError,
    BuildError,
    BuildStepError,
    ErrorCode,
    ManifestParseError,
    RbuildError,
)
from .observability import BuildLog
from .paths import TemporaryPath, create_temporary_path
from .result import BuildLibrary, BuildLibraryPath, BuildResult, LibraryType, LinkSearchKind
from .sources import BuildSource, DirectorySource, GitProbe, GitSource, probe_git
from .steps import BuildStep, MesonBuild

__all__ = [
    "Build",
    "BuildConfig",
    "BuildCreateError",
    "BuildError",
    "BuildLibrary",
    "BuildLibraryPath",
    "BuildLog",
    "BuildResult",
    "BuildSource",
    "BuildStep",
    "BuildStepError",
    "DirectorySource",
    "ErrorCode",
    "GitProbe",
    "GitSource",
    "LibraryType",
    "LinkSearchKind",
    "ManifestParseError",
    "MesonBuild",
    "RbuildError",
    "TemporaryPath",
    "create_temporary_path",
    "probe_git",
]
