"""Build source implementations."""

from .base import BuildSource
from .directory import DirectorySource
from .git import GitProbe, GitSource, probe_git

__all__ = ["BuildSource", "DirectorySource", "GitProbe", "GitSource", "probe_git"]
