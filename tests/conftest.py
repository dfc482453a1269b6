"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

Handler = Callable[[list[str], Path | None], tuple[int, str, str]]


@dataclass
class FakeCompleted:
    returncode: int
    stdout: str
    stderr: str


@dataclass
class FakeRun:
    """Stand-in for ``subprocess.run`` that records every invocation."""

    handler: Handler = field(default=lambda argv, cwd: (0, "", ""))
    calls: list[tuple[list[str], Path | None]] = field(default_factory=list)

    def __call__(self, argv: list[str], *args: Any, cwd: Any = None, **kwargs: Any) -> FakeCompleted:
        cwd_path = Path(cwd) if cwd is not None else None
        self.calls.append((list(argv), cwd_path))
        returncode, stdout, stderr = self.handler(list(argv), cwd_path)
        return FakeCompleted(returncode=returncode, stdout=stdout, stderr=stderr)

    def commands(self) -> list[list[str]]:
        return [argv for argv, _ in self.calls]


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch) -> FakeRun:
    """Replace subprocess execution for build tools with a scripted fake."""
    fake = FakeRun()
    monkeypatch.setattr("rbuild.process.subprocess.run", fake)
    return fake


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    (path / "meson.build").write_text("project('demo', 'c')\n", encoding="utf-8")
    return path
