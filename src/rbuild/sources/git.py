"""Remote git repository source with a reusable checkout directory."""

from __future__ import annotations

import re
import shutil
import subprocess
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from rbuild.errors import BuildStepError
from rbuild.keys import hash_token, identity_hash
from rbuild.observability import BuildLog
from rbuild.paths import TemporaryPath, create_temporary_path, default_base_dir
from rbuild.process import run_command
from rbuild.sources.base import SOURCE_SETUP_STEP

GitStatus = Literal["ok", "not_found", "unknown"]

VERSION_PATTERN = re.compile(r"^git version (\d+\.\d+\S*)")
NOT_A_REPOSITORY = "not a git repository"


@dataclass(frozen=True, slots=True)
class GitProbe:
    """Outcome of probing the git binary with ``--version``."""

    status: GitStatus
    executable: str = "git"
    version: str | None = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    def ensure_usable(self) -> None:
        if self.ok:
            return
        raise BuildStepError(
            f"git error: {self.status}",
            stderr=self.detail,
            hint="Install git and ensure it is available in PATH.",
            context={"executable": self.executable},
        )


def probe_git(executable: str = "git") -> GitProbe:
    try:
        completed = subprocess.run(
            [executable, "--version"],
            check=False,
            text=True,
            capture_output=True,
        )
    except FileNotFoundError:
        return GitProbe(status="not_found", executable=executable)
    except OSError as exc:
        return GitProbe(status="unknown", executable=executable, detail=str(exc))

    lines = (completed.stdout or "").splitlines()
    first_line = lines[0].strip() if lines else ""
    match = VERSION_PATTERN.match(first_line)
    if completed.returncode != 0 or match is None:
        return GitProbe(
            status="unknown",
            executable=executable,
            detail=first_line or "truncated git version output",
        )
    return GitProbe(status="ok", executable=executable, version=match.group(1))


class GitSource:
    """Source checked out from a git repository.

    The checkout lives in ``git_<project>_<token>`` under *checkout_folder*
    (else ``OUT_DIR``, else the temp directory) and is kept across runs so a
    later setup only fetches.
    """

    name = "remote git repository"

    def __init__(
        self,
        repository_url: str,
        *,
        revision: str | None = None,
        checkout_folder: str | Path | None = None,
        skip_revision_checkout: bool = False,
        checkout_submodules: bool = False,
        git_probe: GitProbe | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.repository_url = repository_url
        self.revision = revision
        self.checkout_folder = Path(checkout_folder) if checkout_folder is not None else None
        self.skip_revision_checkout = skip_revision_checkout
        self.checkout_submodules = checkout_submodules
        self._git_probe = git_probe
        self._environ = environ
        self._setup_called = False
        self._checkout: TemporaryPath | None = None

    def hash_payload(self) -> Any:
        return {"kind": "git", "url": self.repository_url, "revision": self.revision}

    def checkout_name(self) -> str:
        token = hash_token(identity_hash({"url": self.repository_url, "revision": self.revision}))
        project = self.repository_url.rstrip("/").split("/")[-1] or "__unknown"
        return f"git_{project}_{token}"

    def setup(self, log: BuildLog | None = None) -> None:
        if self._setup_called:
            raise BuildStepError("the source has already been initialized")
        self._setup_called = True

        probe = self._git_probe if self._git_probe is not None else probe_git()
        probe.ensure_usable()

        base = self.checkout_folder or default_base_dir(self._environ)
        preexisting = (base / self.checkout_name()).exists()
        try:
            checkout = create_temporary_path(self.checkout_name(), base)
        except OSError as exc:
            raise BuildStepError.from_io("failed to create git checkout directory", exc) from exc
        if preexisting:
            checkout.release()

        try:
            self._populate(probe.executable, checkout.path, log or BuildLog())
        except BuildStepError:
            checkout.close()
            raise
        checkout.release()
        self._checkout = checkout

    def local_directory(self) -> Path:
        if self._checkout is None:
            raise BuildStepError("the git source has not been set up")
        return self._checkout.path

    def cleanup(self) -> None:
        if self._checkout is not None:
            self._checkout.release()
            self._checkout.close()
            self._checkout = None

    def _populate(self, git: str, target: Path, log: BuildLog) -> None:
        repository_exists = False
        if (target / ".git").exists():
            log.info(
                f"Updating existing repository ({target})",
                operation="git_fetch",
                step=SOURCE_SETUP_STEP,
            )
            try:
                run_command([git, "fetch"], detail="git fetch failed", cwd=target)
                repository_exists = True
            except BuildStepError as exc:
                if NOT_A_REPOSITORY not in exc.stderr:
                    raise
                self._recreate(target)

        if not repository_exists:
            log.info(
                f"Cloning git repository {self.repository_url}",
                operation="git_clone",
                step=SOURCE_SETUP_STEP,
            )
            argv = [git, "clone"]
            if self.checkout_submodules:
                argv.append("--recurse-submodules")
            run_command([*argv, self.repository_url, target], detail="git clone failed")

        if not self.skip_revision_checkout:
            revision = self.revision or "HEAD"
            log.info(
                f"Checking out revision {revision}",
                operation="git_checkout",
                step=SOURCE_SETUP_STEP,
                revision=revision,
            )
            run_command(
                [git, "reset", "--hard", revision],
                detail="git revision checkout failed",
                cwd=target,
            )
            if self.checkout_submodules:
                run_command(
                    [git, "submodule", "update", "--init", "--recursive"],
                    detail="git submodule update failed",
                    cwd=target,
                )

    @staticmethod
    def _recreate(target: Path) -> None:
        try:
            shutil.rmtree(target)
        except OSError as exc:
            raise BuildStepError.from_io(
                "failed to remove old temporary checkout directory", exc
            ) from exc
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise BuildStepError.from_io(
                "failed to create new temporary checkout directory", exc
            ) from exc
