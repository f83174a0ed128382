"""Repository acquisition: local checkouts and shallow GitHub clones."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional, Tuple

from ..logging import get_logger
from ..models import RepoIdentity

DEFAULT_CLONE_DIR = Path(tempfile.gettempdir()) / "knowledge-extractor"

_GITHUB_URL = re.compile(r"github\.com[/:]([\w.-]+)/([\w.-]+?)(?:\.git)?/?$")
_SHORTHAND = re.compile(r"^([\w.-]+)/([\w.-]+)$")


class AcquisitionError(RuntimeError):
    """Raised when a repository identifier cannot be resolved or cloned."""


@dataclass(frozen=True)
class AcquiredRepo:
    """A materialised repository ready for extraction."""

    root: Path
    identity: RepoIdentity
    cloned: bool = False


def parse_repo_identifier(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(owner, name)`` for a GitHub URL or ``owner/name`` shorthand."""
    candidate = text.strip()
    match = _GITHUB_URL.search(candidate)
    if match:
        return match.group(1), match.group(2)
    match = _SHORTHAND.match(candidate)
    if match:
        return match.group(1), match.group(2)
    return None


def is_local_repo(text: str) -> bool:
    try:
        return Path(text).expanduser().is_dir()
    except OSError:
        return False


class RepoAcquirer:
    """Resolves identifiers to directories, cloning remote repositories on demand."""

    def __init__(
        self,
        runner: Callable[..., str] | None = None,
        *,
        clone_dir: Path | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._runner = runner or self._default_runner
        self.clone_dir = clone_dir or DEFAULT_CLONE_DIR
        self.logger = logger or get_logger("git")

    def acquire(self, identifier: str) -> AcquiredRepo:
        if is_local_repo(identifier):
            root = Path(identifier).expanduser().resolve()
            self.logger.info("Using local repo: %s", root)
            return AcquiredRepo(root=root, identity=self.identity_for_path(root))
        return self.clone(identifier)

    def clone(self, identifier: str) -> AcquiredRepo:
        """Shallow clone a GitHub repository into the clone directory."""
        parsed = parse_repo_identifier(identifier)
        if parsed is None:
            raise AcquisitionError(
                f"Cannot parse GitHub repo: {identifier}. Use a URL or owner/repo shorthand."
            )
        owner, name = parsed
        target = self.clone_dir / f"{owner}--{name}"
        self.clone_dir.mkdir(parents=True, exist_ok=True)
        if target.exists():
            shutil.rmtree(target)

        if self._has_gh_cli():
            self.logger.info("Cloning %s/%s with the GitHub CLI", owner, name)
            args = ["gh", "repo", "clone", f"{owner}/{name}", str(target), "--", "--depth", "1", "--single-branch"]
        else:
            self.logger.info("Cloning %s/%s with git (private repos may fail)", owner, name)
            args = [
                "git",
                "clone",
                "--depth",
                "1",
                "--single-branch",
                f"https://github.com/{owner}/{name}",
                str(target),
            ]
        try:
            self._run(args, cwd=self.clone_dir, capture_output=True)
        except (OSError, subprocess.CalledProcessError) as exc:
            raise AcquisitionError(f"Failed to clone {owner}/{name}: {_describe(exc)}") from exc

        identity = RepoIdentity(
            owner=owner,
            name=name,
            url=f"https://github.com/{owner}/{name}",
            ref=self._current_branch(target) or "main",
        )
        return AcquiredRepo(root=target, identity=identity, cloned=True)

    def identity_for_path(self, root: Path) -> RepoIdentity:
        """Derive owner/name/url for a local checkout from its origin remote."""
        try:
            remote = self._run(["git", "remote", "get-url", "origin"], cwd=root, capture_output=True).strip()
        except (OSError, subprocess.CalledProcessError):
            return RepoIdentity(owner="local", name=root.name, url="")

        ref = self._current_branch(root) or "main"
        parsed = parse_repo_identifier(remote) if remote else None
        if parsed is not None:
            owner, name = parsed
            return RepoIdentity(owner=owner, name=name, url=f"https://github.com/{owner}/{name}", ref=ref)
        if not remote:
            return RepoIdentity(owner="local", name=root.name, url="")
        return RepoIdentity(owner="unknown", name=root.name, url=remote, ref=ref)

    def _current_branch(self, root: Path) -> Optional[str]:
        try:
            branch = self._run(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=root, capture_output=True).strip()
        except (OSError, subprocess.CalledProcessError):
            return None
        if not branch or branch == "HEAD":
            return None
        return branch

    def _has_gh_cli(self) -> bool:
        try:
            self._run(["gh", "auth", "status"], cwd=self.clone_dir, capture_output=True)
        except (OSError, subprocess.CalledProcessError):
            return False
        return True

    def _run(
        self,
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        return self._runner(args, cwd=cwd, capture_output=capture_output)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        cwd: Path,
        capture_output: bool = False,
    ) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=capture_output,
        )
        return completed.stdout if capture_output else ""


def repo_identity_for_path(root: str | Path, runner: Callable[..., str] | None = None) -> RepoIdentity:
    return RepoAcquirer(runner).identity_for_path(Path(root))


def _describe(exc: BaseException) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        stderr = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
        return stderr or f"exit status {exc.returncode}"
    return str(exc)


__all__ = [
    "AcquiredRepo",
    "AcquisitionError",
    "DEFAULT_CLONE_DIR",
    "RepoAcquirer",
    "is_local_repo",
    "parse_repo_identifier",
    "repo_identity_for_path",
]
