"""Git working-tree operations.

Pipelines depend on the ``GitOps`` protocol; ``SubprocessGit`` implements
it by running the ``git`` executable. Every operation that changes or
queries repository state raises ``GitError`` with git's stderr attached
when the command fails.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from paks.errors import GitError, GitStateError

logger = logging.getLogger(__name__)


@runtime_checkable
class GitOps(Protocol):
    """Version-control operations used by the install and publish pipelines."""

    def clone_shallow(self, url: str, dest: Path, ref: str | None = None) -> Path:
        """Clone ``url`` at depth 1 into ``dest``, checking out ``ref`` if given."""
        ...

    def is_repo(self, path: Path) -> bool: ...

    def remote_url(self, path: Path, remote: str) -> str: ...

    def current_branch(self, path: Path) -> str:
        """Current branch name; raises ``GitStateError`` on a detached HEAD."""
        ...

    def tag_exists(self, path: Path, tag: str) -> bool: ...

    def list_tags(self, path: Path) -> list[str]:
        """Tags sorted newest version first."""
        ...

    def create_annotated_tag(self, path: Path, tag: str, message: str) -> None: ...

    def push_tag(self, path: Path, remote: str, tag: str) -> None: ...

    def path_relative_to_repo_root(self, path: Path) -> str:
        """``"."`` for the repository root, otherwise a relative POSIX path."""
        ...

    def uncommitted_changes(self, path: Path) -> list[str]:
        """Staged, unstaged and untracked changes under ``path``."""
        ...

    def commit_paths(self, path: Path, paths: Sequence[Path], message: str) -> None:
        """Commit only ``paths`` (other staged changes are left alone)."""
        ...


class SubprocessGit:
    """``GitOps`` backed by the ``git`` command line tool.

    Args:
        executable: Name or path of the git binary.
    """

    def __init__(self, executable: str = "git") -> None:
        self.executable = executable

    def run(self, args: Sequence[str], cwd: Path | None = None) -> str:
        """Run ``git <args>`` and return stdout without trailing whitespace.

        Raises:
            GitError: If git is missing or exits non-zero.
        """
        command = [self.executable, *args]
        display = "git " + " ".join(args)
        logger.debug("Running %s (cwd=%s)", display, cwd)

        try:
            completed = subprocess.run(
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise GitError(
                f"{display} failed: git executable '{self.executable}' not found",
                cause=exc,
                command=display,
            ) from exc
        except OSError as exc:
            raise GitError(f"{display} failed: {exc}", cause=exc, command=display) from exc

        if completed.returncode != 0:
            stderr = completed.stderr.strip()
            raise GitError(
                f"{display} failed: {stderr or f'exit status {completed.returncode}'}",
                command=display,
                returncode=completed.returncode,
                stderr=stderr,
            )

        return completed.stdout.rstrip()

    def clone_shallow(self, url: str, dest: Path, ref: str | None = None) -> Path:
        args = ["clone", "--depth", "1", "--single-branch"]
        if ref:
            args.extend(["--branch", ref])
        args.extend([url, str(dest)])
        self.run(args)
        return dest

    def is_repo(self, path: Path) -> bool:
        try:
            return self.run(["rev-parse", "--is-inside-work-tree"], cwd=path) == "true"
        except GitError:
            return False

    def remote_url(self, path: Path, remote: str) -> str:
        return self.run(["remote", "get-url", remote], cwd=path)

    def current_branch(self, path: Path) -> str:
        branch = self.run(["rev-parse", "--abbrev-ref", "HEAD"], cwd=path)
        if branch == "HEAD":
            raise GitStateError("Detached HEAD. Checkout a branch first.", path=path)
        return branch

    def tag_exists(self, path: Path, tag: str) -> bool:
        return bool(self.run(["tag", "--list", tag], cwd=path))

    def list_tags(self, path: Path) -> list[str]:
        output = self.run(["tag", "--list", "--sort=-v:refname"], cwd=path)
        return [line for line in output.splitlines() if line]

    def create_annotated_tag(self, path: Path, tag: str, message: str) -> None:
        self.run(["tag", "-a", tag, "-m", message], cwd=path)

    def push_tag(self, path: Path, remote: str, tag: str) -> None:
        self.run(["push", remote, f"refs/tags/{tag}"], cwd=path)

    def path_relative_to_repo_root(self, path: Path) -> str:
        root = Path(self.run(["rev-parse", "--show-toplevel"], cwd=path)).resolve()
        target = path.resolve()
        try:
            relative = target.relative_to(root)
        except ValueError as exc:
            raise GitStateError(
                f"{target} is not inside repository {root}",
                cause=exc,
                path=target,
            ) from exc
        text = relative.as_posix()
        return "." if text in ("", ".") else text

    def uncommitted_changes(self, path: Path) -> list[str]:
        output = self.run(
            ["status", "--porcelain", "--untracked-files=all", "--", "."],
            cwd=path,
        )
        return [line for line in output.splitlines() if line.strip()]

    def commit_paths(self, path: Path, paths: Sequence[Path], message: str) -> None:
        relative = [str(p.resolve().relative_to(path.resolve())) for p in paths]
        self.run(["add", "--", *relative], cwd=path)
        self.run(["commit", "-m", message, "--", *relative], cwd=path)
