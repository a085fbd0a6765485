"""Test doubles for the install and publish pipelines.

``FakeGit`` keeps repository state in memory and implements ``GitOps``;
its clone copies a directory registered with ``add_remote_tree``.
``ScriptedPrompter`` answers prompts from queues and records every
question asked.

Example::

    git = FakeGit(remote="https://github.com/acme/skills.git", tags=["v0.1.0"])
    prompter = ScriptedPrompter(confirms=[True], selects=[0])
    Publisher(config, git=git, prompter=prompter).publish(skill_dir)
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from paks.errors import GitError, GitStateError
from paks.materialize import copy_tree
from paks.versioning import is_semver_tag, parse_version


@dataclass
class FakeGit:
    """In-memory ``GitOps``.

    Attributes:
        repo: Whether paths are inside a repository.
        remote: URL of ``origin`` (``None`` means no remote).
        branch: Current branch (``None`` means detached HEAD).
        tags: Existing tags.
        relative_path: Value of ``path_relative_to_repo_root``.
        changes: Porcelain lines returned by ``uncommitted_changes``.
        remote_trees: ``(url, ref)`` to directory copied on clone.
        fail_push: Make ``push_tag`` raise ``GitError``.
    """

    repo: bool = True
    remote: str | None = "https://github.com/acme/skills.git"
    branch: str | None = "main"
    tags: list[str] = field(default_factory=list)
    relative_path: str = "."
    changes: list[str] = field(default_factory=list)
    remote_trees: dict[tuple[str, str | None], Path] = field(default_factory=dict)
    fail_push: bool = False

    created_tags: list[tuple[str, str]] = field(default_factory=list)
    pushed_tags: list[tuple[str, str]] = field(default_factory=list)
    commits: list[tuple[list[Path], str]] = field(default_factory=list)
    clones: list[tuple[str, str | None, Path]] = field(default_factory=list)

    def add_remote_tree(self, url: str, source: Path, ref: str | None = None) -> None:
        """Serve ``source`` when ``url`` is cloned at ``ref``."""
        self.remote_trees[(url, ref)] = source

    # -- GitOps ----------------------------------------------------------

    def clone_shallow(self, url: str, dest: Path, ref: str | None = None) -> Path:
        source = self.remote_trees.get((url, ref))
        if source is None:
            raise GitError(
                f"git clone {url} failed: remote ref {ref or 'HEAD'} not found",
                command=f"git clone {url}",
                returncode=128,
            )
        copy_tree(source, dest)
        self.clones.append((url, ref, dest))
        return dest

    def is_repo(self, path: Path) -> bool:
        return self.repo

    def remote_url(self, path: Path, remote: str) -> str:
        if self.remote is None:
            raise GitError(
                f"git remote get-url {remote} failed: No such remote '{remote}'",
                command=f"git remote get-url {remote}",
                returncode=2,
            )
        return self.remote

    def current_branch(self, path: Path) -> str:
        if self.branch is None:
            raise GitStateError("Detached HEAD. Checkout a branch first.", path=path)
        return self.branch

    def tag_exists(self, path: Path, tag: str) -> bool:
        return tag in self.tags

    def list_tags(self, path: Path) -> list[str]:
        semver = sorted(
            (t for t in self.tags if is_semver_tag(t)),
            key=parse_version,
            reverse=True,
        )
        others = sorted((t for t in self.tags if not is_semver_tag(t)), reverse=True)
        return semver + others

    def create_annotated_tag(self, path: Path, tag: str, message: str) -> None:
        if tag in self.tags:
            raise GitError(f"git tag -a {tag} failed: tag '{tag}' already exists", returncode=128)
        self.tags.append(tag)
        self.created_tags.append((tag, message))

    def push_tag(self, path: Path, remote: str, tag: str) -> None:
        if self.fail_push:
            raise GitError(f"git push {remote} failed: permission denied", returncode=128)
        self.pushed_tags.append((remote, tag))

    def path_relative_to_repo_root(self, path: Path) -> str:
        return self.relative_path

    def uncommitted_changes(self, path: Path) -> list[str]:
        return list(self.changes)

    def commit_paths(self, path: Path, paths: Sequence[Path], message: str) -> None:
        self.commits.append((list(paths), message))


class ScriptedPrompter:
    """Answers prompts from pre-loaded queues.

    Raises ``LookupError`` when a prompt has no scripted answer, so a test
    fails on any unexpected question.
    """

    def __init__(
        self,
        *,
        confirms: Iterable[bool] = (),
        selects: Iterable[int] = (),
        texts: Iterable[str] = (),
    ) -> None:
        self._confirms = list(confirms)
        self._selects = list(selects)
        self._texts = list(texts)
        self.asked: list[str] = []
        self.notices: list[str] = []
        self.choices: list[list[str]] = []

    def notify(self, message: str) -> None:
        self.notices.append(message)

    def confirm(self, message: str, *, default: bool = False) -> bool:
        self.asked.append(message)
        if not self._confirms:
            raise LookupError(f"No scripted answer for confirm: {message}")
        return self._confirms.pop(0)

    def select(self, message: str, choices: Sequence[str], *, default: int = 0) -> int:
        self.asked.append(message)
        self.choices.append(list(choices))
        if not self._selects:
            raise LookupError(f"No scripted answer for select: {message}")
        return self._selects.pop(0)

    def text(self, message: str) -> str:
        self.asked.append(message)
        if not self._texts:
            raise LookupError(f"No scripted answer for text: {message}")
        return self._texts.pop(0)
