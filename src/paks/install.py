"""Skill installation.

``Installer.install`` turns a user-supplied source string into a skill
directory inside the resolved install directory:

1. Resolve the install directory (``--dir``, agent, default agent, system
   default).
2. Classify the source.
3. Fetch it (registry lookup + clone, clone, or local path), check for a
   SKILL.md, apply the existing-target policy and copy it into place.

Registry installs land in ``<install_dir>/<owner>--<name>``; git and
local installs in ``<install_dir>/<name>``.
"""

from __future__ import annotations

import contextlib
import logging
import tempfile
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import assert_never

from paks.config.settings import PaksSettings
from paks.config.user import UserConfig
from paks.errors import (
    ConfigurationError,
    InvalidSkillError,
    ReferenceParseError,
    SourceNotFoundError,
    TargetExistsError,
)
from paks.git import GitOps, SubprocessGit
from paks.materialize import copy_tree, remove_tree
from paks.registry.client import RegistryClient
from paks.registry.errors import RegistryAccessDeniedError, RegistryNotFoundError
from paks.skills.config import SKILL_FILE, Skill
from paks.skills.errors import SkillError
from paks.skills.loader import has_skill_file, load_skill
from paks.skills.validator import name_error
from paks.sources.classifier import (
    GitSource,
    LocalSource,
    RegistrySource,
    SourceDescriptor,
    detect_source_type,
)

logger = logging.getLogger(__name__)


class InstallStatus(str, Enum):
    """Outcome of an install."""

    INSTALLED = "installed"
    REINSTALLED = "reinstalled"
    ALREADY_INSTALLED = "already_installed"
    IN_PLACE = "in_place"


@dataclass
class InstallResult:
    """What an install did.

    Attributes:
        status: Outcome.
        name: Skill name (``owner/name`` for registry installs).
        version: Installed version, when known.
        target: Directory the skill lives in.
        source: Classified source.
    """

    status: InstallStatus
    name: str
    version: str | None
    target: Path
    source: SourceDescriptor


class Installer:
    """Installs skills from the registry, git repositories, or local paths.

    Args:
        config: Loaded user configuration (agents, registry, token).
        settings: Process settings (default skills directory, registry URL).
        git: Git implementation; ``SubprocessGit`` by default.
        registry: Registry client. When omitted, one is created for each
            registry install from ``config`` and ``settings``.
    """

    def __init__(
        self,
        config: UserConfig,
        settings: PaksSettings,
        *,
        git: GitOps | None = None,
        registry: RegistryClient | None = None,
    ) -> None:
        self.config = config
        self.settings = settings
        self.git = git if git is not None else SubprocessGit()
        self._registry = registry

    def install(
        self,
        source: str,
        *,
        agent: str | None = None,
        directory: str | Path | None = None,
        version: str | None = None,
        force: bool = False,
        cwd: Path | None = None,
    ) -> InstallResult:
        """Install ``source``.

        Args:
            source: Registry reference, git URL, or local path.
            agent: Agent whose skills directory to install into.
            directory: Explicit install directory; wins over ``agent``.
            version: Version for a registry reference without ``@version``.
            force: Replace an existing install.
            cwd: Directory relative local paths are resolved against.

        Raises:
            ReferenceParseError: Malformed registry reference, or ``version``
                conflicting with the reference's own version.
            SourceNotFoundError: Local path or clone sub-path does not exist.
            InvalidSkillError: Source has no SKILL.md.
            TargetExistsError: Target exists and ``force`` was not given.
            ConfigurationError: Local source and target directories overlap.
            RegistryError: Registry lookup failed.
            GitError: Clone failed.
            MaterializeError: Copy failed.
        """
        install_dir = self.config.resolve_install_dir(
            self.settings, directory=directory, agent=agent
        )
        descriptor = detect_source_type(source, cwd)
        logger.info("Installing %s into %s", source, install_dir)

        match descriptor:
            case RegistrySource():
                return self._install_registry(descriptor, install_dir, version, force)
            case GitSource():
                return self._install_git(descriptor, install_dir, force)
            case LocalSource():
                return self._install_local(descriptor, install_dir, force, cwd)
            case _:
                assert_never(descriptor)

    # ── registry ────────────────────────────────────────────────────

    def _install_registry(
        self,
        source: RegistrySource,
        install_dir: Path,
        version: str | None,
        force: bool,
    ) -> InstallResult:
        reference = source.reference
        if version is not None:
            if reference.version is not None and reference.version != version:
                raise ReferenceParseError(
                    f"Conflicting versions for {source.raw}: "
                    f"reference pins {reference.version} but --version is {version}",
                    input=source.raw,
                    field="version",
                )
            reference = reference.with_version(version)

        name = f"{reference.account}/{reference.name}"
        with self._registry_client() as client:
            try:
                info = client.get_install_info(reference.to_uri())
            except RegistryAccessDeniedError as exc:
                raise RegistryAccessDeniedError(
                    f"Access denied to {name}: {exc.message.rstrip('.')}. "
                    "If this is a private pak, run 'paks login' first.",
                    **exc.details,
                ) from exc
            except RegistryNotFoundError as exc:
                raise RegistryNotFoundError(
                    f"Pak {name} not found in the registry: {exc.message.rstrip('.')}. "
                    "Check the owner/name spelling, or use 'paks search'.",
                    **exc.details,
                ) from exc

        resolved_version = info.version.version
        target = install_dir / reference.disambiguator
        logger.info("Resolved %s to %s (tag %s)", reference, resolved_version, info.version.tag)

        status = InstallStatus.INSTALLED
        if _exists(target):
            installed_version = _installed_version(target)
            if not force:
                if _same_version(installed_version, resolved_version):
                    logger.info("%s %s already installed at %s", name, resolved_version, target)
                    return InstallResult(
                        status=InstallStatus.ALREADY_INSTALLED,
                        name=name,
                        version=resolved_version,
                        target=target,
                        source=source,
                    )
                raise TargetExistsError(
                    f"{name} {installed_version or '(unknown version)'} is already installed "
                    f"at {target}. Use --force to replace it with {resolved_version}.",
                    target=target,
                    installed_version=installed_version,
                    requested_version=resolved_version,
                )
            remove_tree(target)
            status = InstallStatus.REINSTALLED

        with self._checkout(
            info.repository.clone_url, info.version.tag, info.install.subpath
        ) as skill_dir:
            copy_tree(skill_dir, target)

        logger.info("Placed %s at %s", name, target)
        return InstallResult(
            status=status,
            name=name,
            version=resolved_version,
            target=target,
            source=source,
        )

    @contextlib.contextmanager
    def _registry_client(self) -> Iterator[RegistryClient]:
        if self._registry is not None:
            yield self._registry
            return
        with RegistryClient(
            self.config.registry_url(self.settings),
            token=self.config.get_auth_token(),
            timeout=self.settings.request_timeout,
        ) as client:
            yield client

    # ── git ─────────────────────────────────────────────────────────

    def _install_git(self, source: GitSource, install_dir: Path, force: bool) -> InstallResult:
        with self._checkout(source.url, source.ref, source.subpath) as skill_dir:
            skill = _load_source_skill(skill_dir)
            target = install_dir / skill.name
            status = _prepare_target(target, skill, force)
            copy_tree(skill_dir, target)

        logger.info("Placed %s at %s", skill.name, target)
        return InstallResult(
            status=status,
            name=skill.name,
            version=skill.version,
            target=target,
            source=source,
        )

    @contextlib.contextmanager
    def _checkout(self, url: str, ref: str | None, subpath: str | None) -> Iterator[Path]:
        """Clone into a temporary workspace and yield the skill directory.

        The workspace is deleted when the block exits, however it exits.
        """
        with tempfile.TemporaryDirectory(prefix="paks-") as workspace:
            checkout = self.git.clone_shallow(url, Path(workspace) / "repo", ref)
            logger.info("Fetched %s%s", url, f" at {ref}" if ref else "")

            skill_dir = checkout
            if subpath:
                skill_dir = checkout / subpath
                root = checkout.resolve()
                resolved = skill_dir.resolve()
                if resolved != root and root not in resolved.parents:
                    raise SourceNotFoundError(
                        f"Path '{subpath}' escapes the repository {url}",
                        source=f"{url}#path={subpath}",
                    )
                if not skill_dir.is_dir():
                    raise SourceNotFoundError(
                        f"Path '{subpath}' not found in {url}",
                        source=f"{url}#path={subpath}",
                    )

            if not has_skill_file(skill_dir):
                where = f"{url}#path={subpath}" if subpath else url
                raise InvalidSkillError(
                    f"Not a valid skill: no {SKILL_FILE} found in {where}",
                    path=where,
                )
            yield skill_dir

    # ── local ───────────────────────────────────────────────────────

    def _install_local(
        self,
        source: LocalSource,
        install_dir: Path,
        force: bool,
        cwd: Path | None,
    ) -> InstallResult:
        path = Path(source.path).expanduser()
        if not path.is_absolute():
            path = (cwd or Path.cwd()) / path
        path = path.resolve()

        if path.is_file() and path.name == SKILL_FILE:
            path = path.parent
        if not path.exists():
            raise SourceNotFoundError(f"Source not found: {source.path}", source=source.path)
        if not has_skill_file(path):
            raise InvalidSkillError(
                f"Not a valid skill: no {SKILL_FILE} found in {path}",
                path=path,
            )

        skill = _load_source_skill(path)
        target = install_dir / skill.name

        resolved_target = target.resolve()
        if resolved_target == path:
            logger.info("%s is already in place at %s", skill.name, target)
            return InstallResult(
                status=InstallStatus.IN_PLACE,
                name=skill.name,
                version=skill.version,
                target=target,
                source=source,
            )
        if resolved_target.is_relative_to(path):
            raise ConfigurationError(
                f"Cannot install {path} into {target}: the target is inside the source directory.",
                path=target,
            )
        if path.is_relative_to(resolved_target):
            raise ConfigurationError(
                f"Cannot install {path} into {target}: the source is inside the target directory.",
                path=target,
            )

        status = _prepare_target(target, skill, force)
        copy_tree(path, target)

        logger.info("Placed %s at %s", skill.name, target)
        return InstallResult(
            status=status,
            name=skill.name,
            version=skill.version,
            target=target,
            source=source,
        )


def _exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


def _same_version(installed: str | None, resolved: str) -> bool:
    if installed is None:
        return False
    return installed.removeprefix("v") == resolved.removeprefix("v")


def _installed_version(target: Path) -> str | None:
    try:
        return load_skill(target).version
    except SkillError as exc:
        logger.debug("Could not read installed skill at %s: %s", target, exc)
        return None


def _load_source_skill(skill_dir: Path) -> Skill:
    """Load the skill being installed; its name becomes a directory name."""
    skill = load_skill(skill_dir)
    problem = name_error(skill.name)
    if problem is not None:
        raise InvalidSkillError(
            f"Not a valid skill: {problem} (got '{skill.name}')",
            path=skill_dir,
        )
    return skill


def _prepare_target(target: Path, skill: Skill, force: bool) -> InstallStatus:
    """Existing-target policy for git and local installs.

    Without a registry version to compare against, any existing target
    needs ``force``.
    """
    if not _exists(target):
        return InstallStatus.INSTALLED
    if not force:
        raise TargetExistsError(
            f"Skill '{skill.name}' is already installed at {target}. Use --force to replace it.",
            target=target,
            installed_version=_installed_version(target),
            requested_version=skill.version,
        )
    remove_tree(target)
    return InstallStatus.REINSTALLED


# ── removal ─────────────────────────────────────────────────────────


def _candidates(name: str, skills_dir: Path) -> list[Path]:
    owner, sep, skill_name = name.partition("/")
    if sep:
        names = [f"{owner}--{skill_name}", skill_name]
    else:
        names = [name]
    # Only direct children of skills_dir.
    return [
        skills_dir / entry
        for entry in names
        if entry and "/" not in entry and "\\" not in entry and entry not in (".", "..")
    ]


def find_installed(name: str, skills_dir: Path) -> Path | None:
    """Installed directory for ``name`` (or ``owner/name``), if any."""
    for candidate in _candidates(name, skills_dir):
        if _exists(candidate):
            return candidate
    return None


def remove_installed(name: str, skills_dir: Path) -> Path:
    """Remove an installed skill and return the removed path.

    ``owner/name`` matches both ``<owner>--<name>`` and ``<name>``.

    Raises:
        SourceNotFoundError: If nothing matching is installed.
        MaterializeError: If removal fails.
    """
    target = find_installed(name, skills_dir)
    if target is None:
        raise SourceNotFoundError(
            f"Skill '{name}' is not installed in {skills_dir}",
            source=name,
        )
    remove_tree(target)
    logger.info("Removed %s", target)
    return target
