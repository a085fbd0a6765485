"""Publishing a skill as a tagged release.

The pipeline, in order:

1. Load SKILL.md and validate it (unless skipped).
2. Check the git repository: ``origin`` remote, current branch, and the
   skill's path relative to the repository root.
3. Confirm uncommitted changes under the skill directory.
4. Select the tag: an explicit existing tag, a deterministic bump when
   running non-interactively, or an interactive choice.
5. Stop here on a dry run.
6. Confirm, sync ``metadata.version``, create and push the tag.
7. Register the release with the registry.

Prompting goes through a ``Prompter`` so the same state machine runs in
the terminal and in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Protocol

from paks.config.settings import PaksSettings
from paks.config.user import UserConfig
from paks.errors import (
    ConfigurationError,
    GitError,
    GitStateError,
    TagExistsError,
    TagNotFoundError,
    VersionParseError,
)
from paks.git import GitOps, SubprocessGit
from paks.registry.client import RegistryClient
from paks.registry.errors import AuthenticationError
from paks.registry.models import PublishRequest
from paks.skills.config import Skill
from paks.skills.errors import SkillValidationError
from paks.skills.loader import load_skill, save_skill
from paks.skills.validator import validate_skill
from paks.versioning import (
    BumpLevel,
    bump_tag,
    filter_semver_tags,
    next_patch_tag,
    normalize_tag,
    parse_version,
)

logger = logging.getLogger(__name__)

REMOTE = "origin"
_MAX_LISTED_CHANGES = 10


class Prompter(Protocol):
    """Renders questions for the publish pipeline."""

    def notify(self, message: str) -> None: ...

    def confirm(self, message: str, *, default: bool = False) -> bool: ...

    def select(self, message: str, choices: Sequence[str], *, default: int = 0) -> int:
        """Return the index of the chosen entry."""
        ...

    def text(self, message: str) -> str: ...


class ChoiceKind(str, Enum):
    BUMP = "bump"
    EXISTING = "existing"
    CUSTOM = "custom"


@dataclass(frozen=True)
class TagChoice:
    """One entry of the interactive version menu.

    Attributes:
        label: Text shown to the user.
        kind: Bump preview, existing tag, or custom entry.
        tag: Tag the entry selects (``None`` for custom entry).
    """

    label: str
    kind: ChoiceKind
    tag: str | None = None

    @property
    def creates_tag(self) -> bool:
        return self.kind is not ChoiceKind.EXISTING


def build_tag_choices(current_version: str | None, existing_tags: Sequence[str]) -> list[TagChoice]:
    """Interactive version menu.

    Patch, minor and major previews come first when ``current_version``
    parses, then one entry per existing semver tag, then custom entry.
    """
    choices: list[TagChoice] = []

    if current_version is not None:
        try:
            version = parse_version(current_version)
        except VersionParseError:
            logger.debug("Current version %r is not semver; no bump choices", current_version)
        else:
            for level, label in (
                (BumpLevel.PATCH, "Patch"),
                (BumpLevel.MINOR, "Minor"),
                (BumpLevel.MAJOR, "Major"),
            ):
                tag = version.bump(level).to_tag()
                choices.append(TagChoice(f"{label:<6} -> {tag}", ChoiceKind.BUMP, tag))

    for tag in filter_semver_tags(existing_tags):
        choices.append(TagChoice(f"Use existing: {tag}", ChoiceKind.EXISTING, tag))

    choices.append(TagChoice("Enter custom version...", ChoiceKind.CUSTOM))
    return choices


@dataclass
class PublishOptions:
    """Flags controlling a publish run.

    Attributes:
        skip_validation: Do not validate SKILL.md.
        strict: Treat validation warnings as errors.
        dry_run: Compute the plan and stop.
        yes: Non-interactive; assume yes to every confirmation.
        tag: Existing tag to register instead of creating one.
        bump: Bump level for a new tag; skips the version menu.
        sync_version: Write the tag's version into SKILL.md before tagging.
    """

    skip_validation: bool = False
    strict: bool = False
    dry_run: bool = False
    yes: bool = False
    tag: str | None = None
    bump: BumpLevel | None = None
    sync_version: bool = True


@dataclass
class PublishPlan:
    """What a publish run will do (or did)."""

    skill_name: str
    repository: str
    branch: str
    path: str
    tag: str
    create_tag: bool
    warnings: list[str] = field(default_factory=list)

    def to_request(self) -> PublishRequest:
        return PublishRequest(
            repository=self.repository,
            branch=self.branch,
            tag=self.tag,
            path=None if self.path == "." else self.path,
        )


@dataclass
class PublishResult:
    """Outcome of a publish run.

    ``plan`` is ``None`` only when the run was aborted before a tag was
    selected.
    """

    plan: PublishPlan | None
    registered: bool = False
    dry_run: bool = False
    aborted: bool = False
    synced_version: str | None = None


RegistryFactory = Callable[[str], RegistryClient]


class Publisher:
    """Runs the publish pipeline.

    Args:
        config: Loaded user configuration; provides the auth token.
        git: Git implementation; ``SubprocessGit`` by default.
        prompter: Interactive prompts. Required unless ``options.yes``.
        registry_factory: Builds a registry client from a token.
        settings: Used by the default registry factory.
    """

    def __init__(
        self,
        config: UserConfig,
        *,
        git: GitOps | None = None,
        prompter: Prompter | None = None,
        registry_factory: RegistryFactory | None = None,
        settings: PaksSettings | None = None,
    ) -> None:
        self.config = config
        self.git = git if git is not None else SubprocessGit()
        self.prompter = prompter
        self._settings = settings
        self._registry_factory = registry_factory or self._default_registry

    def _default_registry(self, token: str) -> RegistryClient:
        settings = self._settings or PaksSettings()
        return RegistryClient(
            self.config.registry_url(settings),
            token=token,
            timeout=settings.request_timeout,
        )

    def publish(self, path: str | Path, options: PublishOptions | None = None) -> PublishResult:
        """Publish the skill at ``path``.

        Raises:
            SkillError: SKILL.md missing, malformed, or invalid.
            GitStateError: Not a repository, no ``origin``, detached HEAD.
            TagNotFoundError: ``options.tag`` does not exist.
            TagExistsError: The tag to create already exists.
            VersionParseError: A version or tag is not semver.
            AuthenticationError: No stored token, or the registry rejected it.
            GitError: A git command failed.
            RegistryError: Registration failed.
            ConfigurationError: Interactive run without a prompter.
        """
        options = options or PublishOptions()
        if not options.yes and self.prompter is None:
            raise ConfigurationError("Interactive publishing needs a prompter; pass yes=True")

        skill_dir = Path(path).expanduser().resolve()
        skill = load_skill(skill_dir)
        logger.info("Publishing skill %s from %s", skill.name, skill_dir)

        warnings: list[str] = []
        if not options.skip_validation:
            warnings = self._validate(skill, options.strict)

        repository, branch, repo_path = self._check_repository(skill_dir)

        if not self._accept_changes(skill_dir, options):
            return PublishResult(plan=None, aborted=True)

        tag, create = self._select_tag(skill_dir, skill, options)
        plan = PublishPlan(
            skill_name=skill.name,
            repository=repository,
            branch=branch,
            path=repo_path,
            tag=tag,
            create_tag=create,
            warnings=warnings,
        )
        logger.info("Selected tag %s (%s)", tag, "new" if create else "existing")

        if options.dry_run:
            return PublishResult(plan=plan, dry_run=True)

        if not options.yes and not self._ask(
            f"Publish {skill.name} (tag: {tag} on branch: {branch}, path: {repo_path})?",
            default=True,
        ):
            return PublishResult(plan=plan, aborted=True)

        synced: str | None = None
        if create:
            if options.sync_version:
                synced = self._sync_version(skill_dir, skill, tag)
            self.git.create_annotated_tag(skill_dir, tag, f"Release {tag}")
            logger.info("Created tag %s", tag)
            self.git.push_tag(skill_dir, REMOTE, tag)
            logger.info("Pushed tag %s to %s", tag, REMOTE)
        else:
            logger.info("Using existing tag %s", tag)

        self._register(plan)
        return PublishResult(plan=plan, registered=True, synced_version=synced)

    # ── steps ───────────────────────────────────────────────────────

    def _validate(self, skill: Skill, strict: bool) -> list[str]:
        result = validate_skill(skill, strict=strict)
        if not result.valid:
            errors = list(result.errors)
            if strict:
                errors.extend(result.warnings)
            raise SkillValidationError(name=skill.name, errors=errors, path=skill.path)
        for warning in result.warnings:
            self._notify(f"Warning: {warning}")
        return list(result.warnings)

    def _check_repository(self, skill_dir: Path) -> tuple[str, str, str]:
        if not self.git.is_repo(skill_dir):
            raise GitStateError("Not a git repository.", path=skill_dir)
        try:
            repository = self.git.remote_url(skill_dir, REMOTE)
        except GitError as exc:
            raise GitStateError(
                f"No '{REMOTE}' remote configured for {skill_dir}",
                cause=exc,
                path=skill_dir,
            ) from exc
        branch = self.git.current_branch(skill_dir)
        repo_path = self.git.path_relative_to_repo_root(skill_dir)
        logger.info("Repository %s, branch %s, path %s", repository, branch, repo_path)
        return repository, branch, repo_path

    def _accept_changes(self, skill_dir: Path, options: PublishOptions) -> bool:
        changes = self.git.uncommitted_changes(skill_dir)
        if not changes:
            return True

        if options.yes:
            logger.warning(
                "%d uncommitted changes detected, continuing with --yes", len(changes)
            )
            self._notify(f"Warning: {len(changes)} uncommitted changes detected, continuing with --yes")
            return True

        lines = ["Uncommitted changes detected:"]
        lines.extend(f"  {change}" for change in changes[:_MAX_LISTED_CHANGES])
        if len(changes) > _MAX_LISTED_CHANGES:
            lines.append(f"  ... and {len(changes) - _MAX_LISTED_CHANGES} more")
        self._notify("\n".join(lines))

        if not self._ask("Continue publishing with uncommitted changes?", default=False):
            return False
        logger.warning("Publishing with %d uncommitted changes", len(changes))
        return True

    def _select_tag(self, skill_dir: Path, skill: Skill, options: PublishOptions) -> tuple[str, bool]:
        if options.tag is not None:
            tag = normalize_tag(options.tag)
            if not self.git.tag_exists(skill_dir, tag):
                raise TagNotFoundError(f"Tag {tag} does not exist.", tag=tag)
            return tag, False

        if options.yes or options.bump is not None:
            if options.bump is not None:
                tag = bump_tag(skill.version, options.bump)
            else:
                tag = next_patch_tag(skill.version)
            self._require_new(skill_dir, tag)
            return tag, True

        choices = build_tag_choices(skill.version, self.git.list_tags(skill_dir))
        prompter = self._require_prompter()
        index = prompter.select("Select a version", [c.label for c in choices], default=0)
        choice = choices[index]

        if choice.tag is None:
            tag = normalize_tag(prompter.text("Enter version (e.g., 1.0.0 or v1.0.0)"))
        else:
            tag = choice.tag

        if choice.creates_tag:
            self._require_new(skill_dir, tag)
        return tag, choice.creates_tag

    def _require_new(self, skill_dir: Path, tag: str) -> None:
        if self.git.tag_exists(skill_dir, tag):
            raise TagExistsError(f"Tag {tag} already exists.", tag=tag)

    def _sync_version(self, skill_dir: Path, skill: Skill, tag: str) -> str | None:
        """Write the tag's version into SKILL.md and commit it."""
        version = str(parse_version(tag))
        if skill.declared_version == version:
            return None

        skill.manifest.set_version(version)
        skill_file = save_skill(skill)
        self.git.commit_paths(skill_dir, [skill_file], f"Bump {skill.name} to {version}")
        logger.info("Set %s metadata.version to %s", skill.name, version)
        return version

    def _register(self, plan: PublishPlan) -> None:
        token = self.config.get_auth_token()
        if token is None:
            raise AuthenticationError("Not authenticated. Run 'paks login' first.")

        with self._registry_factory(token) as client:
            client.publish(plan.to_request())
        logger.info("Registered %s %s", plan.skill_name, plan.tag)

    # ── prompting ───────────────────────────────────────────────────

    def _notify(self, message: str) -> None:
        if self.prompter is not None:
            self.prompter.notify(message)

    def _require_prompter(self) -> Prompter:
        if self.prompter is None:
            raise ConfigurationError("Interactive publishing needs a prompter; pass yes=True")
        return self.prompter

    def _ask(self, message: str, *, default: bool) -> bool:
        return self._require_prompter().confirm(message, default=default)
