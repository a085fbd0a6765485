"""Skill manifest and directory validation."""

from __future__ import annotations

from pathlib import Path

from paks.skills.config import Skill, SkillManifest, ValidationResult
from paks.skills.errors import SkillValidationError

_NAME_MAX_LENGTH = 64
_DESCRIPTION_MAX_LENGTH = 1024
_DESCRIPTION_SHORT_LENGTH = 20
_COMPATIBILITY_MAX_LENGTH = 500

_NAME_CHARS = frozenset("abcdefghijklmnopqrstuvwxyz0123456789-")

# Optional sub-directories and the placeholder files that do not count as content.
_OPTIONAL_DIRS: dict[str, frozenset[str]] = {
    "scripts": frozenset(),
    "references": frozenset(),
    "assets": frozenset({".gitkeep"}),
}


def name_error(name: str) -> str | None:
    """Return the first rule a skill name violates, or ``None`` if valid."""
    if not name or len(name) > _NAME_MAX_LENGTH:
        return f"name must be 1-{_NAME_MAX_LENGTH} characters"
    if not set(name) <= _NAME_CHARS:
        return "name must contain only lowercase letters, numbers, and hyphens"
    if name.startswith("-") or name.endswith("-"):
        return "name must not start or end with a hyphen"
    if "--" in name:
        return "name must not contain consecutive hyphens"
    return None


def validate_manifest(manifest: SkillManifest, path: Path | None = None) -> list[str]:
    """Validate manifest fields.

    Hard failures abort on the first violated rule; soft issues are
    returned as warnings.

    Args:
        manifest: Parsed frontmatter.
        path: Skill directory, used in the error message.

    Returns:
        List of warnings (possibly empty).

    Raises:
        SkillValidationError: If a hard rule is violated.
    """

    def fail(message: str) -> SkillValidationError:
        return SkillValidationError(name=manifest.name, errors=[message], path=path)

    error = name_error(manifest.name)
    if error:
        raise fail(error)

    description = manifest.description
    if not description or len(description) > _DESCRIPTION_MAX_LENGTH:
        raise fail(f"description must be 1-{_DESCRIPTION_MAX_LENGTH} characters")

    if manifest.compatibility is not None and len(manifest.compatibility) > _COMPATIBILITY_MAX_LENGTH:
        raise fail(f"compatibility must be at most {_COMPATIBILITY_MAX_LENGTH} characters")

    warnings: list[str] = []
    if len(description) < _DESCRIPTION_SHORT_LENGTH:
        warnings.append("description is very short; consider adding more detail")

    return warnings


def _count_entries(directory: Path, ignored: frozenset[str]) -> int:
    return sum(1 for entry in directory.iterdir() if entry.name not in ignored)


def validate_skill(skill: Skill, *, strict: bool = False) -> ValidationResult:
    """Validate a loaded skill's manifest and directory layout.

    Beyond ``validate_manifest``, warns about a missing version or license
    and about empty optional sub-directories. In strict mode every warning
    makes the result invalid.

    Args:
        skill: Loaded skill.
        strict: Treat warnings as errors.

    Returns:
        ValidationResult with errors, warnings and sub-directory file counts.
    """
    errors: list[str] = []
    warnings: list[str] = []

    try:
        warnings.extend(validate_manifest(skill.manifest, skill.path))
    except SkillValidationError as exc:
        errors.extend(exc.errors)

    if skill.declared_version is None:
        warnings.append("No version specified - required for publishing")
    if skill.manifest.license is None:
        warnings.append("No license specified - recommended for sharing")

    directories: dict[str, int] = {}
    for dirname, ignored in _OPTIONAL_DIRS.items():
        directory = skill.path / dirname
        if not directory.is_dir():
            continue
        count = _count_entries(directory, ignored)
        if count == 0:
            warnings.append(f"{dirname}/ directory is empty")
        else:
            directories[dirname] = count

    valid = not errors and not (strict and warnings)
    return ValidationResult(
        valid=valid,
        errors=errors,
        warnings=warnings,
        directories=directories,
        skill_path=skill.path,
    )
