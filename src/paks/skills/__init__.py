"""SKILL.md manifests: models, loading, validation, and scaffolding.

Classes:
    Skill: A skill directory with its parsed manifest and instructions.
    SkillManifest: Parsed SKILL.md frontmatter.
    DependencySpec: Descriptive dependency entry.
    ValidationResult: Result from validating a skill directory.

Exceptions:
    SkillError: Base exception for all SKILL.md errors.
    SkillNotFoundError: No SKILL.md in the directory.
    SkillParseError: Malformed delimiters, YAML, or field types.
    SkillValidationError: Manifest violates the naming/length rules.
    SkillLoadError: Permission denied or disk errors.
"""

from __future__ import annotations

from paks.skills.config import (
    DEFAULT_VERSION,
    SKILL_FILE,
    DependencySpec,
    Skill,
    SkillManifest,
    ValidationResult,
)
from paks.skills.errors import (
    SkillError,
    SkillLoadError,
    SkillNotFoundError,
    SkillParseError,
    SkillValidationError,
)
from paks.skills.loader import has_skill_file, load_skill, save_skill
from paks.skills.validator import validate_manifest, validate_skill

__all__ = [
    "DEFAULT_VERSION",
    "SKILL_FILE",
    "DependencySpec",
    "Skill",
    "SkillError",
    "SkillLoadError",
    "SkillManifest",
    "SkillNotFoundError",
    "SkillParseError",
    "SkillValidationError",
    "ValidationResult",
    "has_skill_file",
    "load_skill",
    "save_skill",
    "validate_manifest",
    "validate_skill",
]
