"""Skill manifest models.

``SKILL.md`` frontmatter combines the Agent Skills fields (``name``,
``description``, ``license``, ``compatibility``, ``metadata``,
``allowed-tools``) with paks package fields (``authors``, ``repository``,
``homepage``, ``keywords``, ``categories``, ``dependencies``). The package
version lives in ``metadata.version``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

SKILL_FILE = "SKILL.md"
DEFAULT_VERSION = "0.1.0"


class DependencySpec(BaseModel):
    """Another skill this skill depends on.

    Descriptive only: dependencies are recorded and displayed but never
    resolved or installed.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    version: str | None = None
    git: str | None = None
    git_ref: str | None = Field(default=None, alias="ref")
    path: str | None = None


class SkillManifest(BaseModel):
    """Parsed SKILL.md frontmatter.

    Field rules (name format, description length) are enforced by
    ``paks.skills.validator`` rather than at construction, so a manifest
    can be loaded and inspected even when it would fail validation.
    Keys it does not model are kept and written back unchanged.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    description: str
    license: str | None = None
    compatibility: str | None = None
    metadata: dict[str, str] | None = None
    allowed_tools: str | list[str] | None = Field(default=None, alias="allowed-tools")
    authors: list[str] = Field(default_factory=list)
    repository: str | None = None
    homepage: str | None = None
    keywords: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    dependencies: list[DependencySpec] = Field(default_factory=list)

    @field_validator("name", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        """Accept scalars YAML did not read as strings (e.g. ``name: 123``)."""
        if value is None:
            return value
        if isinstance(value, (int, float, bool)):
            return str(value)
        return value

    @field_validator("metadata", mode="before")
    @classmethod
    def _stringify_metadata(cls, value: Any) -> Any:
        """YAML reads ``version: 1.0`` as a float; metadata values are strings."""
        if isinstance(value, dict):
            return {str(k): "" if v is None else str(v) for k, v in value.items()}
        return value

    @property
    def version(self) -> str | None:
        """Version from ``metadata.version``, or ``None`` when not declared."""
        if self.metadata is None:
            return None
        return self.metadata.get("version")

    def set_version(self, version: str) -> None:
        """Store ``version`` in ``metadata.version``."""
        if self.metadata is None:
            self.metadata = {}
        self.metadata["version"] = version

    def to_frontmatter(self) -> dict[str, Any]:
        """Dump to a YAML-ready mapping using SKILL.md key names."""
        data = self.model_dump(
            by_alias=True,
            exclude_none=True,
            exclude_defaults=False,
            exclude={
                key
                for key in ("authors", "keywords", "categories", "dependencies")
                if not getattr(self, key)
            },
        )
        # Extra keys round-trip as written, nulls included.
        data.update(self.model_extra or {})
        return data


@dataclass
class Skill:
    """A skill directory on disk.

    Attributes:
        path: Directory containing SKILL.md.
        manifest: Parsed frontmatter.
        instructions: Markdown body following the frontmatter.
    """

    path: Path
    manifest: SkillManifest
    instructions: str = ""

    @property
    def name(self) -> str:
        return self.manifest.name

    @property
    def version(self) -> str:
        """Declared version, defaulting to ``0.1.0``."""
        return self.manifest.version or DEFAULT_VERSION

    @property
    def declared_version(self) -> str | None:
        return self.manifest.version

    @property
    def skill_file(self) -> Path:
        return self.path / SKILL_FILE

    def has_scripts(self) -> bool:
        return (self.path / "scripts").is_dir()

    def has_references(self) -> bool:
        return (self.path / "references").is_dir()

    def has_assets(self) -> bool:
        return (self.path / "assets").is_dir()


@dataclass
class ValidationResult:
    """Result from validating a skill directory.

    Attributes:
        valid: Whether the skill passed validation.
        errors: List of validation error messages.
        warnings: List of validation warnings.
        directories: File counts for non-empty ``scripts/``, ``references/``
            and ``assets/`` sub-directories.
        skill_path: Path to the validated skill, if available.
    """

    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    directories: dict[str, int] = field(default_factory=dict)
    skill_path: Path | None = None
