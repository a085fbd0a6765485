"""Error hierarchy for paks pipelines."""

from paks.errors.exceptions import (
    ConfigurationError,
    GitError,
    GitStateError,
    InvalidSkillError,
    MaterializeError,
    PaksError,
    ReferenceParseError,
    SourceNotFoundError,
    TagExistsError,
    TagNotFoundError,
    TargetExistsError,
    VersionParseError,
)

__all__ = [
    "ConfigurationError",
    "GitError",
    "GitStateError",
    "InvalidSkillError",
    "MaterializeError",
    "PaksError",
    "ReferenceParseError",
    "SourceNotFoundError",
    "TagExistsError",
    "TagNotFoundError",
    "TargetExistsError",
    "VersionParseError",
]
