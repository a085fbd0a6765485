"""Skill source references and classification."""

from paks.sources.classifier import (
    GitSource,
    LocalSource,
    RegistrySource,
    SourceDescriptor,
    detect_source_type,
    parse_git_source,
)
from paks.sources.reference import SkillReference

__all__ = [
    "GitSource",
    "LocalSource",
    "RegistrySource",
    "SkillReference",
    "SourceDescriptor",
    "detect_source_type",
    "parse_git_source",
]
