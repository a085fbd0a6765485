"""SKILL.md exceptions.

These are kept apart from ``PaksError`` so that manifest handling can be
used without the install and publish pipelines. Every error records the
skill ``name`` and ``path`` and pickles through its constructor arguments.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


class SkillError(Exception):
    """Base exception for SKILL.md problems."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def _init_args(self) -> tuple[Any, ...]:
        return (self.message,)

    def __reduce__(self) -> tuple:
        return (type(self), self._init_args())

    def __repr__(self) -> str:
        args = ", ".join(repr(arg) for arg in self._init_args())
        return f"{type(self).__name__}({args})"


class SkillNotFoundError(SkillError):
    """The directory has no SKILL.md.

    Attributes:
        name: Directory name of the skill.
        path: Directory that was checked.
    """

    def __init__(self, name: str, path: str | Path) -> None:
        self.name = name
        self.path = Path(path)
        super().__init__(f"No SKILL.md found for '{name}' at {self.path}")

    def _init_args(self) -> tuple[Any, ...]:
        return (self.name, str(self.path))


class SkillParseError(SkillError):
    """Bad ``---`` delimiters, invalid YAML, or fields of the wrong type."""

    def __init__(self, name: str, path: str | Path, detail: str) -> None:
        self.name = name
        self.path = Path(path)
        self.detail = detail
        super().__init__(f"Failed to parse SKILL.md for '{name}' at {self.path}: {detail}")

    def _init_args(self) -> tuple[Any, ...]:
        return (self.name, str(self.path), self.detail)


class SkillValidationError(SkillError):
    """Manifest fields break the naming or length rules.

    Attributes:
        name: Skill name.
        errors: One message per broken rule.
        path: Skill directory, when known.
    """

    def __init__(self, name: str, errors: list[str], path: str | Path | None = None) -> None:
        self.name = name
        self.errors = list(errors)
        self.path = Path(path) if path is not None else None
        where = f" at {self.path}" if self.path else ""
        super().__init__(f"Validation failed for skill '{name}'{where}: {'; '.join(self.errors)}")

    def _init_args(self) -> tuple[Any, ...]:
        return (self.name, self.errors, str(self.path) if self.path else None)


class SkillLoadError(SkillError):
    """SKILL.md could not be read or written (permissions, disk errors)."""

    def __init__(self, name: str, path: str | Path, cause: Exception | None = None) -> None:
        self.name = name
        self.path = Path(path)
        self.cause = cause
        suffix = f" ({cause})" if cause else ""
        super().__init__(f"Failed to access skill '{name}' at {self.path}{suffix}")

    def _init_args(self) -> tuple[Any, ...]:
        return (self.name, str(self.path), self.cause)
