"""Custom exception hierarchy for paks."""

from __future__ import annotations

from typing import Any, ClassVar


class PaksError(Exception):
    """Base exception for all paks errors.

    All custom exceptions outside the skill manifest layer inherit from this
    class, allowing the CLI to catch every pipeline failure with a single
    handler.

    Attributes:
        message: Human-readable error message.
        cause: Original exception that caused this error.
        details: Additional error context as key-value pairs.

    Details can be accessed as attributes (e.g., error.target).
    """

    # Map attribute names to default values when not in details
    _defaults: ClassVar[dict[str, Any]] = {}

    def __init__(
        self,
        message: str,
        *,
        cause: Exception | None = None,
        **details: Any,
    ) -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
            cause: Original exception that caused this error.
            **details: Additional error context.
        """
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details

    def __getattr__(self, name: str) -> Any:
        """Access details as attributes."""
        # Guard against recursion before __init__ has populated details.
        if name in ("details", "message", "cause"):
            raise AttributeError(name)
        if name in self.details:
            return self.details[name]
        if name in self._defaults:
            return self._defaults[name]
        raise AttributeError(f"'{type(self).__name__}' has no attribute '{name}'")

    def __str__(self) -> str:
        """Return string representation."""
        if self.cause:
            return f"{self.message} (caused by: {self.cause})"
        return self.message


class ConfigurationError(PaksError):
    """Error in paks configuration.

    Raised when the user config file cannot be read or written, or when a
    pipeline is invoked with an incompatible combination of options.

    Attributes from details: config_key, path.
    """


class ReferenceParseError(PaksError):
    """Malformed ``owner/name[@version]`` reference.

    Attributes from details: input, field.
    """


class VersionParseError(PaksError):
    """Version string is not ``[v]MAJOR.MINOR.PATCH``.

    Attributes from details: version, component.
    """


class SourceNotFoundError(PaksError):
    """Skill source does not exist (local path, clone sub-path).

    Attributes from details: source.
    """


class InvalidSkillError(PaksError):
    """Source exists but is not a skill (no SKILL.md).

    Attributes from details: path.
    """


class TargetExistsError(PaksError):
    """Install target already exists and ``force`` was not given.

    Attributes from details: target, installed_version, requested_version.
    """

    _defaults: ClassVar[dict[str, Any]] = {
        "installed_version": None,
        "requested_version": None,
    }


class TagExistsError(PaksError):
    """Tag selected for creation already exists.

    Attributes from details: tag.
    """


class TagNotFoundError(PaksError):
    """Explicitly requested tag does not exist.

    Attributes from details: tag.
    """


class GitError(PaksError):
    """A git command failed.

    Attributes from details: command, returncode, stderr.
    """

    _defaults: ClassVar[dict[str, Any]] = {"returncode": None, "stderr": ""}


class GitStateError(PaksError):
    """Working tree is not in a publishable state.

    Raised for a path outside a repository, a missing remote, or a
    detached HEAD.

    Attributes from details: path.
    """


class MaterializeError(PaksError):
    """Copying a skill tree failed.

    Attributes from details: path.
    """
