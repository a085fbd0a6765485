"""Registry skill references: ``owner/name[@version]``."""

from __future__ import annotations

from dataclasses import dataclass

from paks.errors import ReferenceParseError

_ACCOUNT_MAX_LENGTH = 39
_NAME_MAX_LENGTH = 64
_ALLOWED = frozenset("abcdefghijklmnopqrstuvwxyz0123456789-")
_EXPECTED_FORMAT = "owner/name or owner/name@version"


def _check_account(account: str, text: str) -> None:
    if not account or len(account) > _ACCOUNT_MAX_LENGTH:
        raise ReferenceParseError(
            f"Invalid account '{account}' in '{text}': must be 1-{_ACCOUNT_MAX_LENGTH} characters",
            input=text,
            field="account",
        )
    if not set(account) <= _ALLOWED:
        raise ReferenceParseError(
            f"Invalid account '{account}' in '{text}': "
            "must contain only lowercase letters, numbers, and hyphens",
            input=text,
            field="account",
        )


def _check_name(name: str, text: str) -> None:
    problem = None
    if not name or len(name) > _NAME_MAX_LENGTH:
        problem = f"must be 1-{_NAME_MAX_LENGTH} characters"
    elif not set(name) <= _ALLOWED:
        problem = "must contain only lowercase letters, numbers, and hyphens"
    elif name.startswith("-") or name.endswith("-"):
        problem = "must not start or end with a hyphen"
    elif "--" in name:
        problem = "must not contain consecutive hyphens"

    if problem:
        raise ReferenceParseError(
            f"Invalid skill name '{name}' in '{text}': {problem}",
            input=text,
            field="name",
        )


@dataclass(frozen=True)
class SkillReference:
    """A parsed registry reference.

    Attributes:
        account: Owning account (user or organisation).
        name: Skill name.
        version: Requested version, or ``None`` for the latest.
    """

    account: str
    name: str
    version: str | None = None

    @classmethod
    def parse(cls, text: str) -> SkillReference:
        """Parse ``owner/name[@version]``.

        The version is whatever follows the last ``@`` and must be
        non-empty. The identifier must have exactly two ``/``-separated
        parts, each checked against the account/name rules.

        Raises:
            ReferenceParseError: Naming the field and rule that failed.
        """
        identifier, sep, version = text.rpartition("@")
        if not sep:
            identifier, version = text, None
        elif not version:
            raise ReferenceParseError(
                f"Invalid reference '{text}': version cannot be empty after @",
                input=text,
                field="version",
            )

        parts = identifier.split("/")
        if len(parts) != 2:
            raise ReferenceParseError(
                f"Invalid reference '{text}': expected {_EXPECTED_FORMAT}",
                input=text,
                field="identifier",
            )

        account, name = parts
        _check_account(account, text)
        _check_name(name, text)
        return cls(account=account, name=name, version=version)

    @property
    def disambiguator(self) -> str:
        """Install directory name: ``<owner>--<name>``."""
        return f"{self.account}--{self.name}"

    def with_version(self, version: str | None) -> SkillReference:
        return SkillReference(self.account, self.name, version)

    def to_uri(self) -> str:
        base = f"{self.account}/{self.name}"
        return f"{base}@{self.version}" if self.version else base

    def __str__(self) -> str:
        return self.to_uri()
