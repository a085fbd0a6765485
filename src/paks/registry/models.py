"""Registry request and response models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class _ApiModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class InstallPakInfo(_ApiModel):
    id: str
    owner: str
    name: str
    description: str | None = None
    visibility: str = "public"


class InstallVersionInfo(_ApiModel):
    version: str
    tag: str
    commit_hash: str | None = None
    published_at: datetime | None = None


class InstallRepositoryInfo(_ApiModel):
    url: str
    clone_url: str
    ssh_url: str | None = None
    default_branch: str | None = None


class InstallPathInfo(_ApiModel):
    """Location of the pak inside its repository.

    ``path`` is empty (or ``"."``) when the pak is the repository root.
    """

    path: str = ""
    files: list[str] = Field(default_factory=list)

    @property
    def subpath(self) -> str | None:
        stripped = self.path.strip("/")
        return None if stripped in ("", ".") else stripped


class InstallInfo(_ApiModel):
    """Response of ``GET /v1/paks/install/{uri}``."""

    pak: InstallPakInfo
    version: InstallVersionInfo
    repository: InstallRepositoryInfo
    install: InstallPathInfo = Field(default_factory=InstallPathInfo)


class PublishRequest(_ApiModel):
    """Body of ``POST /v1/paks/publish``.

    ``path`` is omitted for a pak at the repository root.
    """

    repository: str
    branch: str
    tag: str
    path: str | None = None


class Pak(_ApiModel):
    """A search result."""

    id: str | None = None
    name: str
    owner_name: str
    uri: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    repository_url: str | None = None
    visibility: str | None = None
    total_downloads: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.owner_name}/{self.name}"


class SearchResponse(_ApiModel):
    results: list[Pak] = Field(default_factory=list)


class UserInfo(_ApiModel):
    """Response of ``GET /v1/account``."""

    id: str
    username: str
    email: str | None = None
    avatar_url: str | None = None
