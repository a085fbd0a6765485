"""Registry API client, models, and errors."""

from paks.registry.client import RegistryClient
from paks.registry.errors import (
    AuthenticationError,
    RateLimitError,
    RegistryAccessDeniedError,
    RegistryApiError,
    RegistryError,
    RegistryNotFoundError,
    RegistryTransportError,
)
from paks.registry.models import InstallInfo, Pak, PublishRequest, UserInfo

__all__ = [
    "AuthenticationError",
    "InstallInfo",
    "Pak",
    "PublishRequest",
    "RateLimitError",
    "RegistryAccessDeniedError",
    "RegistryApiError",
    "RegistryClient",
    "RegistryError",
    "RegistryNotFoundError",
    "RegistryTransportError",
    "UserInfo",
]
