"""Registry API error hierarchy."""

from __future__ import annotations

from typing import Any, ClassVar

from paks.errors import PaksError


class RegistryError(PaksError):
    """Base exception for registry API failures.

    Attributes from details: status_code (default: None), url.
    """

    _defaults: ClassVar[dict[str, Any]] = {"status_code": None, "url": None}


class RegistryNotFoundError(RegistryError):
    """The requested pak (or endpoint) does not exist (HTTP 404)."""


class RegistryAccessDeniedError(RegistryError):
    """Access to the pak was denied (HTTP 403).

    Typically a private pak requested without authenticating.
    """


class AuthenticationError(RegistryError):
    """No token is stored, or the registry rejected it (HTTP 401)."""


class RateLimitError(RegistryError):
    """Rate limit exceeded (HTTP 429).

    Attributes from details: retry_after (seconds, or None when the
    ``retry-after`` header is missing or not a number).
    """

    _defaults: ClassVar[dict[str, Any]] = {
        **RegistryError._defaults,
        "retry_after": None,
    }


class RegistryApiError(RegistryError):
    """Any other non-2xx response.

    Attributes from details: status_code, code (from the error envelope).
    """

    _defaults: ClassVar[dict[str, Any]] = {**RegistryError._defaults, "code": None}


class RegistryTransportError(RegistryError):
    """The request did not complete (connection, TLS, timeout, bad JSON)."""
