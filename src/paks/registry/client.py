"""Synchronous HTTP client for the paks registry API.

Endpoints used:

- ``GET /v1/paks/install/{uri}``: install metadata for ``owner/name[@version]``
- ``POST /v1/paks/publish``: register a tagged release (bearer auth)
- ``GET /v1/paks/search``: search paks
- ``GET /v1/account``: the authenticated user (bearer auth)

Non-2xx responses are mapped onto the ``RegistryError`` hierarchy. Nothing
is retried.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from paks import __version__
from paks.registry.errors import (
    AuthenticationError,
    RateLimitError,
    RegistryAccessDeniedError,
    RegistryApiError,
    RegistryNotFoundError,
    RegistryTransportError,
)
from paks.registry.models import InstallInfo, Pak, PublishRequest, SearchResponse, UserInfo

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

DEFAULT_TIMEOUT = 30.0


class RegistryClient:
    """HTTP client for the registry.

    Parameters
    ----------
    base_url:
        Root URL of the registry (e.g. ``https://apiv2.stakpak.dev``).
    token:
        Bearer token for authenticated endpoints.
    timeout:
        HTTP request timeout in seconds.
    transport:
        Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "User-Agent": f"paks/{__version__}",
                "Accept": "application/json",
            },
        )

    # ── lifecycle ───────────────────────────────────────────────────

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> RegistryClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ── auth ────────────────────────────────────────────────────────

    @property
    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_token(self, token: str | None) -> None:
        self._token = token

    def _auth_headers(self, required: bool) -> dict[str, str]:
        if self._token is None:
            if required:
                raise AuthenticationError(
                    "Authentication required. Run 'paks login' first.",
                    url=self.base_url,
                )
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    # ── public API ──────────────────────────────────────────────────

    def get_install_info(self, uri: str) -> InstallInfo:
        """Install metadata for ``owner/name[@version]``.

        Raises:
            RegistryNotFoundError: Unknown pak or version.
            RegistryAccessDeniedError: Private pak without access.
        """
        path = f"/v1/paks/install/{quote(uri, safe='')}"
        response = self._request("GET", path, headers=self._auth_headers(required=False))
        return self._parse(response, InstallInfo)

    def publish(self, request: PublishRequest) -> None:
        """Register a tagged release with the registry."""
        headers = self._auth_headers(required=True)
        body = request.model_dump(exclude_none=True)
        self._request("POST", "/v1/paks/publish", headers=headers, json=body)

    def search(
        self,
        query: str | None = None,
        *,
        owner: str | None = None,
        name: str | None = None,
        limit: int = 10,
        offset: int = 0,
    ) -> list[Pak]:
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if query:
            params["query"] = query
        if owner:
            params["owner"] = owner
        if name:
            params["pak_name"] = name

        response = self._request(
            "GET",
            "/v1/paks/search",
            headers=self._auth_headers(required=False),
            params=params,
        )
        return self._parse(response, SearchResponse).results

    def get_current_user(self) -> UserInfo:
        headers = self._auth_headers(required=True)
        response = self._request("GET", "/v1/account", headers=headers)
        return self._parse(response, UserInfo)

    # ── internals ───────────────────────────────────────────────────

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise RegistryTransportError(
                f"Request to {self.base_url}{path} failed: {exc}",
                cause=exc,
                url=f"{self.base_url}{path}",
            ) from exc

        if response.status_code in (200, 201, 204):
            return response
        raise self._error_for(response)

    @staticmethod
    def _error_for(response: httpx.Response) -> Exception:
        status = response.status_code
        url = str(response.request.url)
        message, code = _error_message(response)

        if status == 401:
            return AuthenticationError(
                "Invalid or expired token. Run 'paks login' again.",
                status_code=status,
                url=url,
            )
        if status == 403:
            return RegistryAccessDeniedError(
                message or "Access denied",
                status_code=status,
                url=url,
            )
        if status == 404:
            return RegistryNotFoundError(
                message or f"Resource not found: {url}",
                status_code=status,
                url=url,
            )
        if status == 429:
            retry_after = _parse_retry_after(response.headers.get("retry-after"))
            hint = f" Retry after {retry_after} seconds." if retry_after is not None else ""
            return RateLimitError(
                f"Rate limited by the registry.{hint}",
                status_code=status,
                url=url,
                retry_after=retry_after,
            )
        return RegistryApiError(
            f"API error ({status}): {message or response.reason_phrase}",
            status_code=status,
            url=url,
            code=code,
        )

    @staticmethod
    def _parse(response: httpx.Response, model: type[ModelT]) -> ModelT:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise RegistryTransportError(
                f"Failed to parse response from {response.request.url}: {exc}",
                cause=exc,
                url=str(response.request.url),
            ) from exc


def _error_message(response: httpx.Response) -> tuple[str, str | None]:
    """Extract ``(message, code)`` from ``{"error": {"code", "message"}}``."""
    text = response.text
    try:
        payload = response.json()
    except ValueError:
        return text.strip(), None

    if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
        error = payload["error"]
        return str(error.get("message", "")), error.get("code")
    return text.strip(), None


def _parse_retry_after(value: str | None) -> int | None:
    if value is None:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None
