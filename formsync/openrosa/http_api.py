"""httpx-backed client for the remote form list service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from formsync.exceptions import AuthError, TransportError

if TYPE_CHECKING:
    from formsync.config import Settings
    from formsync.openrosa.base import FormListParser
    from formsync.services.catalog_types import ManifestSnapshot, RemoteFormDescriptor

logger = logging.getLogger(__name__)

OPENROSA_HEADERS = {"X-OpenRosa-Version": "1.0"}
_AUTH_STATUS_CODES = {401, 403}


def build_auth(username: str, password: str, scheme: str) -> httpx.Auth | None:
    """Build httpx auth for the configured credentials, or None if anonymous."""
    if not username:
        return None
    if scheme == "basic":
        return httpx.BasicAuth(username, password)
    return httpx.DigestAuth(username, password)


class HttpFormListApi:
    """Form list service reached over HTTP.

    Responses with status 401 or 403 raise AuthError so callers can ask for
    credentials; every other failure raises TransportError.
    """

    def __init__(
        self,
        server_url: str,
        parser: FormListParser,
        *,
        form_list_path: str = "/formList",
        auth: httpx.Auth | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.server_url = server_url.rstrip("/")
        self.form_list_path = form_list_path
        self.parser = parser
        self.client = httpx.Client(
            base_url=self.server_url,
            headers=OPENROSA_HEADERS,
            auth=auth,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        parser: FormListParser,
        transport: httpx.BaseTransport | None = None,
    ) -> HttpFormListApi:
        return cls(
            settings.server_url,
            parser,
            form_list_path=settings.form_list_path,
            auth=build_auth(settings.username, settings.password, settings.auth_scheme),
            timeout=settings.request_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> HttpFormListApi:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _get(self, url: str) -> httpx.Response:
        try:
            resp = self.client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        if resp.status_code in _AUTH_STATUS_CODES:
            raise AuthError(f"Server rejected credentials ({resp.status_code}) for {url}")
        if not resp.is_success:
            raise TransportError(f"Server returned {resp.status_code} for {url}")
        return resp

    def fetch_form_list(self) -> list[RemoteFormDescriptor]:
        resp = self._get(self.form_list_path)
        try:
            return self.parser.parse_form_list(resp.content)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc

    def fetch_manifest(self, url: str) -> ManifestSnapshot:
        resp = self._get(url)
        try:
            return self.parser.parse_manifest(resp.content)
        except ValueError as exc:
            raise TransportError(str(exc)) from exc

    def download(self, url: str) -> bytes:
        """Return the body at ``url``. Raises AuthError or TransportError."""
        return self._get(url).content
