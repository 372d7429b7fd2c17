from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import urljoin

import requests

from .config import LibraryServiceSettings
from .errors import FetchError
from .models import MediaKind
from .utils import validate_url

LOGGER = logging.getLogger(__name__)

# Endpoint listing every library item for each kind of *arr service
LIBRARY_ENDPOINTS = {
    MediaKind.MOVIE: "/api/v3/movie",
    MediaKind.SHOW: "/api/v3/series",
}


def _build_url(base_url: str, path: str) -> str:
    normalized = base_url.rstrip("/") + "/"
    return urljoin(normalized, path.lstrip("/"))


class ArrClient:
    """Thin wrapper around the Radarr/Sonarr v3 library endpoints.

    The API key is sent in the ``X-Api-Key`` header and is never logged.
    """

    def __init__(
        self,
        name: str,
        kind: MediaKind,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not validate_url(base_url):
            raise FetchError(f"Invalid {name} URL: {base_url}", source=name)

        self.name = name
        self.kind = kind
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(
        cls,
        settings: LibraryServiceSettings,
        *,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> "ArrClient":
        return cls(
            settings.name,
            settings.kind,
            settings.base_url,
            settings.api_key,
            timeout=timeout,
            session=session,
        )

    def get_library(self) -> Any:
        """Return the raw library response body.

        Raises:
            FetchError: On connection errors, non-2xx responses or invalid JSON
        """
        url = _build_url(self.base_url, LIBRARY_ENDPOINTS[self.kind])
        LOGGER.debug("%s GET %s", self.name, url)

        try:
            response = self.session.request(
                "GET",
                url,
                headers={"Accept": "application/json", "X-Api-Key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise FetchError(f"{self.name} request to {url} failed: {exc}", source=self.name) from exc

        if response.status_code >= 400:
            raise FetchError(
                f"{self.name} request to {url} failed with {response.status_code}: {response.text[:200]}",
                source=self.name,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(
                f"{self.name} returned invalid JSON ({response.status_code}): {response.text[:200]}",
                source=self.name,
                status_code=response.status_code,
            ) from exc

        LOGGER.info("Status: %s  URL: %s", response.status_code, url)
        return payload

    def close(self) -> None:
        self.session.close()
