"""HTTP client for the Trakt watchlist API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .errors import FetchError
from .models import MediaKind

LOGGER = logging.getLogger(__name__)

API_BASE_URL = "https://api.trakt.tv"
API_VERSION = "2"

# Trakt names its watchlist collections in the plural
_WATCHLIST_TYPES = {
    MediaKind.MOVIE: "movies",
    MediaKind.SHOW: "shows",
}


class TraktClient:
    """Fetches a user's public watchlist from Trakt.

    Requests are made once with a fixed timeout; failures are raised as
    ``FetchError`` and never retried.
    """

    def __init__(
        self,
        user_id: str,
        client_id: str,
        *,
        timeout: float = 30.0,
        base_url: str = API_BASE_URL,
        client: httpx.Client | None = None,
    ) -> None:
        self.user_id = user_id
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=timeout)
        self._owns_client = client is None
        self._headers = {
            "Content-Type": "application/json",
            "trakt-api-version": API_VERSION,
            "trakt-api-key": client_id,
        }

    def watchlist_path(self, kind: MediaKind) -> str:
        return f"/users/{self.user_id}/watchlist/{_WATCHLIST_TYPES[kind]}"

    def get_watchlist(self, kind: MediaKind) -> Any:
        """Return the raw watchlist response body for ``kind``.

        Raises:
            FetchError: On transport errors, non-2xx responses or invalid JSON
        """
        path = self.watchlist_path(kind)
        source = f"trakt:{kind.value}"
        LOGGER.debug("Trakt GET %s", path)

        try:
            response = self._client.get(f"{self.base_url}{path}", headers=self._headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise FetchError(
                f"Trakt watchlist request {path} failed with {status}",
                source=source,
                status_code=status,
            ) from exc
        except httpx.RequestError as exc:
            raise FetchError(f"Trakt watchlist request {path} failed: {exc}", source=source) from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchError(f"Trakt returned invalid JSON for {path}", source=source) from exc

        LOGGER.info("Status: %s  URL: %s", response.status_code, path)
        return payload

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "TraktClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
