"""Proof artifact download over HTTP."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from ..exceptions import FetchError
from ..log import get_logger
from ..version import __version__


class ArtifactFetcher:
    """One GET per artifact; the body is buffered fully before returning.

    Owns its `httpx.Client` unless one is passed in. No retries.
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._owns_client = client is None
        if client is None:
            options = {} if timeout is None else {"timeout": timeout}
            client = httpx.Client(
                headers={"User-Agent": f"zkv-router/{__version__}"},
                follow_redirects=True,
                **options,
            )
        self._client = client
        self._log = get_logger(__name__, logger)

    def __enter__(self) -> "ArtifactFetcher":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def fetch(self, url: str) -> bytes:
        self._log.info("Downloading proof artifact...")
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise FetchError(url, f"failed to download artifact: {exc}") from exc
        if not response.is_success:
            raise FetchError(
                url,
                f"failed to download artifact: HTTP {response.status_code}",
                status=response.status_code,
            )
        data = response.content
        self._log.info("Downloaded %d artifact bytes", len(data))
        return data
