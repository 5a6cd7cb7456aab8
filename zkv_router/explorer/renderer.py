"""Headless-browser page renderer for explorer request pages."""

from __future__ import annotations

import logging
import subprocess
from typing import Optional, Protocol

from ..exceptions import RenderError
from ..log import get_logger


class PageRenderer(Protocol):
    def render(self, request_id: str) -> str:
        ...


def request_url(api_base: str, request_id: str) -> str:
    return f"{api_base.rstrip('/')}/request/{request_id}"


class ChromiumRenderer:
    """Dump the DOM of a request page after client-side rendering."""

    def __init__(
        self,
        api_base: str,
        binary: str = "chromium-browser",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._api_base = api_base
        self._binary = binary
        self._log = get_logger(__name__, logger)

    def command(self, url: str) -> list[str]:
        return [
            self._binary,
            "--headless",
            "--disable-gpu",
            "--no-sandbox",
            "--dump-dom",
            url,
        ]

    def render(self, request_id: str) -> str:
        url = request_url(self._api_base, request_id)
        self._log.info("Rendering %s with %s", url, self._binary)
        try:
            result = subprocess.run(
                self.command(url),
                capture_output=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise RenderError(f"missing renderer binary: {self._binary}") from exc
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise RenderError(f"failed to render page: {stderr or 'unknown renderer error'}")
        html = result.stdout.decode("utf-8", errors="replace")
        self._log.info("Rendered HTML length: %d", len(html))
        return html


class StaticRenderer:
    """Serve pre-rendered HTML, e.g. a page saved with --html."""

    def __init__(self, html: str) -> None:
        self._html = html

    def render(self, request_id: str) -> str:
        return self._html
