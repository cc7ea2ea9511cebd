"""GPX route sources: a static HTTP directory or a local folder."""

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

import requests

from app.data_sources.sessions import thread_session
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="route_source")


class HttpRouteSource:
    """Fetch GPX files from `<base_url>/<filename>` with a cache-busting query."""

    def __init__(self, base_url: str, *, timeout: float = 8.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def url_for(self, filename: str) -> str:
        return f"{self.base_url}/{filename}"

    def fetch_text(self, filename: str) -> Optional[str]:
        url = self.url_for(filename)
        try:
            resp = thread_session().get(url, params={"t": int(time.time() * 1000)}, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.debug("Route request failed", extra={"url": url, "error": str(exc)})
            return None
        if not resp.ok:
            # missing candidates are the common case, not an error
            logger.debug("Route not available", extra={"url": url, "status": resp.status_code})
            return None
        return resp.text


class LocalRouteSource:
    """Read GPX files from a directory on disk."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def fetch_text(self, filename: str) -> Optional[str]:
        path = self.directory / Path(filename).name
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read route file", extra={"path": str(path), "error": str(exc)})
            return None
