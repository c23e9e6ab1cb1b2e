from __future__ import annotations

import logging
from typing import Any

import requests

from .config import Settings


logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
TIMEOUT_SECONDS = 30


class GistPublishError(RuntimeError):
    """The target gist cannot be updated in place."""


class GistClient:
    def __init__(self, settings: Settings, *, session: requests.Session | None = None):
        self.gist_id = settings.gist_id
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"token {settings.github_token}",
                "Accept": "application/vnd.github+json",
            }
        )

    @property
    def url(self) -> str:
        return f"{GITHUB_API_URL}/gists/{self.gist_id}"

    def get_gist(self) -> dict[str, Any]:
        try:
            response = self.session.get(self.url, timeout=TIMEOUT_SECONDS)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as exc:
            logger.error("Unable to get gist %s: %s", self.gist_id, exc)
            raise

    def update_gist(self, content: str, title: str) -> dict[str, Any]:
        """Overwrite the gist's file, keyed by whatever name it currently has."""
        gist = self.get_gist()
        files = gist.get("files") if isinstance(gist, dict) else None
        if not files:
            raise GistPublishError(f"Gist {self.gist_id} has no files to update.")
        filename = next(iter(files))

        try:
            response = self.session.patch(
                self.url,
                json={"files": {filename: {"filename": title, "content": content}}},
                timeout=TIMEOUT_SECONDS,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.error("Unable to update gist %s (file %s): %s", self.gist_id, filename, exc)
            raise

        logger.info("Gist %s updated (file %s -> %s).", self.gist_id, filename, title)
        return response.json()
