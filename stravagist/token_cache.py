from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import Settings
from .storage import read_json, write_json


logger = logging.getLogger(__name__)

ACCESS_TOKEN_KEY = "stravaAccessToken"
REFRESH_TOKEN_KEY = "stravaRefreshToken"


@dataclass
class Credentials:
    access_token: str | None = None
    refresh_token: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            ACCESS_TOKEN_KEY: self.access_token,
            REFRESH_TOKEN_KEY: self.refresh_token,
        }


@dataclass(frozen=True)
class CacheLoad:
    """Outcome of reading the auth cache.

    ``credentials`` is None when the file is absent or unreadable; ``error``
    carries the reason in the unreadable case.
    """

    credentials: Credentials | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _clean_token(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def load_cached_credentials(path: Path) -> CacheLoad:
    try:
        cached = read_json(path)
    except (OSError, ValueError) as exc:
        # json.JSONDecodeError is a ValueError
        return CacheLoad(error=f"{type(exc).__name__}: {exc}")
    if cached is None:
        return CacheLoad()
    return CacheLoad(
        credentials=Credentials(
            access_token=_clean_token(cached.get(ACCESS_TOKEN_KEY)),
            refresh_token=_clean_token(cached.get(REFRESH_TOKEN_KEY)),
        )
    )


def save_cached_credentials(path: Path, credentials: Credentials) -> None:
    write_json(path, credentials.to_payload())


def resolve_credentials(settings: Settings) -> Credentials:
    """Start from the environment tokens and overlay whatever the cache holds."""
    credentials = Credentials(
        access_token=settings.strava_access_token,
        refresh_token=settings.strava_refresh_token,
    )

    loaded = load_cached_credentials(settings.strava_auth_cache_file)
    if not loaded.ok:
        logger.warning(
            "Error reading auth cache %s (%s). Continuing with environment tokens.",
            settings.strava_auth_cache_file,
            loaded.error,
        )
        return credentials
    if loaded.credentials is None:
        logger.info("No auth cache at %s. Using environment tokens.", settings.strava_auth_cache_file)
        return credentials

    if loaded.credentials.access_token:
        credentials.access_token = loaded.credentials.access_token
    if loaded.credentials.refresh_token:
        credentials.refresh_token = loaded.credentials.refresh_token
    return credentials
