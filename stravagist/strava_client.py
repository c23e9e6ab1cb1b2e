from __future__ import annotations

import logging
from typing import Any

import requests

from .config import ConfigurationError, Settings
from .token_cache import Credentials, resolve_credentials, save_cached_credentials


logger = logging.getLogger(__name__)

BASE_URL = "https://www.strava.com"
API_URL = f"{BASE_URL}/api/v3"
TIMEOUT_SECONDS = 30
RECENT_ACTIVITIES_PER_PAGE = 30


class TokenRefreshError(RuntimeError):
    """The token endpoint answered but did not hand back a usable token pair."""


def _token_prefix(token: str | None) -> str:
    return (token or "")[:6]


class StravaClient:
    def __init__(
        self,
        settings: Settings,
        *,
        credentials: Credentials | None = None,
        session: requests.Session | None = None,
    ):
        self.client_id = settings.strava_client_id
        self.client_secret = settings.strava_client_secret
        self.athlete_id = settings.strava_athlete_id
        self.token_file = settings.strava_auth_cache_file
        self.credentials = credentials if credentials is not None else resolve_credentials(settings)
        self.session = session or requests.Session()

    @property
    def access_token(self) -> str | None:
        return self.credentials.access_token

    def refresh_access_token(self) -> str:
        """Exchange the current refresh token for a new pair and persist it.

        Strava rotates refresh tokens, so the cache file is rewritten after
        every successful exchange.
        """
        refresh_token = self.credentials.refresh_token
        if not refresh_token:
            raise ConfigurationError(
                "No Strava refresh token available. Check STRAVA_REFRESH_TOKEN or the auth cache."
            )
        logger.debug("ref: %s", _token_prefix(refresh_token))

        response = self.session.post(
            f"{BASE_URL}/oauth/token",
            json={
                "grant_type": "refresh_token",
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
            },
            timeout=TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        payload = response.json()

        access_token = payload.get("access_token") if isinstance(payload, dict) else None
        next_refresh = payload.get("refresh_token") if isinstance(payload, dict) else None
        if not access_token or not next_refresh:
            raise TokenRefreshError(f"Failed to refresh Strava tokens: {payload}")

        self.credentials.access_token = access_token
        self.credentials.refresh_token = next_refresh
        logger.debug("acc: %s", _token_prefix(access_token))
        logger.debug("ref: %s", _token_prefix(next_refresh))

        save_cached_credentials(self.token_file, self.credentials)
        logger.info("Strava access token refreshed.")
        return access_token

    def _get(self, path: str, *, params: dict[str, Any] | None = None) -> Any:
        if not self.access_token:
            raise ConfigurationError("No Strava access token; call refresh_access_token() first.")

        query = {"access_token": self.access_token}
        if params:
            query.update(params)
        response = self.session.get(
            f"{API_URL}{path}",
            params=query,
            timeout=TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return response.json()

    def get_athlete_stats(self) -> dict[str, Any]:
        """Year-to-date, recent (4 week) and all-time totals for the athlete."""
        return self._get(f"/athletes/{self.athlete_id}/stats")

    def get_recent_activities(self, per_page: int = RECENT_ACTIVITIES_PER_PAGE) -> list[dict[str, Any]]:
        """Most recent activities, newest first."""
        return self._get("/athlete/activities", params={"per_page": per_page})
