from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from dotenv import load_dotenv


load_dotenv()


EnvGetter = Callable[[str], str | None]

DEFAULT_GIST_TITLE = "Strava Activity Summary"
DEFAULT_RECENT_ACTIVITY_COUNT = 30
DEFAULT_STATE_DIR = Path(__file__).resolve().parent.parent / "state"


class ConfigurationError(ValueError):
    """Raised when required configuration is missing."""


def _str_env(*names: str, default: str = "", getenv: EnvGetter = os.getenv) -> str:
    for name in names:
        value = getenv(name)
        if value is not None:
            return value.strip()
    return default


def _optional_str_env(*names: str, getenv: EnvGetter = os.getenv) -> str | None:
    value = _str_env(*names, default="", getenv=getenv)
    return value or None


def _int_env(
    name: str,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
    *,
    getenv: EnvGetter = os.getenv,
) -> int:
    value = getenv(name)
    if value is None:
        parsed = default
    else:
        try:
            parsed = int(value.strip())
        except ValueError:
            parsed = default

    if minimum is not None and parsed < minimum:
        parsed = minimum
    if maximum is not None and parsed > maximum:
        parsed = maximum
    return parsed


@dataclass(frozen=True)
class Settings:
    strava_client_id: str
    strava_client_secret: str
    strava_access_token: str | None
    strava_refresh_token: str | None
    strava_athlete_id: str

    github_token: str
    gist_id: str
    gist_title: str

    units: str
    timezone: str
    log_level: str
    recent_activity_count: int

    state_dir: Path
    strava_auth_cache_file: Path

    @classmethod
    def from_env(cls, getenv: EnvGetter = os.getenv) -> "Settings":
        # Relative to the install, never the working directory.
        state_dir_value = _optional_str_env("STATE_DIR", getenv=getenv)
        state_dir = Path(state_dir_value).resolve() if state_dir_value else DEFAULT_STATE_DIR
        strava_auth_cache_file = state_dir / _str_env(
            "STRAVA_AUTH_CACHE_FILE", default="strava-auth.json", getenv=getenv
        )

        return cls(
            strava_client_id=_str_env("STRAVA_CLIENT_ID", "CLIENT_ID", getenv=getenv),
            strava_client_secret=_str_env("STRAVA_CLIENT_SECRET", "CLIENT_SECRET", getenv=getenv),
            strava_access_token=_optional_str_env("STRAVA_ACCESS_TOKEN", "ACCESS_TOKEN", getenv=getenv),
            strava_refresh_token=_optional_str_env("STRAVA_REFRESH_TOKEN", "REFRESH_TOKEN", getenv=getenv),
            strava_athlete_id=_str_env("STRAVA_ATHLETE_ID", getenv=getenv),
            github_token=_str_env("GH_TOKEN", "GITHUB_TOKEN", getenv=getenv),
            gist_id=_str_env("GIST_ID", getenv=getenv),
            gist_title=_str_env("GIST_TITLE", default=DEFAULT_GIST_TITLE, getenv=getenv) or DEFAULT_GIST_TITLE,
            units=_str_env("UNITS", default="meters", getenv=getenv).lower(),
            timezone=_str_env("TIMEZONE", "TZ", default="UTC", getenv=getenv),
            log_level=_str_env("LOG_LEVEL", default="INFO", getenv=getenv).upper(),
            recent_activity_count=_int_env(
                "STRAVA_RECENT_ACTIVITY_COUNT",
                DEFAULT_RECENT_ACTIVITY_COUNT,
                minimum=1,
                maximum=200,
                getenv=getenv,
            ),
            state_dir=state_dir,
            strava_auth_cache_file=strava_auth_cache_file,
        )

    def validate(self) -> None:
        # The refresh token may come from the auth cache, so it is checked
        # after the cache overlay instead of here.
        missing = []
        if not self.strava_client_id:
            missing.append("STRAVA_CLIENT_ID (or CLIENT_ID)")
        if not self.strava_client_secret:
            missing.append("STRAVA_CLIENT_SECRET (or CLIENT_SECRET)")
        if not self.strava_athlete_id:
            missing.append("STRAVA_ATHLETE_ID")
        if not self.gist_id:
            missing.append("GIST_ID")
        if not self.github_token:
            missing.append("GH_TOKEN (or GITHUB_TOKEN)")
        if missing:
            missing_str = ", ".join(missing)
            raise ConfigurationError(f"Missing required environment variables: {missing_str}")

    def ensure_state_paths(self) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
