from __future__ import annotations

import argparse
import logging
from datetime import datetime, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .config import Settings
from .gist_client import GistClient
from .numeric_utils import resolve_distance_unit
from .report import build_report
from .strava_client import StravaClient


logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def _resolve_local_tz(settings: Settings) -> tzinfo:
    try:
        return ZoneInfo(settings.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone '%s'. Falling back to UTC.", settings.timezone)
        return timezone.utc


def run_once(
    settings: Settings | None = None,
    *,
    dry_run: bool = False,
    strava_client: StravaClient | None = None,
    gist_client: GistClient | None = None,
) -> dict[str, Any]:
    settings = settings or Settings.from_env()
    _configure_logging(settings.log_level)
    settings.validate()
    settings.ensure_state_paths()

    logger.info("Starting gist update.")
    strava_client = strava_client or StravaClient(settings)
    # Refreshed on every run; the rotated pair is cached before anything else can fail.
    strava_client.refresh_access_token()

    stats = strava_client.get_athlete_stats()
    activities = strava_client.get_recent_activities(per_page=settings.recent_activity_count)
    logger.info("Fetched athlete stats and %s recent activities.", len(activities or []))

    content = build_report(
        stats,
        activities,
        resolve_distance_unit(settings.units),
        now_utc=datetime.now(timezone.utc),
        local_tz=_resolve_local_tz(settings),
    )
    line_count = len(content.splitlines())

    if dry_run:
        logger.info("Dry run, gist %s not updated:\n%s", settings.gist_id, content)
        return {"status": "dry_run", "gist_id": settings.gist_id, "line_count": line_count}

    gist_client = gist_client or GistClient(settings)
    gist_client.update_gist(content, settings.gist_title)
    return {"status": "updated", "gist_id": settings.gist_id, "line_count": line_count}


def main() -> None:
    parser = argparse.ArgumentParser(description="Publish a Strava stats summary to a GitHub gist.")
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Build the report and log it without updating the gist.",
    )
    args = parser.parse_args()
    result = run_once(dry_run=args.dry_run)
    logger.info("Run result: %s", result)


if __name__ == "__main__":
    main()
