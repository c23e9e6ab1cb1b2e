from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from dateutil import parser as date_parser

from ..numeric_utils import as_float, as_int
from .discipline_totals import DISCIPLINES


logger = logging.getLogger(__name__)

RECENT_TOTALS_KEYS = tuple(discipline.recent_key for discipline in DISCIPLINES)


@dataclass(frozen=True)
class PeriodSummary:
    distance: float
    moving_time: int
    count: int


def parse_start_date(activity: dict[str, Any]) -> datetime | None:
    raw = activity.get("start_date")
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        parsed = date_parser.isoparse(raw)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def summarize_recent_days(
    activities: list[dict[str, Any]] | None,
    now_utc: datetime | None = None,
    days: int = 7,
) -> PeriodSummary:
    """Sum distance, moving time and count over the trailing ``days``.

    The lower bound ``now - days`` is inclusive.
    """
    now_utc = now_utc or datetime.now(timezone.utc)
    window_start = now_utc - timedelta(days=days)

    distance = 0.0
    moving_time = 0
    count = 0
    for activity in activities or []:
        start_time = parse_start_date(activity)
        if start_time is None:
            logger.debug("Skipping activity without a usable start_date: %s", activity.get("name"))
            continue
        if start_time < window_start:
            continue
        distance += as_float(activity.get("distance")) or 0.0
        moving_time += as_int(activity.get("moving_time")) or 0
        count += 1

    return PeriodSummary(distance=distance, moving_time=moving_time, count=count)


def summarize_recent_totals(payload: dict[str, Any] | None) -> PeriodSummary:
    """Sum the ``recent_<discipline>_totals`` blocks (the last four weeks).

    ``count`` holds the summed achievement count.
    """
    distance = 0.0
    moving_time = 0
    achievements = 0
    if not isinstance(payload, dict):
        return PeriodSummary(distance=distance, moving_time=moving_time, count=achievements)

    for key in RECENT_TOTALS_KEYS:
        if key not in payload:
            continue
        block = payload[key]
        if not isinstance(block, dict):
            logger.warning("Ignoring %s: expected an object, got %s", key, type(block).__name__)
            continue
        # Each field falls back to 0 on its own.
        distance += as_float(block.get("distance")) or 0.0
        moving_time += as_int(block.get("moving_time")) or 0
        achievements += as_int(block.get("achievement_count")) or 0

    return PeriodSummary(distance=distance, moving_time=moving_time, count=achievements)
