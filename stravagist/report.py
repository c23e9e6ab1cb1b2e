from __future__ import annotations

import logging
import math
from datetime import datetime, timezone, tzinfo
from typing import Any

from .numeric_utils import DistanceUnit, calculate_pace, format_distance, format_duration
from .stat_modules.discipline_totals import DisciplineSummary, summarize_disciplines
from .stat_modules.period_stats import (
    PeriodSummary,
    parse_start_date,
    summarize_recent_days,
    summarize_recent_totals,
)


logger = logging.getLogger(__name__)

BAR_GLYPHS = "░▏▎▍▌▋▊▉█"
BAR_WIDTH = 19
NAME_WIDTH = 10
DISTANCE_WIDTH = 13
PACE_WIDTH = 7
WEEK_DAYS = 7


def render_bar_chart(percent: float, size: int = BAR_WIDTH) -> str:
    """Render ``percent`` as ``size`` cells, each resolved to eighths."""
    empty, full = BAR_GLYPHS[0], BAR_GLYPHS[8]
    if not isinstance(percent, (int, float)) or not math.isfinite(percent):
        percent = 0.0
    percent = min(max(float(percent), 0.0), 100.0)

    fraction = math.floor(size * 8 * percent / 100)
    full_cells = fraction // 8
    if full_cells >= size:
        return full * size
    partial = BAR_GLYPHS[fraction % 8]
    return (full * full_cells + partial).ljust(size, empty)


def _hourly_rate(pace: float, unit: DistanceUnit) -> str:
    return f"{format_distance(pace, unit, include_unit=False)}/h"


def format_discipline_lines(summaries: list[DisciplineSummary], total_distance: float, unit: DistanceUnit) -> list[str]:
    lines = []
    for summary in summaries:
        percent = summary.distance / total_distance * 100 if total_distance > 0 else 0.0
        lines.append(
            " ".join(
                [
                    summary.name.ljust(NAME_WIDTH),
                    format_distance(summary.distance, unit).rjust(DISTANCE_WIDTH),
                    render_bar_chart(percent, BAR_WIDTH),
                    _hourly_rate(summary.pace, unit).rjust(PACE_WIDTH),
                ]
            )
        )
    return lines


def _local_date_display(activity: dict[str, Any], local_tz: tzinfo) -> str:
    start_time = parse_start_date(activity)
    if start_time is None:
        return "unknown date"
    local = start_time.astimezone(local_tz)
    return f"{local.month}/{local.day}/{local.year}"


def format_last_activity(activities: list[dict[str, Any]] | None, unit: DistanceUnit, local_tz: tzinfo) -> list[str]:
    if not activities:
        return []
    last = activities[0]
    distance = last.get("distance")
    moving_time = last.get("moving_time")
    return [
        "Last Activity:",
        f"{last.get('name', 'Untitled')} ({_local_date_display(last, local_tz)})",
        (
            f"Distance: {format_distance(distance, unit)}, "
            f"Time: {format_duration(moving_time)}, "
            f"Pace: {calculate_pace(distance, moving_time, unit)}"
        ),
    ]


def format_week_block(week: PeriodSummary, unit: DistanceUnit) -> list[str]:
    return [
        f"{WEEK_DAYS} Days:",
        f"{format_distance(week.distance, unit)}, {week.count} activities, {format_duration(week.moving_time)}",
    ]


def format_month_block(month: PeriodSummary, unit: DistanceUnit) -> list[str]:
    return [
        "Month:",
        f"{format_distance(month.distance, unit)}, {month.count} achievements, {format_duration(month.moving_time)}",
    ]


def build_report_lines(
    stats: dict[str, Any] | None,
    activities: list[dict[str, Any]] | None,
    unit: DistanceUnit,
    *,
    now_utc: datetime | None = None,
    local_tz: tzinfo = timezone.utc,
) -> list[str]:
    summaries, total_distance = summarize_disciplines(stats)
    week = summarize_recent_days(activities, now_utc=now_utc, days=WEEK_DAYS)
    month = summarize_recent_totals(stats)
    logger.debug(
        "Report inputs: total=%.1fm week=%s month=%s",
        total_distance,
        week,
        month,
    )

    return [
        *format_last_activity(activities, unit, local_tz),
        "",
        *format_week_block(week, unit),
        "",
        *format_month_block(month, unit),
        "",
        *format_discipline_lines(summaries, total_distance, unit),
    ]


def build_report(
    stats: dict[str, Any] | None,
    activities: list[dict[str, Any]] | None,
    unit: DistanceUnit,
    *,
    now_utc: datetime | None = None,
    local_tz: tzinfo = timezone.utc,
) -> str:
    return "\n".join(build_report_lines(stats, activities, unit, now_utc=now_utc, local_tz=local_tz))
