from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..numeric_utils import as_float, as_int


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Discipline:
    name: str
    stats_key: str

    @property
    def ytd_key(self) -> str:
        return f"ytd_{self.stats_key}_totals"

    @property
    def recent_key(self) -> str:
        return f"recent_{self.stats_key}_totals"


DISCIPLINES = (
    Discipline(name="Running", stats_key="run"),
    Discipline(name="Swimming", stats_key="swim"),
    Discipline(name="Cycling", stats_key="ride"),
)


@dataclass(frozen=True)
class ActivityTotals:
    distance: float
    moving_time: int
    achievement_count: int = 0


@dataclass(frozen=True)
class TotalsLookup:
    totals: ActivityTotals | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.totals is not None


@dataclass(frozen=True)
class DisciplineSummary:
    name: str
    distance: float
    pace: float


def lookup_totals(payload: dict[str, Any] | None, key: str) -> TotalsLookup:
    if not isinstance(payload, dict):
        return TotalsLookup(error="stats payload is not an object")
    raw = payload.get(key)
    if not isinstance(raw, dict):
        return TotalsLookup(error=f"{key} missing from stats payload")

    distance = as_float(raw.get("distance"))
    moving_time = as_int(raw.get("moving_time"))
    if distance is None or moving_time is None:
        return TotalsLookup(error=f"{key} has no numeric distance/moving_time")

    return TotalsLookup(
        totals=ActivityTotals(
            distance=distance,
            moving_time=moving_time,
            achievement_count=as_int(raw.get("achievement_count")) or 0,
        )
    )


def summarize_disciplines(payload: dict[str, Any] | None) -> tuple[list[DisciplineSummary], float]:
    """Per-discipline distance and hourly pace from the year-to-date totals.

    Returns the summaries in display order plus the total distance across
    disciplines. A discipline that cannot be read is reported as zero.
    """
    summaries: list[DisciplineSummary] = []
    total_distance = 0.0
    for discipline in DISCIPLINES:
        lookup = lookup_totals(payload, discipline.ytd_key)
        if not lookup.ok:
            logger.error("Unable to get distance for %s: %s", discipline.name, lookup.error)
            summaries.append(DisciplineSummary(name=discipline.name, distance=0.0, pace=0.0))
            continue

        totals = lookup.totals
        total_distance += totals.distance
        summaries.append(
            DisciplineSummary(
                name=discipline.name,
                distance=totals.distance,
                pace=totals.distance * 3600 / (totals.moving_time or 1),
            )
        )
    return summaries, total_distance
