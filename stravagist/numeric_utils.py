from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


METERS_TO_KM = 0.001
METERS_TO_MILES = 0.000621371192
METERS_PER_KM = 1000.0
METERS_PER_MILE = 1609.34


@dataclass(frozen=True)
class DistanceUnit:
    label: str
    per_meter: float
    meters_per_unit: float


KILOMETERS = DistanceUnit(label="km", per_meter=METERS_TO_KM, meters_per_unit=METERS_PER_KM)
MILES = DistanceUnit(label="mi", per_meter=METERS_TO_MILES, meters_per_unit=METERS_PER_MILE)


def resolve_distance_unit(units: str | None) -> DistanceUnit:
    """``miles`` selects miles; ``meters`` and anything else report kilometers."""
    if isinstance(units, str) and units.strip().lower() == "miles":
        return MILES
    return KILOMETERS


def as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        parsed = float(value)
        return parsed if math.isfinite(parsed) else None
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def as_int(value: Any) -> int | None:
    parsed = as_float(value)
    if parsed is None:
        return None
    return int(round(parsed))


def format_distance(meters: Any, unit: DistanceUnit, *, include_unit: bool = True) -> str:
    value = f"{(as_float(meters) or 0.0) * unit.per_meter:.2f}"
    if include_unit:
        return f"{value} {unit.label}"
    return value


def format_duration(seconds: Any) -> str:
    """Render a duration as ``H:MM``; seconds are dropped."""
    total = max(0, int(as_float(seconds) or 0))
    hours = total // 3600
    minutes = (total % 3600) // 60
    return f"{hours}:{minutes:02d}"


def calculate_pace(distance_meters: Any, seconds: Any, unit: DistanceUnit) -> str:
    distance = as_float(distance_meters)
    elapsed = as_float(seconds)
    if not distance or not elapsed or distance <= 0 or elapsed <= 0:
        return f"0:00/{unit.label}"

    pace_seconds = elapsed / (distance / unit.meters_per_unit)
    minutes = int(pace_seconds // 60)
    remaining = int(pace_seconds % 60)
    return f"{minutes}:{remaining:02d}/{unit.label}"
