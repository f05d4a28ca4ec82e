from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Tuple

import pandas as pd

from core.errors import InvalidInputError

GENDER_OPTIONS = ("male", "female", "other")

# Slider bounds offered by the filter panel.
AGE_BOUNDS = (20, 70)
HEIGHT_BOUNDS = (140, 200)
WEIGHT_BOUNDS = (40, 120)


@dataclass(frozen=True)
class DashboardFilters:
    gender: Optional[str] = None
    age_range: Optional[Tuple[float, float]] = None
    height_range: Optional[Tuple[float, float]] = None
    weight_range: Optional[Tuple[float, float]] = None
    # (start, end); end may be None for an open window. Ignored unless start is set.
    date_range: Optional[Tuple[str, Optional[str]]] = None


def _as_range(values: Optional[Iterable[object]], name: str) -> Optional[Tuple[float, float]]:
    if values is None:
        return None
    items = list(values)
    if not items:
        return None
    if len(items) != 2:
        raise InvalidInputError(f"{name} must have exactly two bounds, got {len(items)}")
    try:
        low, high = float(items[0]), float(items[1])
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} bounds must be numeric: {items!r}") from exc
    if low > high:
        low, high = high, low
    return (low, high)


def _as_iso_date(value: object, name: str) -> Optional[str]:
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    try:
        day = date.fromisoformat(s[:10])
        # Anything after the date must be a time of day, e.g. "T00:00:00Z".
        if len(s) > 10:
            pd.Timestamp(s)
    except (ValueError, TypeError, OverflowError) as exc:
        raise InvalidInputError(f"{name} is not an ISO date: {value!r}") from exc
    return day.isoformat()


def _as_gender(value: object) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidInputError(f"gender must be a string, got {type(value).__name__}")
    return value.strip().lower() or None


def normalize_filters(raw: Optional[dict]) -> DashboardFilters:
    raw = raw or {}

    gender = _as_gender(raw.get("gender"))
    if gender is not None and gender not in GENDER_OPTIONS:
        raise InvalidInputError(f"Unknown gender {raw.get('gender')!r}; expected one of {', '.join(GENDER_OPTIONS)}")

    date_range = None
    dr = raw.get("date_range") or []
    if dr:
        dr = list(dr) + [None] * (2 - len(dr))
        start = _as_iso_date(dr[0], "date_range start")
        end = _as_iso_date(dr[1], "date_range end")
        if start is not None:
            date_range = (start, end)

    return DashboardFilters(
        gender=gender,
        age_range=_as_range(raw.get("age_range"), "age_range"),
        height_range=_as_range(raw.get("height_range"), "height_range"),
        weight_range=_as_range(raw.get("weight_range"), "weight_range"),
        date_range=date_range,
    )


def filter_employees(employees: pd.DataFrame, filters: DashboardFilters) -> pd.DataFrame:
    """Apply the biometric filters. All range bounds are inclusive."""
    if employees.empty:
        return employees
    out = employees
    if filters.gender:
        out = out[out["gender"] == filters.gender]
    for col, bounds in (
        ("age", filters.age_range),
        ("height", filters.height_range),
        ("weight", filters.weight_range),
    ):
        if bounds is not None:
            out = out[out[col].between(bounds[0], bounds[1], inclusive="both")]
    return out


def filter_sleep(sleep: pd.DataFrame, employee_ids: Iterable[int], filters: DashboardFilters) -> pd.DataFrame:
    """Keep records of the given employees, then apply the date window when a start date is set."""
    if sleep.empty:
        return sleep
    out = sleep[sleep["employee_id"].isin(set(employee_ids))]
    if filters.date_range and filters.date_range[0]:
        start, end = filters.date_range
        dates = pd.to_datetime(out["date"])
        mask = dates >= pd.Timestamp(start)
        if end:
            mask &= dates <= pd.Timestamp(end)
        out = out[mask]
    return out
