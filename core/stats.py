"""Aggregations over sleep records.

Every function here is pure: it reads the frame it is given (or the full
generated dataset when none is passed) and returns new plain-Python records
ready for JSON encoding.
"""

from __future__ import annotations

import math
from datetime import date
from typing import Any, Dict, Iterable, List, Literal, Optional, Sequence

import pandas as pd

from core.data import load_dataset
from core.errors import InvalidInputError

Period = Literal["week", "month", "all"]
PERIODS = ("week", "month", "all")

# Fixed English names so period keys never depend on the host locale.
MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

HISTOGRAM_MIN = 4.0
HISTOGRAM_MAX = 10.0
HISTOGRAM_BIN_SIZE = 0.5


def _sleep_or_default(sleep: Optional[pd.DataFrame]) -> pd.DataFrame:
    if sleep is None:
        return load_dataset().sleep_frame()
    return sleep


def mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        raise InvalidInputError("Cannot average an empty series")
    return sum(values) / len(values)


def population_variance(values: Sequence[float], mean: float) -> float:
    """Mean squared deviation from ``mean`` (divides by n, not n - 1)."""
    if len(values) == 0:
        raise InvalidInputError("Cannot compute the variance of an empty series")
    return sum((v - mean) ** 2 for v in values) / len(values)


def quartiles(values: Iterable[float]) -> Dict[str, float]:
    """Five-number summary used by the box plots.

    Q1/Q3 sit at floor(n/4) and floor(3n/4); when n is a multiple of 4 both are
    averaged with the preceding element. This is not one of the textbook
    quartile methods, but every chart is calibrated against it.
    """
    data = sorted(float(v) for v in values)
    n = len(data)
    if n == 0:
        raise InvalidInputError("Cannot compute quartiles of an empty series")

    if n % 2 == 0:
        median = (data[n // 2 - 1] + data[n // 2]) / 2
    else:
        median = data[n // 2]

    q1_index = n // 4
    q3_index = (n * 3) // 4
    if n % 4 == 0:
        q1 = (data[q1_index - 1] + data[q1_index]) / 2
        q3 = (data[q3_index - 1] + data[q3_index]) / 2
    else:
        q1 = data[q1_index]
        q3 = data[q3_index]

    return {"min": data[0], "q1": q1, "median": median, "q3": q3, "max": data[-1]}


def average_by_date(sleep: Optional[pd.DataFrame] = None) -> List[Dict[str, Any]]:
    df = _sleep_or_default(sleep)
    if df.empty:
        return []
    grouped = df.groupby("date", sort=False)["duration"].apply(list)
    rows = [{"date": d, "average": mean(durations)} for d, durations in grouped.items()]
    # Group order follows the input, so sort on the parsed date explicitly.
    return sorted(rows, key=lambda r: date.fromisoformat(r["date"]))


def distribution_for_date(day: str, sleep: Optional[pd.DataFrame] = None) -> List[float]:
    df = _sleep_or_default(sleep)
    if df.empty:
        return []
    return [float(v) for v in df.loc[df["date"] == day, "duration"].tolist()]


def distribution_by_date(sleep: Optional[pd.DataFrame] = None) -> List[Dict[str, Any]]:
    df = _sleep_or_default(sleep)
    if df.empty:
        return []
    grouped = df.groupby("date", sort=False)["duration"].apply(list)
    return [{"date": d, "durations": [float(v) for v in durations]} for d, durations in grouped.items()]


def box_plot_by_date(sleep: Optional[pd.DataFrame] = None) -> List[Dict[str, Any]]:
    return [{"date": item["date"], **quartiles(item["durations"])} for item in distribution_by_date(sleep)]


def observations_for_employee(employee_id: int, sleep: Optional[pd.DataFrame] = None) -> List[Dict[str, Any]]:
    df = _sleep_or_default(sleep)
    if df.empty:
        return []
    return df[df["employee_id"] == int(employee_id)].to_dict(orient="records")


def week_of_month(day: date) -> int:
    # Weeks start on Sunday; the first (partial) week of the month is week 1.
    first_weekday = (day.replace(day=1).weekday() + 1) % 7
    return math.ceil((day.day + first_weekday) / 7)


def period_key(day: date, period: str) -> str:
    if period == "week":
        return f"Week {week_of_month(day)}, {day.year}"
    if period == "month":
        return f"{MONTH_NAMES[day.month - 1]} {day.year}"
    if period == "all":
        return "All Time"
    raise InvalidInputError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}")


def group_by_period(records: Iterable[Dict[str, Any]], period: str) -> Dict[str, List[float]]:
    if period not in PERIODS:
        raise InvalidInputError(f"Unknown period {period!r}; expected one of {', '.join(PERIODS)}")
    groups: Dict[str, List[float]] = {}
    for rec in records:
        key = period_key(date.fromisoformat(rec["date"]), period)
        groups.setdefault(key, []).append(float(rec["duration"]))
    return groups


def stats_for_employee_by_period(
    employee_id: int,
    period: Period,
    sleep: Optional[pd.DataFrame] = None,
) -> List[Dict[str, Any]]:
    """Average, population variance, min, max and count per period bucket.

    Buckets come back in the order they are first seen, not sorted.
    """
    groups = group_by_period(observations_for_employee(employee_id, sleep), period)
    out: List[Dict[str, Any]] = []
    for key, durations in groups.items():
        avg = mean(durations)
        out.append(
            {
                "period": key,
                "average": avg,
                "variance": population_variance(durations, avg),
                "min": min(durations),
                "max": max(durations),
                "count": len(durations),
            }
        )
    return out


def _format_bound(value: float) -> str:
    return f"{value:g}"


def histogram_bins(
    durations: Iterable[float],
    *,
    lower: float = HISTOGRAM_MIN,
    upper: float = HISTOGRAM_MAX,
    bin_size: float = HISTOGRAM_BIN_SIZE,
) -> List[Dict[str, Any]]:
    """Count durations into half-open bins [start, start + bin_size).

    Values outside [lower, upper) are dropped, so a duration of exactly ``upper`` is not counted.
    """
    n_bins = int(round((upper - lower) / bin_size))
    counts = [0] * n_bins
    for d in durations:
        if lower <= d < upper:
            counts[int((d - lower) // bin_size)] += 1
    return [
        {
            "bin": f"{_format_bound(lower + i * bin_size)}-{_format_bound(lower + (i + 1) * bin_size)}",
            "start": lower + i * bin_size,
            "end": lower + (i + 1) * bin_size,
            "count": counts[i],
        }
        for i in range(n_bins)
    ]


def employee_summaries(employees: pd.DataFrame, sleep: pd.DataFrame) -> List[Dict[str, Any]]:
    """One row per employee with sleep in ``sleep``; employees without records are skipped."""
    if employees.empty or sleep.empty:
        return []
    durations_by_employee = sleep.groupby("employee_id", sort=False)["duration"].apply(list).to_dict()
    out: List[Dict[str, Any]] = []
    for emp in employees.to_dict(orient="records"):
        durations = durations_by_employee.get(emp["id"])
        if not durations:
            continue
        avg = mean(durations)
        out.append(
            {
                "employee_id": int(emp["id"]),
                "name": emp["name"],
                "department": emp["department"],
                "gender": emp["gender"],
                "age": int(emp["age"]),
                "height": int(emp["height"]),
                "weight": int(emp["weight"]),
                "average": avg,
                "variance": population_variance(durations, avg),
                "count": len(durations),
                **quartiles(durations),
            }
        )
    return out
