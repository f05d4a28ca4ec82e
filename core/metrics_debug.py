from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict

import pandas as pd

from core.filters import GENDER_OPTIONS, DashboardFilters


def compute_debug(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    employees: pd.DataFrame = ctx.get("employees", pd.DataFrame()).copy()
    sleep: pd.DataFrame = ctx.get("sleep", pd.DataFrame()).copy()
    payload = {
        "filters": asdict(filters),
        "row_counts": {
            "employees": int(len(employees)),
            "sleep_records": int(len(sleep)),
            "filtered_employees": int(len(ctx.get("filtered_employees", pd.DataFrame()))),
            "filtered_sleep_records": int(len(ctx.get("filtered_sleep", pd.DataFrame()))),
        },
        "gender_counts": {g: 0 for g in GENDER_OPTIONS},
        "date_coverage": {},
        "records_per_employee": {},
        "range_checks": {},
    }

    if not employees.empty:
        counts = employees["gender"].value_counts()
        payload["gender_counts"] = {g: int(counts.get(g, 0)) for g in GENDER_OPTIONS}

    if sleep.empty:
        return payload

    per_employee = sleep.groupby("employee_id").size()
    payload["records_per_employee"] = {
        "min": int(per_employee.min()),
        "max": int(per_employee.max()),
    }

    dates = pd.to_datetime(sleep["date"])
    span = (dates.max() - dates.min()).days + 1
    payload["date_coverage"] = {
        "first": dates.min().date().isoformat(),
        "last": dates.max().date().isoformat(),
        "distinct_days": int(dates.nunique()),
        "gaps": int(span - dates.nunique()),
    }

    # Light sleep is derived, not clamped, so it is the one stage that can leave [0, 100].
    stage_sum = sleep["deep_sleep_pct"] + sleep["rem_sleep_pct"] + sleep["light_sleep_pct"]
    payload["range_checks"] = {
        "duration_out_of_range": int((~sleep["duration"].between(4, 10)).sum()),
        "efficiency_out_of_range": int((~sleep["efficiency"].between(60, 98)).sum()),
        "deep_out_of_range": int((~sleep["deep_sleep_pct"].between(10, 35)).sum()),
        "rem_out_of_range": int((~sleep["rem_sleep_pct"].between(15, 30)).sum()),
        "light_out_of_range": int((~sleep["light_sleep_pct"].between(0, 100)).sum()),
        "stage_sum_mismatch": int(((stage_sum - 100).abs() > 1e-9).sum()),
    }
    return payload
