from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import altair as alt
import pandas as pd

from core.charts import box_plot_chart, to_vega_spec
from core.filters import DashboardFilters
from core.stats import average_by_date, box_plot_by_date, histogram_bins


def _metric_value(value: Optional[float]) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def compute_overview(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    employees: pd.DataFrame = ctx.get("filtered_employees", pd.DataFrame())
    sleep: pd.DataFrame = ctx.get("filtered_sleep", pd.DataFrame())

    if sleep.empty:
        return {
            "filters": asdict(filters),
            "kpis": {"employees": int(len(employees)), "records": 0, "days": 0, "avg_duration": None, "avg_efficiency": None},
            "average_by_date": [],
            "box_plot": [],
            "histogram": histogram_bins([]),
            "charts": {},
        }

    averages = average_by_date(sleep)
    box_plot = box_plot_by_date(sleep)
    histogram = histogram_bins(sleep["duration"].tolist())

    kpis = {
        "employees": int(len(employees)),
        "records": int(len(sleep)),
        "days": int(sleep["date"].nunique()),
        "avg_duration": _metric_value(sleep["duration"].mean()),
        "avg_efficiency": _metric_value(sleep["efficiency"].mean()),
    }

    avg_df = pd.DataFrame(averages)
    avg_hover = alt.selection_point(fields=["date"], on="mouseover", empty="all")
    line_avg = (
        alt.Chart(avg_df)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("date:T", title="Date", axis=alt.Axis(format="%b %d", grid=False)),
            y=alt.Y("average:Q", title="Average Sleep (hours)", scale=alt.Scale(domain=[4, 10]), axis=alt.Axis(gridDash=[4, 4], domain=False, ticks=False)),
            opacity=alt.condition(avg_hover, alt.value(1), alt.value(0.4)),
            tooltip=[alt.Tooltip("date:T", format="%Y-%m-%d"), alt.Tooltip("average:Q", format=".2f", title="Average (h)")],
        )
        .add_params(avg_hover)
        .properties(height=260)
    )

    hist_df = pd.DataFrame(histogram)
    bars = (
        alt.Chart(hist_df)
        .mark_bar(color="#82ca9d")
        .encode(
            x=alt.X("bin:N", title="Sleep Duration (hours)", sort=None),
            y=alt.Y("count:Q", title="Number of Employees"),
            tooltip=[alt.Tooltip("bin:N", title="Duration"), alt.Tooltip("count:Q", title="Count")],
        )
        .properties(height=260)
    )

    charts = {
        "average_trend": to_vega_spec(line_avg),
        "distribution_box_plot": to_vega_spec(box_plot_chart(box_plot, "date", "Date")),
        "duration_histogram": to_vega_spec(bars),
    }

    return {
        "filters": asdict(filters),
        "kpis": kpis,
        "average_by_date": averages,
        "box_plot": box_plot,
        "histogram": histogram,
        "charts": charts,
    }
