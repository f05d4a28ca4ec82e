from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.charts import DEPARTMENT_COLORS, box_plot_chart, to_vega_spec
from core.filters import DashboardFilters
from core.stats import (
    employee_summaries,
    group_by_period,
    observations_for_employee,
    quartiles,
    stats_for_employee_by_period,
)


def compute_individual(filters: DashboardFilters, ctx: Dict[str, Any]) -> Dict[str, Any]:
    employees: pd.DataFrame = ctx.get("filtered_employees", pd.DataFrame())
    sleep: pd.DataFrame = ctx.get("filtered_sleep", pd.DataFrame())

    summaries = employee_summaries(employees, sleep)
    if not summaries:
        return {"filters": asdict(filters), "employees": [], "charts": {}}

    df = pd.DataFrame(summaries)
    color = alt.Color(
        "department:N",
        title="Department",
        scale=alt.Scale(domain=list(DEPARTMENT_COLORS), range=list(DEPARTMENT_COLORS.values())),
    )

    scatter = (
        alt.Chart(df)
        .mark_circle(opacity=0.8)
        .encode(
            x=alt.X("average:Q", title="Average Sleep Duration (hours)", scale=alt.Scale(domain=[4, 10])),
            y=alt.Y("variance:Q", title="Sleep Variance"),
            size=alt.Size("count:Q", title="Data Points", scale=alt.Scale(range=[20, 100])),
            color=color,
            tooltip=[
                "name:N",
                alt.Tooltip("average:Q", format=".2f", title="Average (h)"),
                alt.Tooltip("variance:Q", format=".2f"),
                alt.Tooltip("count:Q", title="Data Points"),
            ],
        )
        .properties(height=300)
    )

    average_line = (
        alt.Chart(df)
        .mark_line(point={"filled": True}, color="#8884d8")
        .encode(
            x=alt.X("employee_id:O", title="Employee ID", axis=alt.Axis(grid=False)),
            y=alt.Y("average:Q", title="Average Sleep (hours)", scale=alt.Scale(domain=[4, 10])),
            tooltip=["name:N", "department:N", alt.Tooltip("average:Q", format=".2f")],
        )
        .properties(height=260)
    )

    charts = {
        "average_vs_variance": to_vega_spec(scatter),
        "average_comparison": to_vega_spec(average_line),
        "box_plot_comparison": to_vega_spec(box_plot_chart(summaries, "employee_id", "Employee ID")),
    }
    return {"filters": asdict(filters), "employees": summaries, "charts": charts}


def compute_employee_detail(employee_id: int, period: str, ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Drill-down for one employee over the full window (filters do not apply here)."""
    employees: pd.DataFrame = ctx.get("employees", pd.DataFrame())
    sleep: pd.DataFrame = ctx.get("sleep", pd.DataFrame())

    # Validates the period even when the employee is unknown.
    stats = stats_for_employee_by_period(employee_id, period, sleep)

    match = employees[employees["id"] == int(employee_id)] if not employees.empty else employees
    if match.empty:
        return {"employee": None, "period": period, "stats": [], "box_plot": [], "line": [], "records": []}

    records = observations_for_employee(employee_id, sleep)
    box_plot: List[Dict[str, Any]] = [
        {"period": key, **quartiles(durations)} for key, durations in group_by_period(records, period).items()
    ]
    line = [{"period": s["period"], "average": s["average"]} for s in stats]

    return {
        "employee": match.to_dict(orient="records")[0],
        "period": period,
        "stats": stats,
        "box_plot": box_plot,
        "line": line,
        "records": records,
    }
