from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

DEPARTMENT_COLORS = {
    "Engineering": "#8884d8",
    "Marketing": "#82ca9d",
    "Sales": "#ffc658",
    "HR": "#ff8042",
    "Finance": "#0088fe",
}


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def box_plot_chart(rows: List[Dict[str, Any]], x_field: str, x_title: str, x_type: str = "O") -> alt.LayerChart:
    """Pre-aggregated box plot: whiskers min..max, box q1..q3, tick at the median."""
    df = pd.DataFrame(rows)
    base = alt.Chart(df).encode(x=alt.X(f"{x_field}:{x_type}", title=x_title, axis=alt.Axis(grid=False)))
    whisker = base.mark_rule(strokeDash=[3, 3]).encode(
        y=alt.Y("min:Q", title="Sleep Duration (hours)", scale=alt.Scale(domain=[4, 10])),
        y2="max:Q",
    )
    box = base.mark_bar(size=14, opacity=0.5, color="#8884d8").encode(y="q1:Q", y2="q3:Q")
    median = base.mark_tick(color="#4c4ab0", size=14, thickness=2).encode(
        y="median:Q",
        tooltip=[
            alt.Tooltip(f"{x_field}:{x_type}", title=x_title),
            alt.Tooltip("min:Q", format=".2f"),
            alt.Tooltip("q1:Q", format=".2f"),
            alt.Tooltip("median:Q", format=".2f"),
            alt.Tooltip("q3:Q", format=".2f"),
            alt.Tooltip("max:Q", format=".2f"),
        ],
    )
    return (whisker + box + median).properties(height=260)
