from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

PAYMENT_DOMAIN = ["Paid", "Open"]
PAYMENT_RANGE = ["#16a34a", "#d97706"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def instructor_bar_chart(df: pd.DataFrame) -> alt.Chart:
    """Bar chart of ``label``/``count`` rows, kept in input order."""
    return (
        alt.Chart(df)
        .mark_bar(cornerRadiusTopLeft=6, cornerRadiusTopRight=6)
        .encode(
            x=alt.X("label:N", title=None, sort=None),
            y=alt.Y("count:Q", title="Courses", axis=alt.Axis(tickMinStep=1, format="d")),
            tooltip=["label", "count"],
        )
        .properties(height=250)
    )


def payment_donut_chart(df: pd.DataFrame) -> alt.Chart:
    return (
        alt.Chart(df)
        .mark_arc(innerRadius=50, outerRadius=80, padAngle=0.04)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("status:N", scale=alt.Scale(domain=PAYMENT_DOMAIN, range=PAYMENT_RANGE), legend=None),
            tooltip=["status", "value"],
        )
        .properties(height=200)
    )
