from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def trend_chart(trend: Dict[str, Any]) -> Dict[str, Any]:
    records = [
        {"year": year, "department": s["department"], "votes": value}
        for s in trend.get("series", [])
        for year, value in zip(trend.get("years", []), s["data"])
    ]
    df = pd.DataFrame(records, columns=["year", "department", "votes"])
    hover = alt.selection_point(fields=["department"], on="mouseover")
    chart = (
        alt.Chart(df)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            x=alt.X("year:O", title="Año", axis=alt.Axis(format="d", grid=False)),
            y=alt.Y("votes:Q", title="Votos", axis=alt.Axis(format="~s", gridDash=[4, 4], domain=False, ticks=False)),
            color=alt.Color("department:N", title="Departamento"),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.2)),
            tooltip=["year", "department", alt.Tooltip("votes:Q", format=",")],
        )
        .add_params(hover)
        .properties(height=260)
    )
    return to_vega_spec(chart)


def top_partidos_chart(top: Dict[str, Any]) -> Dict[str, Any]:
    df = pd.DataFrame(top.get("data", []), columns=["partido", "totalVotos", "rank"])
    chart = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("totalVotos:Q", title="Votos", axis=alt.Axis(format="~s")),
            y=alt.Y("partido:N", title=None, sort=alt.EncodingSortField(field="rank", order="ascending")),
            tooltip=["rank", "partido", alt.Tooltip("totalVotos:Q", format=",")],
        )
        .properties(height=260)
    )
    return to_vega_spec(chart)


def indicator_chart(indicators: Dict[str, Any]) -> Dict[str, Any]:
    labels = indicators.get("labels", [])
    records = [
        {"indicator": label, "department": s["department"], "value": value}
        for s in indicators.get("series", [])
        for label, value in zip(labels, s["data"])
    ]
    df = pd.DataFrame(records, columns=["indicator", "department", "value"])
    chart = (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("department:N", title=None, axis=alt.Axis(labels=False, ticks=False)),
            y=alt.Y("value:Q", title="Valor"),
            color=alt.Color("department:N", title="Departamento"),
            column=alt.Column("indicator:N", title=None, sort=labels or "ascending"),
            tooltip=["indicator", "department", alt.Tooltip("value:Q", format=",.2f")],
        )
    )
    return to_vega_spec(chart)
