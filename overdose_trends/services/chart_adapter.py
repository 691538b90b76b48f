"""
overdose_trends/services/chart_adapter.py

Maps an AggregationResult onto plotly trace and layout structures.

Traces and layout are built as plain dicts so they can be asserted on and
serialised without plotly; ``build_figure`` wraps them for rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from overdose_trends.domain.overdose_series import AggregationResult, ColumnMapping

# Plotly default qualitative palette; index = series position, reused cyclically.
TRACE_COLORS: tuple[str, ...] = (
    "#1f77b4",
    "#ff7f0e",
    "#2ca02c",
    "#d62728",
    "#9467bd",
    "#8c564b",
    "#e377c2",
    "#7f7f7f",
    "#bcbd22",
    "#17becf",
)

FIXED_SCHEMA_AXIS_TITLES: tuple[str, str] = (
    "Month ending date",
    "Drug overdose deaths (12-month ending)",
)

LEGEND_TITLE = "Drug (click to hide/show)"


@dataclass(frozen=True)
class ChartSpec:
    """
    Renderer-agnostic chart description.
    """

    traces: list[dict[str, Any]] = field(default_factory=list)
    layout: dict[str, Any] | None = None
    used_rows: int = 0
    dropped_rows: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.traces


def axis_title(column: str, fallback: str) -> str:
    """
    Human-readable axis title derived from a column name.
    """

    text = " ".join(column.replace("_", " ").split())
    if not text:
        return fallback
    return text[:1].upper() + text[1:]


def color_for(index: int) -> str:
    return TRACE_COLORS[index % len(TRACE_COLORS)]


def build_traces(result: AggregationResult) -> list[dict[str, Any]]:
    traces: list[dict[str, Any]] = []
    for index, series in enumerate(result.series):
        color = color_for(index)
        traces.append(
            {
                "name": series.drug,
                "type": "scatter",
                "mode": "lines+markers",
                "x": series.dates,
                "y": series.values,
                "line": {"color": color, "width": 2},
                "marker": {"color": color, "size": 5},
                "hovertemplate": f"<b>{series.drug}</b><br>%{{x}}: %{{y}}<extra></extra>",
            }
        )
    return traces


def build_layout(*, x_title: str, y_title: str) -> dict[str, Any]:
    return {
        "title": {"text": ""},
        "paper_bgcolor": "rgba(0,0,0,0)",
        "plot_bgcolor": "rgba(0,0,0,0)",
        "margin": {"l": 55, "r": 170, "t": 16, "b": 55},
        "xaxis": {"title": {"text": x_title}, "automargin": True},
        "yaxis": {"title": {"text": y_title}, "automargin": True},
        "legend": {
            "title": {"text": LEGEND_TITLE},
            "orientation": "v",
            "x": 1.02,
            "xanchor": "left",
            "y": 1,
            "yanchor": "top",
            "itemsizing": "constant",
        },
        "hovermode": "x unified",
    }


def build_chart_spec(
    result: AggregationResult,
    mapping: ColumnMapping,
    *,
    axis_titles: tuple[str, str] | None = None,
) -> ChartSpec:
    """
    Build traces and layout for ``result``; an empty result yields no layout.
    """

    traces = build_traces(result)
    if not traces:
        return ChartSpec(used_rows=result.used_rows, dropped_rows=result.dropped_rows)

    x_title, y_title = axis_titles or (
        axis_title(mapping.date, "Date"),
        axis_title(mapping.value, "Value"),
    )
    return ChartSpec(
        traces=traces,
        layout=build_layout(x_title=x_title, y_title=y_title),
        used_rows=result.used_rows,
        dropped_rows=result.dropped_rows,
    )


def build_figure(spec: ChartSpec):
    """
    Wrap a chart spec in a ``plotly.graph_objects.Figure``.
    """

    import plotly.graph_objects as go  # noqa: PLC0415

    return go.Figure(data=spec.traces, layout=spec.layout or {})
