"""
tests/test_chart_adapter.py

Tests for the AggregationResult -> plotly trace/layout mapping.
"""

from __future__ import annotations

import pytest

from overdose_trends.domain.overdose_series import AggregationResult, ColumnMapping, TimeSeries
from overdose_trends.services.chart_adapter import (
    FIXED_SCHEMA_AXIS_TITLES,
    LEGEND_TITLE,
    TRACE_COLORS,
    axis_title,
    build_chart_spec,
    build_traces,
    color_for,
)

MAPPING = ColumnMapping(drug="drug", date="month_ending_date", value="drug_overdose_deaths")


def _result(drug_count: int) -> AggregationResult:
    series = tuple(
        TimeSeries(drug=f"Drug {index:02d}", points=(("2020-01-01", float(index)),))
        for index in range(drug_count)
    )
    return AggregationResult(series=series, used_rows=drug_count, dropped_rows=1)


class TestTraces:
    def test_one_trace_per_series_in_order(self) -> None:
        result = AggregationResult(
            series=(
                TimeSeries(drug="Cocaine", points=(("2020-01-01", 3.0), ("2020-02-01", 4.0))),
                TimeSeries(drug="Heroin", points=(("2020-01-01", 7.0),)),
            ),
            used_rows=3,
        )

        traces = build_traces(result)

        assert [trace["name"] for trace in traces] == ["Cocaine", "Heroin"]
        assert traces[0]["x"] == ["2020-01-01", "2020-02-01"]
        assert traces[0]["y"] == [3.0, 4.0]
        assert traces[0]["mode"] == "lines+markers"
        assert traces[0]["line"]["color"] == traces[0]["marker"]["color"] == TRACE_COLORS[0]
        assert traces[1]["line"]["color"] == TRACE_COLORS[1]

    def test_palette_is_reused_cyclically(self) -> None:
        traces = build_traces(_result(len(TRACE_COLORS) + 2))

        assert traces[len(TRACE_COLORS)]["line"]["color"] == TRACE_COLORS[0]
        assert traces[-1]["line"]["color"] == TRACE_COLORS[1]

    @pytest.mark.parametrize(("index", "expected"), [(0, "#1f77b4"), (9, "#17becf"), (10, "#1f77b4")])
    def test_color_for(self, index: int, expected: str) -> None:
        assert color_for(index) == expected


class TestChartSpec:
    def test_empty_result_has_no_layout(self) -> None:
        spec = build_chart_spec(AggregationResult(used_rows=0, dropped_rows=4), MAPPING)

        assert spec.is_empty
        assert spec.layout is None
        assert spec.dropped_rows == 4

    def test_axis_titles_follow_mapped_columns(self) -> None:
        spec = build_chart_spec(_result(1), MAPPING)

        assert spec.layout["xaxis"]["title"]["text"] == "Month ending date"
        assert spec.layout["yaxis"]["title"]["text"] == "Drug overdose deaths"
        assert spec.layout["legend"]["title"]["text"] == LEGEND_TITLE
        assert spec.layout["hovermode"] == "x unified"
        assert (spec.used_rows, spec.dropped_rows) == (1, 1)

    def test_explicit_axis_titles_win(self) -> None:
        spec = build_chart_spec(_result(1), MAPPING, axis_titles=FIXED_SCHEMA_AXIS_TITLES)

        assert spec.layout["yaxis"]["title"]["text"] == "Drug overdose deaths (12-month ending)"

    @pytest.mark.parametrize(
        ("column", "expected"),
        [("week_ending", "Week ending"), ("Deaths", "Deaths"), ("", "Value"), ("  ", "Value")],
    )
    def test_axis_title(self, column: str, expected: str) -> None:
        assert axis_title(column, "Value") == expected
