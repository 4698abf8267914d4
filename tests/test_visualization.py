from datetime import date

import plotly.graph_objects as go

from finance_tracker import visualization as viz
from finance_tracker.aggregation import monthly_trend
from finance_tracker.budget_status import evaluate
from finance_tracker.models import ExpenseCategory


def test_empty_inputs_give_placeholder_figures():
    for fig in (
        viz.create_category_pie({c: 0.0 for c in ExpenseCategory}),
        viz.create_monthly_trend_chart([]),
        viz.create_budget_progress_chart([]),
    ):
        assert isinstance(fig, go.Figure)
        assert fig.layout.title.text == "No data to display"


def test_category_pie_skips_zero_categories():
    breakdown = {c: 0.0 for c in ExpenseCategory}
    breakdown[ExpenseCategory.FOOD] = 30.0
    breakdown[ExpenseCategory.BILLS] = 70.0
    fig = viz.create_category_pie(breakdown)
    labels = [label for trace in fig.data for label in trace.labels]
    assert sorted(labels) == ['Bills', 'Food']


def test_monthly_trend_chart_has_six_bars():
    fig = viz.create_monthly_trend_chart(monthly_trend([], today=date(2025, 3, 15)))
    assert list(fig.data[0].x) == ['Oct', 'Nov', 'Dec', 'Jan', 'Feb', 'Mar']


def test_budget_progress_chart_clamps_and_colours():
    statuses = [evaluate('Food', 100, 50), evaluate('Bills', 100, 150)]
    fig = viz.create_budget_progress_chart(statuses)
    bar = fig.data[0]
    assert list(bar.x) == [50.0, 100.0]
    assert list(bar.marker.color) == [viz.TIER_COLORS[s.status] for s in statuses]
