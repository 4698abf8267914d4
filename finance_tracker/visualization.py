"""Plotly visualisation helpers for the finance tracker.

Each function accepts the output of :mod:`finance_tracker.aggregation`
or :mod:`finance_tracker.budget_status` and returns a
``plotly.graph_objects.Figure`` that Streamlit renders with
``st.plotly_chart``.  Empty inputs produce an empty figure titled
"No data to display" rather than raising.
"""

from __future__ import annotations

from typing import Dict, Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .aggregation import MonthlyTotal
from .budget_status import BudgetStatus, BudgetTier
from .models import CATEGORY_COLORS, ExpenseCategory

TIER_COLORS: Dict[BudgetTier, str] = {
    BudgetTier.SAFE: '#22c55e',
    BudgetTier.WARNING: '#eab308',
    BudgetTier.DANGER: '#f97316',
    BudgetTier.EXCEEDED: '#ef4444',
}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_category_pie(breakdown: Dict[ExpenseCategory, float], title: str | None = None) -> go.Figure:
    """Donut chart of spend per category; zero categories are left out.

    Parameters
    ----------
    breakdown : dict
        Mapping of category to total, as returned by
        :func:`finance_tracker.aggregation.category_breakdown`.
    title : str, optional
        Chart title.
    """
    df = pd.DataFrame(
        [{'Category': c.value, 'Amount': v} for c, v in breakdown.items() if v > 0],
        columns=['Category', 'Amount'],
    )
    if df.empty:
        return _empty_figure()
    fig = px.pie(
        df,
        names='Category',
        values='Amount',
        hole=0.45,
        color='Category',
        color_discrete_map={c.value: color for c, color in CATEGORY_COLORS.items()},
    )
    fig.update_layout(title=title or "Spending by category")
    return fig


def create_monthly_trend_chart(trend: Sequence[MonthlyTotal], title: str | None = None) -> go.Figure:
    """Bar chart of the monthly totals, oldest month on the left."""
    if not trend:
        return _empty_figure()
    df = pd.DataFrame({'Month': [t.month for t in trend], 'Amount': [t.amount for t in trend]})
    fig = px.bar(df, x='Month', y='Amount')
    fig.update_traces(marker_color='#3b82f6')
    fig.update_layout(
        title=title or "Last 6 months",
        xaxis_title="Month",
        yaxis_title="Amount",
    )
    return fig


def create_budget_progress_chart(statuses: Sequence[BudgetStatus], title: str | None = None) -> go.Figure:
    """Horizontal bars of percent-of-budget spent, coloured by status tier.

    Bars are clamped at 100%; the hover text shows the real percentage.
    """
    if not statuses:
        return _empty_figure()
    fig = go.Figure(
        go.Bar(
            x=[s.bar_percentage for s in statuses],
            y=[s.category.value for s in statuses],
            orientation='h',
            marker_color=[TIER_COLORS[s.status] for s in statuses],
            hovertext=[f"{s.percentage:.1f}% of {s.budgeted:,.2f}" for s in statuses],
        )
    )
    fig.update_layout(
        title=title or "Budget usage this month",
        xaxis=dict(title="% of budget", range=[0, 100]),
    )
    return fig
