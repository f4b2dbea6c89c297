"""Plotly visualisation helpers for the finance tracker.

Each function takes the output of the aggregation engine (a report, budget
lines, goal progress or a trend DataFrame) and returns a
`plotly.graph_objects.Figure` that Streamlit renders via ``st.plotly_chart``.
Empty input always produces an empty figure titled "No data to display".
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .models import BudgetLine, GoalProgress, MonthlyReport

OVER_COLOUR = '#ff6b6b'
UNDER_COLOUR = '#34c759'
NO_LIMIT_COLOUR = '#adb5bd'


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def create_category_spend_chart(report: MonthlyReport, title: str | None = None) -> go.Figure:
    """Donut chart of expense by category for one month."""
    if not report.per_category_spend:
        return _empty_figure()
    df = pd.DataFrame({
        'Category': list(report.per_category_spend.keys()),
        'Spent': [float(value) for value in report.per_category_spend.values()],
    })
    fig = px.pie(df, names='Category', values='Spent', hole=0.45)
    fig.update_layout(title=title or f"Spending by category ({report.month})")
    return fig


def create_budget_utilization_chart(lines: Sequence[BudgetLine], title: str | None = None) -> go.Figure:
    """Horizontal bars of percent used per budget line, capped visually at 100%.

    Lines without a limit are drawn in grey at 0%.
    """
    if not lines:
        return _empty_figure()
    labels = ['All spending' if line.is_global else line.category for line in lines]
    values = [min(float(line.utilization_pct), 100.0) for line in lines]
    colours = [
        NO_LIMIT_COLOUR if not line.has_limit else (OVER_COLOUR if line.is_over_limit else UNDER_COLOUR)
        for line in lines
    ]
    hover = [
        f"{float(line.spent):,.2f} of {float(line.limit):,.2f}" if line.has_limit else f"{float(line.spent):,.2f} (no limit)"
        for line in lines
    ]
    fig = go.Figure(go.Bar(x=values, y=labels, orientation='h', marker_color=colours, hovertext=hover))
    fig.update_layout(
        title=title or "Budget utilization",
        xaxis_title="Percent used",
        xaxis_range=[0, 100],
        yaxis_autorange='reversed',
    )
    return fig


def create_monthly_trend_chart(trend: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Grouped income/expense bars with a net savings line.

    ``trend`` is the DataFrame returned by :func:`aggregation.monthly_trend`.
    """
    if trend.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(x=trend['Month'], y=trend['Income'], name='Income', marker_color=UNDER_COLOUR))
    fig.add_trace(go.Bar(x=trend['Month'], y=trend['Expense'], name='Expense', marker_color=OVER_COLOUR))
    fig.add_trace(go.Scatter(x=trend['Month'], y=trend['Net Savings'], name='Net Savings', mode='lines+markers'))
    fig.update_layout(title=title or "Income vs expense", barmode='group', xaxis_title="Month")
    return fig


def create_goal_progress_chart(progress: Sequence[GoalProgress], title: str | None = None) -> go.Figure:
    if not progress:
        return _empty_figure()
    fig = go.Figure(go.Bar(
        x=[float(item.progress_pct) for item in progress],
        y=[item.name for item in progress],
        orientation='h',
        marker_color=[UNDER_COLOUR if item.is_complete else '#6366f1' for item in progress],
    ))
    fig.update_layout(title=title or "Savings goals", xaxis_title="Percent saved", xaxis_range=[0, 100])
    return fig
