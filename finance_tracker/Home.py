"""Main entry point for the Streamlit multi-page app.

Pages in the pages/ directory automatically appear in the sidebar.
"""

from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports
project_root = Path(__file__).parent.parent.resolve()
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from finance_tracker.aggregation import report_frame
from finance_tracker.config import INCOME
from finance_tracker.exceptions import FinanceTrackerError
from finance_tracker.formatting import format_currency, format_percent
from finance_tracker.shared_sidebar import render_shared_sidebar
from finance_tracker.views import load_home_view
from finance_tracker.visualization import create_category_spend_chart


def main() -> None:
    """Render the Home page."""
    st.set_page_config(page_title="Finance Tracker", page_icon="💰", layout="wide")
    sidebar = render_shared_sidebar()
    st.header(f"💰 Overview for {sidebar['month']}")

    try:
        view = load_home_view(sidebar['store'], sidebar['user_id'], sidebar['month'])
    except FinanceTrackerError as exc:
        st.error(f"Could not load this month: {exc}")
        return

    totals = view.totals
    col1, col2, col3 = st.columns(3)
    col1.metric("Total Spent", format_currency(view.report.total_expense))
    col2.metric(
        "Remaining Budget",
        format_currency(totals['remaining']),
        delta=f"of {format_currency(totals['limit'])} limit",
        delta_color='inverse' if totals['remaining'] < 0 else 'normal',
    )
    col3.metric("Savings Rate", format_percent(view.report.savings_rate))

    left, right = st.columns(2)
    with left:
        st.subheader("Recent transactions")
        if not view.recent:
            st.info("No transactions this month.")
        for txn in view.recent:
            sign = '+' if view.flow(txn) == INCOME else '-'
            st.write(
                f"**{txn.category}** · {txn.description or 'No description'} · "
                f"{txn.date:%d %b %Y} · {sign}{format_currency(txn.amount)}"
            )
    with right:
        st.plotly_chart(create_category_spend_chart(view.report), use_container_width=True)
        st.dataframe(report_frame(view.report), use_container_width=True, hide_index=True)


if __name__ == "__main__":
    main()
