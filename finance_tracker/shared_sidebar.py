"""Shared sidebar components for the multi-page dashboard.

Every page shows the same month picker and works against the same store and
user, so the choice is kept in ``st.session_state``.
"""

from __future__ import annotations

from typing import Dict

import streamlit as st

from .config import DEFAULT_USER_ID, configure_logging
from .db import get_store
from .periods import current_month, month_range

MONTH_CHOICES = 12


def render_shared_sidebar() -> Dict:
    """Render the sidebar shared by all pages.

    Returns:
        Dict with keys: 'store', 'user_id', 'month'
    """
    configure_logging()
    months = list(reversed(month_range(current_month(), MONTH_CHOICES)))
    selected = st.session_state.get('selected_month', months[0])
    if selected not in months:
        selected = months[0]

    st.sidebar.subheader("📅 Period")
    month = st.sidebar.selectbox("Month", months, index=months.index(selected))
    st.session_state['selected_month'] = month

    return {
        'store': get_store(),
        'user_id': st.session_state.get('user_id', DEFAULT_USER_ID),
        'month': month,
    }
