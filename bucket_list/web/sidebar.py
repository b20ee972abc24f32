"""Sidebar component for the web UI."""

import streamlit as st
from datetime import date

from ..database import ALL_CATEGORIES
from ..database.models.Goal import Category


def _select_category(category: str):
    store = st.session_state.store
    store.track("category_filter", {
        "filter.category": category,
        "filter.previous": st.session_state.selected_category,
    })
    st.session_state.selected_category = category


def render_sidebar():
    """Render the sidebar with the category filter and summary metrics."""
    store = st.session_state.store

    with st.sidebar:
        # App branding
        st.markdown("## :material/flag: Bucket List")

        st.divider()

        # Category filter
        st.markdown("**:material/filter_list: Categories**")
        counts = store.category_counts()
        selected = st.session_state.selected_category

        st.button(
            f"All ({counts[ALL_CATEGORIES]})",
            key="filter_all",
            type="primary" if selected == ALL_CATEGORIES else "secondary",
            use_container_width=True,
            on_click=_select_category,
            args=(ALL_CATEGORIES,),
        )
        for category in Category:
            st.button(
                f"{category.label} ({counts[category.value]})",
                key=f"filter_{category.value}",
                type="primary" if selected == category.value else "secondary",
                use_container_width=True,
                on_click=_select_category,
                args=(category.value,),
            )

        st.divider()

        # Dashboard
        st.markdown("**:material/dashboard: Dashboard**")
        stats = store.statistics()

        col1, col2 = st.columns(2)
        col1.metric("Total", stats.total)
        col2.metric("Completed", stats.completed)

        col1, col2 = st.columns(2)
        col1.metric("Overdue", stats.overdue)
        col2.metric("Avg. progress", f"{stats.average_progress:.0f}%")

        st.divider()
        st.caption(f"Today: {date.today().strftime('%B %d, %Y')}")
