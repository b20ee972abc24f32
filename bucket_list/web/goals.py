"""Goal list component for the web UI."""

import streamlit as st

from ..database import ALL_CATEGORIES
from ..database.models.Goal import Category, GoalRecord
from ..errors import NotFoundError
from .form import add_goal_dialog, confirm_delete_dialog, edit_goal_dialog


def render_error_alert():
    """Show the store's error state with a Dismiss button."""
    store = st.session_state.store
    if not store.error:
        return
    col1, col2 = st.columns([6, 1])
    with col1:
        st.error(store.error, icon=":material/error:")
    with col2:
        if st.button("Dismiss", key="dismiss_error"):
            store.clear_error()
            st.rerun()


def render_header():
    """Title, overall progress and overdue count."""
    stats = st.session_state.store.statistics()

    st.markdown(
        "<h1 style='text-align: center;'>My Bucket List</h1>"
        "<p style='text-align: center; color: gray;'>"
        "Dream big, plan smart, and make every moment count."
        "</p>",
        unsafe_allow_html=True
    )

    col1, col2 = st.columns([4, 1])
    col1.markdown("**Overall Progress**")
    col2.markdown(f"**{stats.completed}/{stats.total}**")
    st.progress(stats.completion_rate / 100)

    if stats.overdue > 0:
        plural = "s" if stats.overdue != 1 else ""
        st.caption(f":red[:material/schedule: {stats.overdue} overdue goal{plural}]")


def _toggle(item_id: str):
    store = st.session_state.store
    try:
        item = store.get(item_id)
    except NotFoundError as e:
        store.error = str(e)
        return
    store.track("toggle_complete_click", {
        "item.id": item_id,
        "item.category": item.category.value,
        "item.current_status": "completed" if item.completed else "incomplete",
    })
    store.toggle_complete(item_id)


def render_goal_card(item: GoalRecord):
    store = st.session_state.store
    with st.container(border=True):
        col_title, col_edit, col_delete = st.columns([6, 1, 1])
        with col_title:
            title = f"~~{item.title}~~" if item.completed else item.title
            st.markdown(f"### {title}")
            st.markdown(
                f"<span class='category-badge' style='background-color: {item.category.color};'>"
                f"{item.category.label}</span>",
                unsafe_allow_html=True
            )
        with col_edit:
            if st.button(":material/edit:", key=f"edit_{item.id}", help="Edit"):
                store.track("edit_item_click", {"item.id": item.id, "item.category": item.category.value})
                edit_goal_dialog(item.id)
        with col_delete:
            if st.button(":material/delete:", key=f"delete_{item.id}", help="Delete"):
                store.track("delete_item_click", {"item.id": item.id, "item.category": item.category.value})
                confirm_delete_dialog(item.id)

        if item.description:
            st.write(item.description)

        st.caption(f"Progress: {item.progress}%")
        st.progress(item.progress / 100)

        if item.deadline:
            due = item.deadline.strftime("%B %d, %Y")
            if item.is_overdue(store.clock()):
                st.caption(f":red[:material/schedule: Due: {due} (Overdue)]")
            else:
                st.caption(f":material/schedule: Due: {due}")

        st.checkbox(
            "Completed!" if item.completed else "Mark as complete",
            value=item.completed,
            key=f"complete_{item.id}_{item.completed}",
            on_change=_toggle,
            args=(item.id,),
        )


def render_goal_list():
    """Add button, goal cards for the selected category and the empty state."""
    store = st.session_state.store
    selected = st.session_state.selected_category

    _, col, _ = st.columns([2, 1, 2])
    with col:
        if st.button(":material/add: Add New Goal", type="primary", use_container_width=True):
            store.track("dialog_open", {"dialog.type": "goal_form", "dialog.mode": "create"})
            add_goal_dialog()

    items = store.filter_by_category(selected)

    if not items:
        if selected == ALL_CATEGORIES:
            st.info("**No goals yet.** Start by adding your first bucket list goal!")
        else:
            label = Category(selected).label.lower()
            st.info(f"**No {label} goals yet.** Try selecting a different category or add a new goal.")
        return

    columns = st.columns(3)
    for i, item in enumerate(items):
        with columns[i % 3]:
            render_goal_card(item)
