"""Add/edit goal form for the web UI."""

from datetime import date
from typing import Optional

import streamlit as st

from ..database.models.Goal import Category, GoalRecord
from ..errors import NotFoundError, ValidationError


def form_to_fields(title: str, description: str, category, deadline: Optional[date], progress: int) -> dict:
    """
    Turn raw form values into store fields.
    A submitted form always sets `completed` from the progress slider.
    """
    return {
        "title": title,
        "description": description or "",
        "category": category,
        "deadline": deadline,
        "progress": progress,
        "completed": progress == 100,
    }


def render_goal_form(editing: Optional[GoalRecord] = None):
    """Render the goal form and submit it to the store."""
    store = st.session_state.store
    categories = list(Category)

    with st.form("goal_form", clear_on_submit=editing is None):
        title = st.text_input(
            "Title",
            value=editing.title if editing else "",
            placeholder="What do you want to achieve?",
        )
        description = st.text_area(
            "Description",
            value=editing.description if editing else "",
            placeholder="Describe your goal in detail...",
            height=90,
        )
        category = st.selectbox(
            "Category",
            categories,
            index=categories.index(editing.category) if editing else None,
            format_func=lambda c: c.label,
            placeholder="Select a category",
        )
        deadline = st.date_input(
            "Deadline (Optional)",
            value=editing.deadline if editing else None,
        )
        progress = st.slider(
            "Progress (%)",
            min_value=0,
            max_value=100,
            step=5,
            value=editing.progress if editing else 0,
        )
        submitted = st.form_submit_button(
            "Update Goal" if editing else "Add Goal", use_container_width=True
        )

    if not submitted:
        return False

    store.track("form_submit", {
        "form.type": "edit" if editing else "create",
        "form.category": category.value if category else "",
    })

    if category is None:
        st.error("Please select a category.")
        return False

    fields = form_to_fields(title, description, category, deadline, progress)
    try:
        if editing:
            store.update(editing.id, **fields)
        else:
            store.add(**fields)
    except (ValidationError, NotFoundError) as e:
        st.error(str(e))
        return False

    return True


@st.dialog("Add New Goal")
def add_goal_dialog():
    if render_goal_form():
        st.session_state.store.track("dialog_close", {"dialog.type": "goal_form", "dialog.mode": "create"})
        st.rerun()


@st.dialog("Edit Goal")
def edit_goal_dialog(item_id: str):
    try:
        item = st.session_state.store.get(item_id)
    except NotFoundError as e:
        st.error(str(e))
        return
    if render_goal_form(editing=item):
        st.session_state.store.track("dialog_close", {"dialog.type": "goal_form", "dialog.mode": "edit"})
        st.rerun()


@st.dialog("Delete Goal")
def confirm_delete_dialog(item_id: str):
    store = st.session_state.store
    st.write("Are you sure you want to delete this goal?")
    col1, col2 = st.columns(2)
    if col1.button("Delete", type="primary", use_container_width=True):
        try:
            store.delete(item_id)
        except NotFoundError as e:
            store.error = str(e)
        st.rerun()
    if col2.button("Cancel", use_container_width=True):
        st.rerun()
