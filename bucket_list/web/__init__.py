"""Web UI components for the Bucket List Tracker."""

from .styles import apply_custom_styles
from .sidebar import render_sidebar
from .goals import render_error_alert, render_header, render_goal_list
from .form import form_to_fields, render_goal_form

__all__ = [
    "apply_custom_styles",
    "render_sidebar",
    "render_error_alert",
    "render_header",
    "render_goal_list",
    "form_to_fields",
    "render_goal_form"
]
