"""
Streamlit Web UI for the Bucket List Tracker.

This is the main entry point for the web app. Components are
organized in the bucket_list/web/ package.
"""

import streamlit as st
from pathlib import Path
import sys

# Add project root to path for imports when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from bucket_list import Config, create_store
from bucket_list.database import ALL_CATEGORIES
from bucket_list.observability import setup_logging

# Import UI components
from bucket_list.web import (
    apply_custom_styles,
    render_error_alert,
    render_goal_list,
    render_header,
    render_sidebar,
)


# Page configuration (must be first Streamlit command)
st.set_page_config(
    page_title="My Bucket List",
    page_icon="🎯",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Apply custom CSS
apply_custom_styles()


def init_session():
    """Create the store once per browser session."""
    if "store" not in st.session_state:
        setup_logging(Config.LOG_LEVEL)
        st.session_state.store = create_store()
        st.session_state.store.track("page_load", {"page.name": "bucket_list"})

    if "selected_category" not in st.session_state:
        st.session_state.selected_category = ALL_CATEGORIES


def main():
    """Main entry point for the Streamlit app."""
    init_session()

    render_sidebar()
    render_error_alert()
    render_header()
    st.divider()
    render_goal_list()


if __name__ == "__main__":
    main()
