"""Custom CSS for the web UI."""

import streamlit as st

CUSTOM_CSS = """
<style>
    .stApp {
        background: linear-gradient(135deg, #fdf2f8 0%, #faf5ff 50%, #eff6ff 100%);
    }
    .category-badge {
        display: inline-block;
        padding: 0.1rem 0.6rem;
        border-radius: 9999px;
        color: white;
        font-size: 0.8rem;
        font-weight: 600;
    }
    div[data-testid="stSidebar"] button {
        border-radius: 9999px;
    }
</style>
"""


def apply_custom_styles():
    st.markdown(CUSTOM_CSS, unsafe_allow_html=True)
