"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``jira_insights/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from jira_insights.app import connect, main
from jira_insights.core.config import load_config
from jira_insights.core.errors import ConfigurationError

st.set_page_config(layout="wide")
logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


def _auto_init_issue_service():
    """Initialize the service from insights.yaml / environment when complete."""
    if "issue_service" in st.session_state:
        return
    try:
        config = load_config()
    except ConfigurationError as e:
        st.sidebar.warning(f"No configuration loaded ({e}). Please use the Setup page.")
        return
    if config.connection is not None:
        st.sidebar.info("Configuration found, attempting to connect to Jira...")
    connect(config, st.session_state)


_auto_init_issue_service()

PAGES_DIR = Path(__file__).parent / "jira_insights" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"jira_insights.pages.{py.stem}"
    try:
        import_module(mod_name)
    except ImportError as e:  # pragma: no cover
        logger.error("Failed importing page %s: %s", mod_name, e)

if __name__ == "__main__":
    main()
