"""Application entry point: page registry, router, and connection bootstrap."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping

import streamlit as st
from requests.exceptions import RequestException

from jira_insights.core.config import EngineConfig
from jira_insights.core.errors import DataFetchError
from jira_insights.core.jira_client import JiraAPI
from jira_insights.core.service import IssueService

logger = logging.getLogger(__name__)

PAGES = {}
SETUP_PAGE = "Setup / Connection"
PAGE_ORDER = ["Insights", SETUP_PAGE]


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


def connect(config: EngineConfig, state: MutableMapping, notify=None) -> bool:
    """Build an IssueService from ``config.connection`` and store it in ``state``.

    On failure the error is reported through ``notify`` (the sidebar by default),
    any previous service is removed so the router falls back to the setup page,
    and False is returned.
    """
    notify = notify or st.sidebar
    conn = config.connection
    if conn is None:
        notify.warning("Jira credentials not configured. Please use the Setup page.")
        return False
    try:
        api = JiraAPI(conn.server, conn.email, conn.token)
    except (DataFetchError, RequestException) as e:
        logger.error("Jira connection to %s failed: %s", conn.server, e)
        notify.error(f"Jira connection failed: {e}")
        state.pop("issue_service", None)
        return False
    state["jira_server"] = conn.server
    state["jira_email"] = conn.email
    state["issue_service"] = IssueService(api, config)
    notify.success(f"Connected to {conn.server} (project {config.default_project})")
    return True


def main():
    st.sidebar.title("Jira Insights")
    if not PAGES:
        st.write("No pages registered yet.")
        return
    pages = [name for name in PAGE_ORDER if name in PAGES]
    pages += sorted(name for name in PAGES if name not in PAGE_ORDER)

    needs_setup = SETUP_PAGE in pages and "issue_service" not in st.session_state
    page = st.sidebar.selectbox("Page", pages, index=pages.index(SETUP_PAGE) if needs_setup else 0)
    PAGES[page]()


if __name__ == "__main__":
    main()
