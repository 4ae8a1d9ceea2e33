"""Connection setup page: collect Jira credentials and initialize IssueService."""

from __future__ import annotations

import pytz
import streamlit as st

from jira_insights.app import connect, register_page
from jira_insights.core.config import DEFAULT_TIMEZONE, EngineConfig, JiraConnection


@register_page("Setup / Connection")
def setup_page():
    st.title("Jira Connection Setup")
    st.caption("Enter credentials (use secrets manager in production).")

    jira_secrets = st.secrets.get("jira", {})
    server = st.text_input(
        "Jira Server URL",
        value=st.session_state.get("jira_server") or jira_secrets.get("JIRA_SERVER") or "",
    )
    email = st.text_input(
        "Email / Username",
        value=st.session_state.get("jira_email") or jira_secrets.get("JIRA_EMAIL") or "",
    )
    token = st.text_input("API Token", type="password", value=jira_secrets.get("JIRA_API_TOKEN") or "")
    project = st.text_input("Default project key", value=jira_secrets.get("JIRA_DEFAULT_PROJECT") or "")
    boards = st.text_input("Boards (comma separated)", value=jira_secrets.get("JIRA_BOARDS") or "")
    timezone = st.text_input("Timezone", value=jira_secrets.get("JIRA_TIMEZONE") or DEFAULT_TIMEZONE)
    init_btn = st.button("Initialize Connection", type="primary")

    if init_btn:
        if not (server and email and token and project):
            st.error("Server, email, token and default project are required.")
            return
        if timezone not in pytz.all_timezones_set:
            st.error(f"Unknown timezone: {timezone}")
            return
        config = EngineConfig(
            default_project=project.strip(),
            boards=tuple(b.strip() for b in boards.split(",") if b.strip()),
            timezone=timezone,
            connection=JiraConnection(server, email, token),
        )
        connect(config, st.session_state, notify=st)

    if "issue_service" in st.session_state:
        st.info("IssueService ready.")
