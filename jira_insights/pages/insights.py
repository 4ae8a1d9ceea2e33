"""Run any registered operation and show the resulting document."""

from __future__ import annotations

import inspect

import streamlit as st

from jira_insights.app import register_page
from jira_insights.operations import OPERATIONS, run_operation


def _parameter_inputs(name: str) -> dict:
    params = {}
    signature = inspect.signature(OPERATIONS[name])
    for param in list(signature.parameters.values())[1:]:
        required = param.default is inspect.Parameter.empty
        label = f"{param.name}{' *' if required else ''}"
        default = None if required else param.default
        if isinstance(default, bool):
            params[param.name] = st.checkbox(label, value=default, key=f"{name}.{param.name}")
            continue
        raw = st.text_input(label, value="" if default is None else str(default), key=f"{name}.{param.name}")
        if not raw:
            continue
        if isinstance(default, int):
            try:
                params[param.name] = int(raw)
            except ValueError:
                st.error(f"{param.name} must be a whole number")
        elif param.name == "users":
            params[param.name] = [u.strip() for u in raw.split(",") if u.strip()]
        else:
            params[param.name] = raw
    return params


@register_page("Insights")
def insights_page():
    st.title("Jira Insights")
    service = st.session_state.get("issue_service")
    if service is None:
        st.warning("Initialize the connection on the Setup page first.")
        return
    name = st.selectbox("Operation", sorted(OPERATIONS))
    params = _parameter_inputs(name)
    if st.button("Run", type="primary"):
        with st.spinner(f"Running {name}"):
            result = run_operation(service, name, params)
        if result.get("status") == "error":
            st.error(f"{result['error']}: {result['cause']}")
        else:
            st.json(result)
