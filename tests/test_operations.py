from datetime import UTC, datetime

from jira_insights.core.config import EngineConfig
from jira_insights.core.errors import DataFetchError
from jira_insights.core.jira_client import JiraAPI
from jira_insights.core.service import IssueService
from jira_insights.operations import OPERATIONS, run_operation


class DummyAPI(JiraAPI):
    def __init__(self, fail=False):
        self.server = "https://example.atlassian.net"
        self.fail = fail

    def search_enhanced(self, jql, fields=None, page_size=100, max_results=None):
        if self.fail:
            raise DataFetchError("Search failed 500", query=jql)
        return []


def _service(fail=False):
    return IssueService(
        DummyAPI(fail), EngineConfig(default_project="APP"), clock=lambda: datetime(2026, 1, 15, tzinfo=UTC)
    )


def test_all_operations_registered():
    assert set(OPERATIONS) == {
        "get_latest_issues",
        "get_issue_details",
        "search_issues",
        "list_boards",
        "get_board_sprints",
        "get_sprint_insights",
        "analyze_duplicates",
        "get_component_experts",
        "get_workload_analysis",
        "get_release_readiness",
        "get_component_health",
        "get_triage_summary",
    }


def test_successful_operation_returns_document():
    doc = run_operation(_service(), "get_release_readiness", {"version": "1.0"})
    assert doc["risk_assessment"]["overall_risk"] == "LOW"


def test_unknown_operation_is_reported():
    doc = run_operation(_service(), "reticulate_splines", {})
    assert doc == {
        "operation": "reticulate_splines",
        "status": "error",
        "error": "UnknownOperationError",
        "cause": "Unknown operation: reticulate_splines",
    }


def test_invalid_parameters_are_reported():
    missing = run_operation(_service(), "get_release_readiness", {})
    assert missing["error"] == "InvalidParametersError"
    extra = run_operation(_service(), "get_release_readiness", {"version": "1.0", "colour": "red"})
    assert extra["error"] == "InvalidParametersError"


def test_fetch_failure_becomes_error_document():
    doc = run_operation(_service(fail=True), "get_component_experts", {"component": "Auth"})
    assert doc["status"] == "error"
    assert doc["error"] == "DataFetchError"
    assert "Search failed" in doc["cause"]
