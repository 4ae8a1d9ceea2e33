from datetime import UTC, datetime

from jira_insights.analytics.experts import component_experts, rank_experts
from jira_insights.core.models import Issue

NOW = datetime(2026, 1, 15, tzinfo=UTC)


def _issue(key, assignee, status, day):
    return Issue(
        key=key,
        summary=f"Auth issue {key}",
        status=status,
        assignee=assignee,
        components={"Auth"},
        created=datetime(2025, 12, day, tzinfo=UTC),
        updated=datetime(2026, 1, day, tzinfo=UTC),
    )


def _history():
    return [
        _issue("APP-1", "alice", "Done", 1),
        _issue("APP-2", "alice", "Closed", 2),
        _issue("APP-3", "alice", "Done", 3),
        _issue("APP-4", "alice", "In Progress", 4),
        _issue("APP-5", "bob", "To Do", 5),
        _issue("APP-6", None, "To Do", 6),
    ]


def test_rank_experts_orders_by_volume():
    experts, unassigned = rank_experts(_history(), NOW)
    assert unassigned == 1
    assert [e["name"] for e in experts] == ["alice", "bob"]
    alice = experts[0]
    assert (alice["total_issues"], alice["closed_issues"], alice["open_issues"]) == (4, 3, 1)
    assert alice["completion_rate"] == 0.75
    assert [a["key"] for a in alice["recent_activity"]] == ["APP-4", "APP-3", "APP-2"]
    assert experts[1]["completion_rate"] == 0.0


def test_component_experts_document():
    doc = component_experts("Auth", _history(), NOW)
    assert doc["component"] == "Auth"
    assert doc["total_issues_analyzed"] == 6
    assert doc["unassigned_issues"] == 1
    recs = doc["recommendations"]
    assert recs["primary_expert"]["name"] == "alice"
    assert recs["most_active_recently"]["name"] == "alice"
    assert recs["highest_completion_rate"]["name"] == "alice"


def test_component_experts_empty_history():
    doc = component_experts("Auth", [], NOW)
    assert doc["experts"] == []
    assert doc["recommendations"] == {
        "primary_expert": None,
        "most_active_recently": None,
        "highest_completion_rate": None,
    }
