from datetime import UTC, datetime

from jira_insights.analytics.component_health import (
    CONCERN,
    CRITICAL,
    HEALTHY,
    activity_level,
    component_health_report,
    component_health_summary,
    health_bucket,
    health_score,
)
from jira_insights.core.config import NO_COMPONENT
from jira_insights.core.models import Issue

NOW = datetime(2026, 1, 15, tzinfo=UTC)


def _issue(key, status="Open", issue_type="Task", created=datetime(2025, 12, 1, tzinfo=UTC), components=()):
    return Issue(key=key, status=status, issue_type=issue_type, created=created, components=components)


def test_half_bugs_all_open_is_critical():
    issues = [_issue("CMP-1", issue_type="Bug"), _issue("CMP-2")]
    doc = component_health_report("Auth", issues, issues, [], NOW)
    assert doc["health_score"] == 45.0
    assert doc["health_status"] == CRITICAL
    metrics = doc["metrics"]
    assert metrics["defect_ratio"] == 0.5
    assert metrics["avg_open_age_days"] == 45.0
    assert metrics["completion_rate"] == 0
    assert metrics["activity_level"] == "LOW"
    assert doc["stale_issue_details"] == []


def test_stale_open_issues_and_recent_bonus():
    stale = _issue("CMP-1", created=datetime(2025, 11, 1, tzinfo=UTC))
    fresh = _issue("CMP-2", issue_type="Bug")
    done = [_issue(f"CMP-{n}", status="Done") for n in range(3, 6)]
    recent = [_issue(f"CMP-{n}", created=datetime(2026, 1, 10, tzinfo=UTC)) for n in range(6, 9)]
    doc = component_health_report("Auth", [stale, fresh, *done], [stale, fresh], recent, NOW)
    metrics = doc["metrics"]
    assert (metrics["total_issues"], metrics["open_issues"], metrics["bug_count"]) == (5, 2, 1)
    assert metrics["stale_issues"] == 1
    assert metrics["avg_open_age_days"] == 60.0
    assert metrics["completion_rate"] == 60
    assert metrics["activity_level"] == "MEDIUM"
    assert doc["health_score"] == 63.0
    assert doc["health_status"] == CONCERN
    assert [d["key"] for d in doc["stale_issue_details"]] == ["CMP-1"]
    assert doc["recommendations"] == ["Triage 1 open issues older than 60 days"]


def test_empty_component_is_healthy():
    doc = component_health_report("Auth", [], [], [], NOW)
    assert doc["health_score"] == 100.0
    assert doc["health_status"] == HEALTHY
    assert doc["metrics"]["completion_rate"] == 100


def test_health_score_bounds():
    assert health_score(0, 0, 0, 0, 0) == 100.0
    assert health_score(1, 0, 0, 0, 1) == 100.0
    assert health_score(4, 2, 1, 0, 0) == 72.5
    assert health_score(1, 1, 1, 1, 0) == 0.0


def test_health_score_never_rises_with_worse_ratios():
    base = health_score(10, 4, 2, 1, 0)
    assert health_score(10, 4, 3, 1, 0) < base
    assert health_score(10, 4, 2, 2, 0) < base
    assert health_score(10, 5, 2, 1, 0) < base
    for bugs in range(0, 10):
        assert health_score(10, 4, bugs + 1, 1, 0) <= health_score(10, 4, bugs, 1, 0)
    for open_count in range(1, 10):
        assert health_score(10, open_count + 1, 0, 0, 0) <= health_score(10, open_count, 0, 0, 0)


def test_stale_means_strictly_older_than_sixty_days():
    sixty = _issue("CMP-1", created=datetime(2025, 11, 16, tzinfo=UTC))
    sixty_one = _issue("CMP-2", created=datetime(2025, 11, 15, tzinfo=UTC))
    doc = component_health_report("Auth", [sixty, sixty_one], [sixty, sixty_one], [], NOW)
    assert [d["key"] for d in doc["stale_issue_details"]] == ["CMP-2"]


def test_bucket_and_activity_thresholds():
    assert health_bucket(80) == HEALTHY
    assert health_bucket(79.9) == CONCERN
    assert health_bucket(60) == CONCERN
    assert health_bucket(59.9) == CRITICAL
    assert activity_level(6) == "HIGH"
    assert activity_level(5) == "MEDIUM"
    assert activity_level(3) == "MEDIUM"
    assert activity_level(2) == "LOW"


def test_summary_fans_out_multi_component_issues():
    issues = [
        _issue("CMP-1", issue_type="Bug", components=["Auth", "UI"]),
        _issue("CMP-2", status="Done", components=["Auth"]),
        _issue("CMP-3", status="Done", created=datetime(2026, 1, 10, tzinfo=UTC)),
    ]
    doc = component_health_summary(issues, NOW)
    summary = doc["component_summary"]
    assert summary["total_components"] == 3
    assert (summary["healthy_components"], summary["concern_components"], summary["critical_components"]) == (1, 1, 1)
    assert summary["issue_component_pairs"] == 4
    assert summary["average_health_score"] == 60.0

    details = doc["component_details"]
    assert [c["component"] for c in details[HEALTHY]] == [NO_COMPONENT]
    assert details[HEALTHY][0]["health_score"] == 100.0
    auth = details[CONCERN][0]
    assert (auth["component"], auth["total_issues"], auth["open_issues"], auth["health_score"]) == ("Auth", 2, 1, 60.0)
    ui = details[CRITICAL][0]
    assert (ui["component"], ui["health_score"]) == ("UI", 20.0)


def test_summary_sorts_critical_worst_first():
    issues = [
        _issue("CMP-1", issue_type="Bug", components=["UI"]),
        _issue("CMP-2", issue_type="Bug", components=["Search"]),
        _issue("CMP-3", components=["Search"]),
    ]
    critical = component_health_summary(issues, NOW)["component_details"][CRITICAL]
    assert [c["component"] for c in critical] == ["UI", "Search"]


def test_summary_of_nothing():
    doc = component_health_summary([], NOW)
    assert doc["component_summary"]["total_components"] == 0
    assert doc["component_summary"]["average_health_score"] == 100.0
    assert doc["component_details"] == {HEALTHY: [], CONCERN: [], CRITICAL: []}
