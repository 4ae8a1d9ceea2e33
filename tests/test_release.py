import pytest

from jira_insights.analytics.release import HIGH, LOW, MEDIUM, readiness_score, release_readiness
from jira_insights.core.models import Issue


def _done(n):
    return [Issue(key=f"REL-{i}", status="Done", assignee="alice") for i in range(1, n + 1)]


def _open(key, **kwargs):
    kwargs.setdefault("assignee", "bob")
    kwargs.setdefault("priority", "Medium")
    return Issue(key=key, status="In Progress", **kwargs)


def test_eighty_percent_complete_is_medium_risk():
    open_issues = [_open("REL-101"), _open("REL-102")]
    doc = release_readiness("2.0", _done(8) + open_issues, open_issues)
    metrics = doc["completion_metrics"]
    assert (metrics["total_issues"], metrics["completed_issues"], metrics["open_issues"]) == (10, 8, 2)
    assert metrics["completion_percentage"] == 80
    assert [f["factor"] for f in doc["risk_factors"]] == ["LOW_COMPLETION"]
    assert doc["risk_assessment"]["overall_risk"] == MEDIUM
    assert doc["risk_assessment"]["readiness_score"] == 88.0
    assert doc["recommendations"][-1].startswith("PROCEED WITH CAUTION")


def test_empty_release_is_ready():
    doc = release_readiness("2.0", [], [])
    assert doc["completion_metrics"]["completion_percentage"] == 100
    assert doc["risk_factors"] == []
    assert doc["risk_assessment"]["overall_risk"] == LOW
    assert doc["risk_assessment"]["readiness_score"] == 100.0
    assert len(doc["recommendations"]) == 1
    assert doc["recommendations"][0].startswith("READY FOR RELEASE")


def test_blocked_issues_are_unioned_by_key():
    blocker = _open("REL-101", priority="Blocker")
    labeled = _open("REL-102", labels=["blocked"])
    extra = _open("REL-103")
    doc = release_readiness("2.0", _done(8) + [blocker, labeled], [blocker, labeled], [labeled, extra])
    risk = doc["risk_assessment"]
    assert risk["blocked_count"] == 3
    assert risk["critical_count"] == 1
    assert risk["readiness_score"] == 54.0
    assert risk["overall_risk"] == MEDIUM
    details = doc["critical_issues_details"]
    assert [d["key"] for d in details] == ["REL-101", "REL-102", "REL-103"]
    assert all(d["blocked"] for d in details)


def test_many_critical_issues_are_high_risk():
    open_issues = [_open(f"REL-{100 + i}", priority="Critical") for i in range(6)]
    doc = release_readiness("2.0", _done(14) + open_issues, open_issues)
    assert doc["completion_metrics"]["completion_percentage"] == 70
    factor = next(f for f in doc["risk_factors"] if f["factor"] == "CRITICAL_ISSUES_OPEN")
    assert factor["severity"] == HIGH
    assert doc["risk_assessment"]["overall_risk"] == HIGH
    assert doc["risk_assessment"]["readiness_score"] == 22.0
    assert doc["recommendations"][-1].startswith("NOT READY")


def test_unassigned_remaining_work_is_flagged():
    open_issues = [_open("REL-101", assignee=None), _open("REL-102", assignee="Unassigned")]
    doc = release_readiness("2.0", _done(8) + open_issues, open_issues)
    remaining = doc["remaining_work"]
    assert remaining["unassigned_count"] == 2
    assert remaining["unassigned_percentage"] == 100
    assert remaining["by_assignee"] == {"Unassigned": 2}
    assert "UNASSIGNED_WORK" in [f["factor"] for f in doc["risk_factors"]]
    assert doc["risk_assessment"]["readiness_score"] == 58.0


def test_testing_labels_raise_quality_assurance():
    open_issues = [_open("REL-101", labels=["needs-testing"])]
    doc = release_readiness("2.0", _done(19) + open_issues, open_issues)
    assert [f["factor"] for f in doc["risk_factors"]] == ["QUALITY_ASSURANCE"]
    assert doc["completion_metrics"]["completion_percentage"] == 95


def test_open_issues_missing_from_full_set_still_count():
    doc = release_readiness("2.0", _done(1), [_open("REL-101")])
    assert doc["completion_metrics"]["total_issues"] == 2
    assert doc["completion_metrics"]["completion_percentage"] == 50


def test_readiness_score_is_clamped_and_monotonic():
    assert readiness_score(0, 20, 20, 100) == 0.0
    assert readiness_score(100, 0, 0, 0) == 100.0
    assert readiness_score(90, 0, 0, 0) > readiness_score(80, 0, 0, 0)
    assert readiness_score(80, 1, 0, 0) < readiness_score(80, 0, 0, 0)
    assert readiness_score(80, 0, 0, 50) == pytest.approx(73.0)
