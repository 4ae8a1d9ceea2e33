from datetime import UTC, datetime

from jira_insights.analytics.duplicates import (
    PROCEED_WITH_ISSUE,
    REVIEW_FOR_DUPLICATES,
    analyze_duplicates,
    rank_candidates,
    search_signature,
)
from jira_insights.core.models import Issue


def _target():
    return Issue(key="APP-1", summary="Login fails after timeout", components={"Auth"})


def _candidates():
    return [
        Issue(key="APP-3", summary="Export button missing", status="Open"),
        Issue(
            key="APP-2",
            summary="Login fails after session timeout",
            status="In Progress",
            components={"Auth", "UI"},
            created=datetime(2026, 1, 2, tzinfo=UTC),
        ),
    ]


def test_review_recommended_for_close_match():
    result = analyze_duplicates(_target(), _candidates())
    recs = result["recommendations"]
    assert recs["action"] == REVIEW_FOR_DUPLICATES
    assert recs["confidence"] == "Medium"
    assert recs["top_candidate"]["key"] == "APP-2"
    assert recs["top_candidate"]["common_components"] == ["Auth"]

    analysis = result["duplicate_analysis"]
    assert analysis["potential_duplicates_found"] == 2
    assert [m["key"] for m in analysis["high_similarity_matches"]] == ["APP-2"]
    assert analysis["medium_similarity_matches"] == []
    unrelated = analysis["all_matches"][1]
    assert unrelated["key"] == "APP-3"
    assert unrelated["similarity_score"] == 0.0


def test_empty_pool_proceeds():
    result = analyze_duplicates(_target(), [])
    assert result["duplicate_analysis"]["potential_duplicates_found"] == 0
    assert result["recommendations"]["action"] == PROCEED_WITH_ISSUE
    assert result["recommendations"]["confidence"] == "High"
    assert result["recommendations"]["top_candidate"] is None


def test_target_and_repeated_keys_are_skipped():
    target = _target()
    ranked = rank_candidates(target, [target, *_candidates(), _candidates()[1]])
    assert [c.key for c in ranked] == ["APP-2", "APP-3"]


def test_medium_band_does_not_trigger_review():
    target = Issue(key="APP-1", summary="Login page fails")
    result = analyze_duplicates(target, [Issue(key="APP-9", summary="Login page slow")])
    assert [m["key"] for m in result["duplicate_analysis"]["medium_similarity_matches"]] == ["APP-9"]
    assert result["recommendations"]["action"] == PROCEED_WITH_ISSUE


def test_score_of_exactly_point_seven_is_not_high():
    target = Issue(key="APP-1", summary="alpha bravo charlie delta echoes foxtrot golfs hotel india juliet")
    candidate = Issue(key="APP-2", summary="alpha bravo charlie delta echoes foxtrot golfs")
    result = analyze_duplicates(target, [candidate])
    assert result["duplicate_analysis"]["high_similarity_matches"] == []
    assert len(result["duplicate_analysis"]["medium_similarity_matches"]) == 1
    assert result["recommendations"]["action"] == PROCEED_WITH_ISSUE


def test_ranking_is_stable_for_ties():
    target = Issue(key="APP-1", summary="Payment gateway error")
    pool = [
        Issue(key="APP-5", summary="Payment refund"),
        Issue(key="APP-4", summary="Gateway outage"),
        Issue(key="APP-6", summary="Payment gateway error"),
    ]
    first = [c.key for c in rank_candidates(target, pool)]
    second = [c.key for c in rank_candidates(target, pool)]
    assert first == second == ["APP-6", "APP-5", "APP-4"]


def test_search_signature_uses_first_three_keywords():
    issue = Issue(
        key="APP-1",
        summary="Database connection timeout in production",
        description="Connection pool exhausted",
    )
    assert search_signature(issue) == ["database", "connection", "timeout"]
