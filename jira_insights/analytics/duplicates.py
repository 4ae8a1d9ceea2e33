"""Rank candidate issues as potential duplicates of a target issue."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from jira_insights.core.config import HIGH_SIMILARITY, MEDIUM_SIMILARITY, SEARCH_SIGNATURE_SIZE
from jira_insights.core.models import Issue

from .similarity import extract_keywords, similarity

REVIEW_FOR_DUPLICATES = "REVIEW_FOR_DUPLICATES"
PROCEED_WITH_ISSUE = "PROCEED_WITH_ISSUE"


@dataclass(frozen=True, slots=True)
class DuplicateCandidate:
    key: str
    summary: str
    status: str
    similarity_score: float
    common_components: tuple[str, ...]
    created: str | None

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "summary": self.summary,
            "status": self.status,
            "similarity_score": round(self.similarity_score, 3),
            "common_components": list(self.common_components),
            "created": self.created,
        }


def search_signature(issue: Issue) -> list[str]:
    """Top keywords of summary + description, used to query the candidate pool."""
    text = f"{issue.summary} {issue.description or ''}"
    return extract_keywords(text)[:SEARCH_SIGNATURE_SIZE]


def rank_candidates(target: Issue, candidates: Iterable[Issue]) -> list[DuplicateCandidate]:
    """Score candidates against the target summary, best first.

    The target itself and repeated keys are skipped. Sorting is stable, so ties
    keep the order the candidate pool was supplied in.
    """
    seen = {target.key}
    scored: list[DuplicateCandidate] = []
    for issue in candidates:
        if issue.key in seen:
            continue
        seen.add(issue.key)
        scored.append(
            DuplicateCandidate(
                key=issue.key,
                summary=issue.summary,
                status=issue.status,
                similarity_score=similarity(target.summary, issue.summary),
                common_components=tuple(sorted(target.components & issue.components)),
                created=issue.created.isoformat() if issue.created else None,
            )
        )
    return sorted(scored, key=lambda c: c.similarity_score, reverse=True)


def classify_similarity(score: float) -> str | None:
    if score > HIGH_SIMILARITY:
        return "high"
    if score > MEDIUM_SIMILARITY:
        return "medium"
    return None


def analyze_duplicates(target: Issue, candidates: Iterable[Issue]) -> dict:
    ranked = rank_candidates(target, candidates)
    top = ranked[0] if ranked else None
    if top is not None and top.similarity_score > HIGH_SIMILARITY:
        action, confidence = REVIEW_FOR_DUPLICATES, "Medium"
    else:
        action, confidence = PROCEED_WITH_ISSUE, "High"
    return {
        "analyzed_issue": {
            "key": target.key,
            "summary": target.summary,
            "components": sorted(target.components),
            "search_keywords": search_signature(target),
        },
        "duplicate_analysis": {
            "potential_duplicates_found": len(ranked),
            "high_similarity_matches": [
                c.to_dict() for c in ranked if classify_similarity(c.similarity_score) == "high"
            ],
            "medium_similarity_matches": [
                c.to_dict() for c in ranked if classify_similarity(c.similarity_score) == "medium"
            ],
            "all_matches": [c.to_dict() for c in ranked],
        },
        "recommendations": {
            "action": action,
            "confidence": confidence,
            "top_candidate": top.to_dict() if top else None,
        },
    }
