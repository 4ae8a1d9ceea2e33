"""Release readiness scoring for the issues tagged to a fix version."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from jira_insights.core.config import (
    BLOCKED_HIGH_RISK_ABOVE,
    COMPLETION_HIGH_RISK_BELOW,
    COMPLETION_MEDIUM_RISK_MAX,
    CRITICAL_HIGH_RISK_ABOVE,
    READINESS_BLOCKED_WEIGHT,
    READINESS_CRITICAL_WEIGHT,
    READINESS_INCOMPLETE_WEIGHT,
    READINESS_UNASSIGNED_WEIGHT,
    UNASSIGNED_MEDIUM_RISK_ABOVE,
)
from jira_insights.core.models import Issue
from jira_insights.core.status import has_testing_label, is_blocked, is_critical_priority

from .metrics.ratios import clamp_score, percentage

LOW = "LOW"
MEDIUM = "MEDIUM"
HIGH = "HIGH"
_SEVERITY_RANK = {LOW: 0, MEDIUM: 1, HIGH: 2}

_VERDICTS = {
    HIGH: "NOT READY: resolve the high-severity risks before releasing",
    MEDIUM: "PROCEED WITH CAUTION: address the flagged risks and re-check readiness",
    LOW: "READY FOR RELEASE: no significant risks detected",
}


def _unique(issues: Iterable[Issue]) -> dict[str, Issue]:
    out: dict[str, Issue] = {}
    for issue in issues:
        out.setdefault(issue.key, issue)
    return out


def combine_severity(levels: Iterable[str]) -> str:
    return max(levels, key=_SEVERITY_RANK.__getitem__, default=LOW)


def readiness_score(
    completion_pct: float,
    critical_count: int,
    blocked_count: int,
    unassigned_pct: float,
) -> float:
    """Start from 100 and subtract weighted penalties; never below zero."""
    score = (
        100
        - READINESS_INCOMPLETE_WEIGHT * (100 - completion_pct)
        - READINESS_CRITICAL_WEIGHT * critical_count
        - READINESS_BLOCKED_WEIGHT * blocked_count
        - READINESS_UNASSIGNED_WEIGHT * unassigned_pct
    )
    return clamp_score(score)


def assess_risks(
    completion_pct: int,
    critical_count: int,
    blocked_count: int,
    unassigned_pct: int,
    testing_count: int,
) -> list[dict]:
    factors: list[dict] = []
    if completion_pct < COMPLETION_HIGH_RISK_BELOW:
        factors.append(
            {"factor": "LOW_COMPLETION", "severity": HIGH, "detail": f"Only {completion_pct}% of issues complete"}
        )
    elif completion_pct <= COMPLETION_MEDIUM_RISK_MAX:
        factors.append(
            {"factor": "LOW_COMPLETION", "severity": MEDIUM, "detail": f"{completion_pct}% of issues complete"}
        )

    if critical_count:
        factors.append(
            {
                "factor": "CRITICAL_ISSUES_OPEN",
                "severity": HIGH if critical_count > CRITICAL_HIGH_RISK_ABOVE else MEDIUM,
                "detail": f"{critical_count} critical/blocker issues still open",
            }
        )

    if blocked_count:
        factors.append(
            {
                "factor": "BLOCKED_ISSUES",
                "severity": HIGH if blocked_count > BLOCKED_HIGH_RISK_ABOVE else MEDIUM,
                "detail": f"{blocked_count} issues are blocked",
            }
        )

    if unassigned_pct > UNASSIGNED_MEDIUM_RISK_ABOVE:
        factors.append(
            {
                "factor": "UNASSIGNED_WORK",
                "severity": MEDIUM,
                "detail": f"{unassigned_pct}% of remaining work has no assignee",
            }
        )

    if testing_count:
        factors.append(
            {
                "factor": "QUALITY_ASSURANCE",
                "severity": MEDIUM,
                "detail": f"{testing_count} open issues still need testing",
            }
        )
    return factors


_FACTOR_ADVICE = {
    "LOW_COMPLETION": "Re-scope the release or move unfinished issues to a later version",
    "CRITICAL_ISSUES_OPEN": "Resolve or downgrade the open critical/blocker issues",
    "BLOCKED_ISSUES": "Clear the blockers on blocked issues or remove them from the release",
    "UNASSIGNED_WORK": "Assign owners to the remaining unassigned issues",
    "QUALITY_ASSURANCE": "Complete testing on issues still labeled for QA",
}


def release_readiness(
    version: str,
    all_issues: Iterable[Issue],
    open_issues: Iterable[Issue],
    blocked_issues: Iterable[Issue] = (),
) -> dict:
    """Score a release from its full, open, and blocked issue sets.

    Blocked issues are the union, by key, of the supplied blocked set and any
    open issue with a Blocker priority, a ``blocked`` label, or a Blocked status.
    """
    everything = _unique(all_issues)
    remaining = _unique(open_issues)
    blocked = _unique(blocked_issues)
    for key, issue in remaining.items():
        if is_blocked(issue):
            blocked.setdefault(key, issue)
    # Open issues not present in the full set still count toward the total
    for key, issue in remaining.items():
        everything.setdefault(key, issue)

    total = len(everything)
    open_count = len(remaining)
    completion = percentage(total - open_count, total, empty=100)

    critical = [i for i in remaining.values() if is_critical_priority(i.priority)]
    unassigned = [i for i in remaining.values() if i.is_unassigned]
    unassigned_pct = percentage(len(unassigned), open_count)
    testing = [i for i in remaining.values() if has_testing_label(i)]

    factors = assess_risks(completion, len(critical), len(blocked), unassigned_pct, len(testing))
    overall = combine_severity(f["severity"] for f in factors)
    score = readiness_score(completion, len(critical), len(blocked), unassigned_pct)

    recommendations = [_FACTOR_ADVICE[f["factor"]] for f in factors]
    recommendations.append(_VERDICTS[overall])

    critical_details = _unique([*critical, *blocked.values()])
    return {
        "completion_metrics": {
            "version": version,
            "total_issues": total,
            "completed_issues": total - open_count,
            "open_issues": open_count,
            "completion_percentage": completion,
        },
        "remaining_work": {
            "open_issues": open_count,
            "by_status": dict(Counter(i.status for i in remaining.values())),
            "by_priority": dict(Counter(i.priority_name for i in remaining.values())),
            "by_assignee": dict(Counter(i.assignee_name for i in remaining.values())),
            "unassigned_count": len(unassigned),
            "unassigned_percentage": unassigned_pct,
        },
        "risk_factors": factors,
        "critical_issues_details": [
            {**i.to_summary(), "blocked": i.key in blocked} for i in critical_details.values()
        ],
        "risk_assessment": {
            "overall_risk": overall,
            "readiness_score": score,
            "critical_count": len(critical),
            "blocked_count": len(blocked),
        },
        "recommendations": recommendations,
    }
