"""Component health scoring, for a single component or ranked across a project."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import pandas as pd

from jira_insights.core.config import (
    CONCERN_MIN_SCORE,
    HEALTH_DEFECT_WEIGHT,
    HEALTH_OPEN_WEIGHT,
    HEALTH_RECENT_BONUS,
    HEALTH_STALENESS_WEIGHT,
    HEALTHY_MIN_SCORE,
    HIGH_ACTIVITY_ABOVE,
    MEDIUM_ACTIVITY_ABOVE,
    NO_COMPONENT,
    RECENT_DAYS,
    STALE_DAYS,
)
from jira_insights.core.mappers import issues_to_dataframe
from jira_insights.core.models import Issue
from jira_insights.core.status import DONE, is_bug

from .metrics.aging import age_days, average_age, is_older_than
from .metrics.ratios import clamp_score, percentage, ratio

HEALTHY = "healthy"
CONCERN = "concern"
CRITICAL = "critical"


def health_score(total: int, open_count: int, bugs: int, stale_open: int, recent: int) -> float:
    """Composite 0-100 score penalizing defects, stale open work, and open load.

    Staleness is measured against open issues only.
    """
    score = (
        100
        - HEALTH_DEFECT_WEIGHT * ratio(bugs, total)
        - HEALTH_STALENESS_WEIGHT * ratio(stale_open, open_count)
        - HEALTH_OPEN_WEIGHT * ratio(open_count, total)
        + (HEALTH_RECENT_BONUS if recent > 0 else 0)
    )
    return clamp_score(score)


def health_bucket(score: float) -> str:
    if score >= HEALTHY_MIN_SCORE:
        return HEALTHY
    if score >= CONCERN_MIN_SCORE:
        return CONCERN
    return CRITICAL


def activity_level(recent_count: int) -> str:
    if recent_count > HIGH_ACTIVITY_ABOVE:
        return "HIGH"
    if recent_count > MEDIUM_ACTIVITY_ABOVE:
        return "MEDIUM"
    return "LOW"


def _unique(issues: Iterable[Issue]) -> dict[str, Issue]:
    out: dict[str, Issue] = {}
    for issue in issues:
        out.setdefault(issue.key, issue)
    return out


def component_health_report(
    component: str,
    all_issues: Iterable[Issue],
    open_issues: Iterable[Issue],
    recent_issues: Iterable[Issue],
    now: datetime | None = None,
) -> dict:
    everything = _unique(all_issues)
    remaining = _unique(open_issues)
    recent = _unique(recent_issues)
    for key, issue in remaining.items():
        everything.setdefault(key, issue)

    total = len(everything)
    open_count = len(remaining)
    bugs = sum(1 for i in everything.values() if is_bug(i))
    open_ages = [age_days(i.created, now) for i in remaining.values()]
    stale = [i for i in remaining.values() if is_older_than(i.created, STALE_DAYS, now)]
    score = health_score(total, open_count, bugs, len(stale), len(recent))
    defect_ratio = round(ratio(bugs, total), 3)
    activity = activity_level(len(recent))

    recommendations = []
    if defect_ratio > 0.3:
        recommendations.append("Defects dominate this component; schedule a quality review")
    if stale:
        recommendations.append(f"Triage {len(stale)} open issues older than {STALE_DAYS} days")
    if activity == "LOW" and open_count:
        recommendations.append("Little recent activity; confirm the component still has an owner")
    if not recommendations:
        recommendations.append("Component is in good shape; keep monitoring")

    return {
        "component": component,
        "metrics": {
            "total_issues": total,
            "open_issues": open_count,
            "bug_count": bugs,
            "defect_ratio": defect_ratio,
            "avg_open_age_days": average_age(open_ages),
            "stale_issues": len(stale),
            "completion_rate": percentage(total - open_count, total, empty=100),
            "recent_issues": len(recent),
            "activity_level": activity,
        },
        "health_score": score,
        "health_status": health_bucket(score),
        "stale_issue_details": [i.to_summary() for i in stale],
        "recommendations": recommendations,
    }


def component_stats_frame(issues: Iterable[Issue], now: datetime | None = None) -> pd.DataFrame:
    """Per-component statistics; an issue counts once toward every component it carries.

    Issues without components are grouped under ``NO_COMPONENT``.
    """
    df = issues_to_dataframe(_unique(issues).values(), now)
    if df.empty:
        return pd.DataFrame()
    df["components"] = df["components"].apply(lambda names: names or [NO_COMPONENT])
    exploded = df.explode("components").rename(columns={"components": "component"})
    exploded["is_open"] = exploded["status_bucket"] != DONE
    exploded["is_recent"] = exploded["age_days"].between(0, RECENT_DAYS, inclusive="left")
    exploded["is_stale_open"] = exploded["is_open"] & (exploded["age_days"] > STALE_DAYS)
    grouped = exploded.groupby("component").agg(
        total=("key", "nunique"),
        open=("is_open", "sum"),
        bugs=("is_bug", "sum"),
        recent=("is_recent", "sum"),
        stale_open=("is_stale_open", "sum"),
        avg_age_days=("age_days", "mean"),
    )
    return grouped.reset_index()


def component_health_summary(issues: Iterable[Issue], now: datetime | None = None) -> dict:
    stats = component_stats_frame(issues, now)
    buckets: dict[str, list[dict]] = {HEALTHY: [], CONCERN: [], CRITICAL: []}
    total_issues = 0
    for _, row in stats.iterrows():
        total, open_count = int(row["total"]), int(row["open"])
        bugs, recent, stale_open = int(row["bugs"]), int(row["recent"]), int(row["stale_open"])
        score = health_score(total, open_count, bugs, stale_open, recent)
        avg_age = row["avg_age_days"]
        total_issues += total
        buckets[health_bucket(score)].append(
            {
                "component": str(row["component"]),
                "health_score": score,
                "total_issues": total,
                "open_issues": open_count,
                "bug_count": bugs,
                "defect_ratio": round(ratio(bugs, total), 3),
                "recent_issues": recent,
                "stale_open_issues": stale_open,
                "avg_age_days": 0.0 if pd.isna(avg_age) else round(float(avg_age), 1),
            }
        )

    buckets[HEALTHY].sort(key=lambda c: (-c["health_score"], c["component"]))
    buckets[CONCERN].sort(key=lambda c: (c["health_score"], c["component"]))
    buckets[CRITICAL].sort(key=lambda c: (c["health_score"], c["component"]))

    scores = [c["health_score"] for bucket in buckets.values() for c in bucket]
    return {
        "component_summary": {
            "total_components": len(scores),
            "healthy_components": len(buckets[HEALTHY]),
            "concern_components": len(buckets[CONCERN]),
            "critical_components": len(buckets[CRITICAL]),
            "average_health_score": round(sum(scores) / len(scores), 1) if scores else 100.0,
            "issue_component_pairs": total_issues,
        },
        "component_details": buckets,
    }
