"""Per-user workload statistics, capacity balance, and rebalancing advice."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from datetime import datetime

import pandas as pd
import pytz

from jira_insights.core.config import (
    MODERATE_IMBALANCE_SPREAD,
    OVERLOAD_FACTOR,
    PRIORITY_SHARE_LIMIT,
    RECENT_ACTIVITY_SAMPLE,
    STALE_DAYS,
    UNASSIGNED,
    UNDERUTILIZED_FACTOR,
    WELL_BALANCED_SPREAD,
)
from jira_insights.core.mappers import issues_to_dataframe
from jira_insights.core.models import Issue
from jira_insights.core.status import DONE, IN_PROGRESS, is_active_work_status

WELL_BALANCED = "WELL_BALANCED"
MODERATE_IMBALANCE = "MODERATE_IMBALANCE"
SIGNIFICANT_IMBALANCE = "SIGNIFICANT_IMBALANCE"

_EPOCH = datetime(1970, 1, 1, tzinfo=pytz.UTC)


@dataclass(slots=True)
class WorkloadStat:
    name: str
    total_assigned: int = 0
    in_progress: int = 0
    open: int = 0
    done: int = 0
    high_priority: int = 0
    critical_priority: int = 0
    overdue: int = 0
    avg_age_days: float = 0.0
    recent_activity: list[dict] = field(default_factory=list)

    @property
    def priority_share(self) -> float:
        if not self.total_assigned:
            return 0.0
        return (self.high_priority + self.critical_priority) / self.total_assigned

    def to_dict(self) -> dict:
        return asdict(self)


def _activity_ts(issue: Issue) -> datetime:
    ts = issue.updated or issue.created
    if ts is None:
        return _EPOCH
    if ts.tzinfo is None:
        return pytz.UTC.localize(ts)
    return ts


def recent_activity(issues: Iterable[Issue], limit: int = RECENT_ACTIVITY_SAMPLE) -> list[dict]:
    ordered = sorted(issues, key=_activity_ts, reverse=True)
    return [
        {
            "key": i.key,
            "summary": i.summary,
            "status": i.status,
            "updated": i.updated.isoformat() if i.updated else None,
        }
        for i in ordered[:limit]
    ]


def build_user_stats(
    issues: Iterable[Issue],
    *,
    now: datetime | None = None,
    sample: int = RECENT_ACTIVITY_SAMPLE,
) -> tuple[list[WorkloadStat], int]:
    """Aggregate issues per assignee.

    Returns the per-user stats (largest load first, then by name) and the
    number of issues without an assignee, which never appear as a user.
    """
    issue_list = list(issues)
    df = issues_to_dataframe(issue_list, now)
    if df.empty:
        return [], 0

    df["is_done"] = df["status_bucket"] == DONE
    df["is_in_progress"] = df["status_bucket"] == IN_PROGRESS
    df["is_open"] = ~df["is_done"] & ~df["is_in_progress"]
    df["is_overdue"] = ~df["is_done"] & (df["age_days"] > STALE_DAYS)

    unassigned_mask = df["assignee"] == UNASSIGNED
    unassigned = int(unassigned_mask.sum())
    assigned = df[~unassigned_mask]
    if assigned.empty:
        return [], unassigned

    grouped = assigned.groupby("assignee").agg(
        total_assigned=("key", "nunique"),
        done=("is_done", "sum"),
        in_progress=("is_in_progress", "sum"),
        open=("is_open", "sum"),
        high_priority=("is_high", "sum"),
        critical_priority=("is_critical", "sum"),
        overdue=("is_overdue", "sum"),
        avg_age_days=("age_days", "mean"),
    )

    by_user: dict[str, list[Issue]] = {}
    for issue in issue_list:
        if not issue.is_unassigned:
            by_user.setdefault(issue.assignee_name, []).append(issue)

    stats: list[WorkloadStat] = []
    for name, row in grouped.iterrows():
        avg_age = row["avg_age_days"]
        stats.append(
            WorkloadStat(
                name=str(name),
                total_assigned=int(row["total_assigned"]),
                in_progress=int(row["in_progress"]),
                open=int(row["open"]),
                done=int(row["done"]),
                high_priority=int(row["high_priority"]),
                critical_priority=int(row["critical_priority"]),
                overdue=int(row["overdue"]),
                avg_age_days=0.0 if pd.isna(avg_age) else round(float(avg_age), 1),
                recent_activity=recent_activity(by_user.get(str(name), []), sample),
            )
        )
    stats.sort(key=lambda s: (-s.total_assigned, s.name))
    return stats, unassigned


def classify_balance(spread: float) -> str:
    if spread <= WELL_BALANCED_SPREAD:
        return WELL_BALANCED
    if spread <= MODERATE_IMBALANCE_SPREAD:
        return MODERATE_IMBALANCE
    return SIGNIFICANT_IMBALANCE


def capacity_insights(stats: list[WorkloadStat]) -> dict:
    loads = [s.total_assigned for s in stats]
    if not loads:
        average, highest, lowest = 0.0, 0, 0
    else:
        average = sum(loads) / len(loads)
        highest, lowest = max(loads), min(loads)
    spread = highest - lowest
    return {
        "average_load": round(average, 1),
        "max_load": highest,
        "min_load": lowest,
        "variance": spread,
        "balance_status": classify_balance(spread),
        "overloaded_users": [s.name for s in stats if s.total_assigned > OVERLOAD_FACTOR * average],
        "underutilized_users": [
            s.name for s in stats if 0 < s.total_assigned < UNDERUTILIZED_FACTOR * average
        ],
    }


def workload_recommendations(stats: list[WorkloadStat], capacity: dict) -> list[dict]:
    recs: list[dict] = []
    overloaded = capacity["overloaded_users"]
    underutilized = capacity["underutilized_users"]
    if overloaded and underutilized:
        recs.append(
            {
                "type": "REDISTRIBUTE",
                "priority": "HIGH",
                "message": (
                    f"Move work from {', '.join(overloaded)} to {', '.join(underutilized)}"
                ),
                "users": overloaded + underutilized,
            }
        )
    elif overloaded:
        recs.append(
            {
                "type": "REDUCE_LOAD",
                "priority": "HIGH",
                "message": f"{', '.join(overloaded)} carry more than {OVERLOAD_FACTOR}x the average load",
                "users": list(overloaded),
            }
        )
    elif underutilized:
        recs.append(
            {
                "type": "INCREASE_LOAD",
                "priority": "LOW",
                "message": f"{', '.join(underutilized)} have spare capacity for new work",
                "users": list(underutilized),
            }
        )

    overdue_users = [s.name for s in stats if s.overdue > 0]
    if overdue_users:
        recs.append(
            {
                "type": "ADDRESS_OVERDUE",
                "priority": "MEDIUM",
                "message": f"Review issues open longer than {STALE_DAYS} days for {', '.join(overdue_users)}",
                "users": overdue_users,
            }
        )

    concentrated = [s.name for s in stats if s.priority_share > PRIORITY_SHARE_LIMIT]
    if concentrated:
        recs.append(
            {
                "type": "PRIORITY_CONCENTRATION",
                "priority": "MEDIUM",
                "message": (
                    f"Critical/high priority work exceeds {int(PRIORITY_SHARE_LIMIT * 100)}% "
                    f"of the load for {', '.join(concentrated)}"
                ),
                "users": concentrated,
            }
        )

    if not recs:
        recs.append(
            {
                "type": "BALANCED",
                "priority": "LOW",
                "message": "Workload is balanced; keep monitoring",
                "users": [],
            }
        )
    return recs


def analyze_workload(
    assigned_issues: Iterable[Issue],
    in_progress_issues: Iterable[Issue] = (),
    now: datetime | None = None,
) -> dict:
    """Build the workload document for a set of assigned issues.

    ``in_progress_issues`` is the provider's "currently in progress" subset.
    Only issues whose status name mentions progress or review belong to it;
    they are merged (by key) into the assigned set. Every issue is then
    classified by its own status name.
    """
    merged: dict[str, Issue] = {}
    for issue in assigned_issues:
        merged.setdefault(issue.key, issue)
    active_work = [i for i in in_progress_issues if is_active_work_status(i.status)]
    for issue in active_work:
        merged.setdefault(issue.key, issue)

    stats, unassigned = build_user_stats(merged.values(), now=now)
    capacity = capacity_insights(stats)
    return {
        "users": [s.to_dict() for s in stats],
        "summary": {
            "total_users": len(stats),
            "total_issues": len(merged),
            "unassigned_issues": unassigned,
            "total_in_progress": sum(s.in_progress for s in stats),
            "active_work_issues": len({i.key for i in active_work}),
            "total_overdue": sum(s.overdue for s in stats),
            "total_high_priority": sum(s.high_priority for s in stats),
            "total_critical_priority": sum(s.critical_priority for s in stats),
        },
        "capacity_insights": capacity,
        "recommendations": workload_recommendations(stats, capacity),
    }
