"""Component expertise ranking from a component's issue history."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from jira_insights.core.config import EXPERT_ACTIVITY_SAMPLE
from jira_insights.core.models import Issue

from .workload import build_user_stats


def rank_experts(issues: Iterable[Issue], now: datetime | None = None) -> tuple[list[dict], int]:
    """Rank assignees by how many of the component's issues they have handled."""
    stats, unassigned = build_user_stats(issues, now=now, sample=EXPERT_ACTIVITY_SAMPLE)
    experts = []
    for s in stats:
        closed = s.done
        experts.append(
            {
                "name": s.name,
                "total_issues": s.total_assigned,
                "closed_issues": closed,
                "open_issues": s.total_assigned - closed,
                "completion_rate": round(closed / s.total_assigned, 3) if s.total_assigned else 0.0,
                "recent_activity": s.recent_activity,
            }
        )
    return experts, unassigned


def component_experts(component: str, issues: Iterable[Issue], now: datetime | None = None) -> dict:
    issue_list = list(issues)
    experts, unassigned = rank_experts(issue_list, now)
    most_active = next((e for e in experts if e["open_issues"] > 0), None)
    best_rate = max(experts, key=lambda e: e["completion_rate"], default=None)
    return {
        "component": component,
        "total_issues_analyzed": len(issue_list),
        "unassigned_issues": unassigned,
        "experts": experts,
        "recommendations": {
            "primary_expert": experts[0] if experts else None,
            "most_active_recently": most_active,
            "highest_completion_rate": best_rate,
        },
    }
