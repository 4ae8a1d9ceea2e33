"""Sprint progress and velocity aggregation."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from jira_insights.core.models import Sprint
from jira_insights.core.status import DONE, IN_PROGRESS, velocity_bucket

from .metrics.aging import utc_now
from .metrics.ratios import percentage


def select_sprints(sprints: Sequence[Sprint], sprint_name: str | None = None) -> list[Sprint]:
    """Pick the sprints to analyze.

    With a name, only sprints carrying exactly that name are returned. Without
    one, active sprints are returned; a board with no active sprint falls back
    to its first sprint so the caller still gets a report.
    """
    if sprint_name:
        return [s for s in sprints if s.name == sprint_name]
    active = [s for s in sprints if s.is_active]
    if active:
        return active
    return list(sprints[:1])


def analyze_sprint(sprint: Sprint) -> dict:
    by_status: dict[str, dict] = {}
    by_assignee: dict[str, int] = {}
    unassigned = 0
    velocity = {"done_issues": 0, "in_progress_issues": 0, "todo_issues": 0}
    total = 0

    for column_name, issues in sprint.columns.items():
        count = len(issues)
        total += count
        by_status[column_name] = {
            "count": count,
            "issues": [issue.to_summary() for issue in issues],
        }
        bucket = velocity_bucket(column_name)
        if bucket == DONE:
            velocity["done_issues"] += count
        elif bucket == IN_PROGRESS:
            velocity["in_progress_issues"] += count
        else:
            velocity["todo_issues"] += count

        for issue in issues:
            if issue.is_unassigned:
                unassigned += 1
            else:
                by_assignee[issue.assignee_name] = by_assignee.get(issue.assignee_name, 0) + 1

    return {
        "sprint_info": {
            "name": sprint.name,
            "id": sprint.id,
            "state": sprint.state.value,
            "start_date": sprint.start_date,
            "end_date": sprint.end_date,
        },
        "issue_analysis": {
            "total_issues": total,
            "by_status": by_status,
            "by_assignee": by_assignee,
            "unassigned_count": unassigned,
        },
        "progress_metrics": {
            "completion_percentage": percentage(velocity["done_issues"], total),
            "velocity_indicators": velocity,
        },
    }


def sprint_insights(
    board_name: str,
    sprints: Sequence[Sprint],
    sprint_name: str | None = None,
    now: datetime | None = None,
) -> dict:
    insights = [analyze_sprint(s) for s in select_sprints(sprints, sprint_name)]
    return {
        "board_name": board_name,
        "analysis_timestamp": (now or utc_now()).isoformat(),
        "sprint_insights": insights,
        "summary": {
            "total_sprints_analyzed": len(insights),
            "active_sprints": sum(1 for i in insights if i["sprint_info"]["state"] == "active"),
        },
    }
