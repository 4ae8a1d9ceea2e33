"""Combine duplicate detection and component expertise into a triage summary."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from jira_insights.core.models import Issue
from jira_insights.core.status import is_initial_status

from .duplicates import REVIEW_FOR_DUPLICATES, analyze_duplicates
from .experts import component_experts
from .metrics.aging import age_days


def expert_component(issue: Issue) -> str | None:
    """Component used for the expertise lookup (first in alphabetical order)."""
    return min(issue.components) if issue.components else None


def next_steps(issue: Issue, duplicates: dict, experts: dict | None) -> list[str]:
    steps = []
    if duplicates["recommendations"]["action"] == REVIEW_FOR_DUPLICATES:
        top = duplicates["recommendations"]["top_candidate"]
        steps.append(f"Review potential duplicate: {top['key']}")
    if experts is not None and issue.is_unassigned:
        primary = experts["recommendations"]["primary_expert"]
        if primary is not None:
            steps.append(f"Consider assigning to {primary['name']} (component expert)")
    if is_initial_status(issue.status):
        steps.append("Move to In Progress and begin investigation")
    steps.append("Add any missing components or labels for better tracking")
    return steps


def triage_summary(
    issue: Issue,
    candidates: Iterable[Issue],
    component_history: Iterable[Issue] | None = None,
    now: datetime | None = None,
) -> dict:
    duplicates = analyze_duplicates(issue, candidates)
    component = expert_component(issue)
    experts = None
    if component is not None and component_history is not None:
        experts = component_experts(component, component_history, now)

    review = duplicates["recommendations"]["action"] == REVIEW_FOR_DUPLICATES
    assignment = None
    if experts is not None:
        assignment = {
            "component": component,
            "current_assignee_expertise": next(
                (e for e in experts["experts"] if e["name"] == issue.assignee_name), None
            ),
            "recommended_expert": experts["recommendations"]["primary_expert"],
            "component_workload": [
                {"name": e["name"], "open_issues": e["open_issues"]} for e in experts["experts"]
            ],
        }

    return {
        "issue_overview": {
            "key": issue.key,
            "summary": issue.summary,
            "status": issue.status,
            "priority": issue.priority_name,
            "assignee": issue.assignee_name,
            "age_days": age_days(issue.created, now),
            "components": sorted(issue.components),
        },
        "duplicate_risk": {
            "risk_level": "HIGH" if review else "LOW",
            "potential_duplicates": duplicates["duplicate_analysis"]["potential_duplicates_found"],
            "top_match": duplicates["recommendations"]["top_candidate"],
        },
        "assignment_analysis": assignment,
        "triage_recommendations": [
            {
                "priority": "HIGH" if review else "LOW",
                "action": duplicates["recommendations"]["action"],
                "reason": (
                    "Potential duplicate detected - review before proceeding"
                    if review
                    else "No duplicates found - proceed with normal triage"
                ),
            }
        ],
        "next_steps": next_steps(issue, duplicates, experts),
    }
