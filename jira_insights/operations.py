"""Named-operation registry: the request/response seam used by front ends."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from typing import Any

from jira_insights.core.errors import InsightError, InvalidParametersError, UnknownOperationError
from jira_insights.core.service import IssueService

logger = logging.getLogger(__name__)

OPERATIONS: dict[str, Callable[..., dict]] = {}


def register_operation(name):
    def decorator(func):
        OPERATIONS[name] = func
        return func

    return decorator


@register_operation("get_latest_issues")
def get_latest_issues(service: IssueService, project: str | None = None, count: int = 5):
    return service.latest_issues(project, count)


@register_operation("get_issue_details")
def get_issue_details(service: IssueService, issue_key: str):
    return service.issue_details(issue_key)


@register_operation("search_issues")
def search_issues(service: IssueService, query: str, project: str | None = None, max_results: int = 10):
    return service.search_issues(query, project, max_results)


@register_operation("list_boards")
def list_boards(service: IssueService, limit: int = 25):
    return service.list_boards(limit)


@register_operation("get_board_sprints")
def get_board_sprints(
    service: IssueService,
    board_name: str,
    sprint_name: str | None = None,
    show_all: bool = False,
    include_issues: bool = True,
):
    return service.board_sprints(board_name, sprint_name, show_all, include_issues)


@register_operation("get_sprint_insights")
def get_sprint_insights(service: IssueService, board_name: str, sprint_name: str | None = None):
    return service.sprint_insights(board_name, sprint_name)


@register_operation("analyze_duplicates")
def analyze_duplicates(service: IssueService, issue_key: str, project: str | None = None):
    return service.analyze_duplicates(issue_key, project)


@register_operation("get_component_experts")
def get_component_experts(service: IssueService, component: str, project: str | None = None):
    return service.component_experts(component, project)


@register_operation("get_workload_analysis")
def get_workload_analysis(
    service: IssueService,
    project: str | None = None,
    users: list[str] | None = None,
    days: int = 90,
):
    return service.workload_analysis(project, users, days)


@register_operation("get_release_readiness")
def get_release_readiness(service: IssueService, version: str, project: str | None = None):
    return service.release_readiness(version, project)


@register_operation("get_component_health")
def get_component_health(service: IssueService, component: str | None = None, project: str | None = None):
    return service.component_health(component, project)


@register_operation("get_triage_summary")
def get_triage_summary(service: IssueService, issue_key: str):
    return service.triage_summary(issue_key)


def failure(name: str, exc: Exception) -> dict[str, Any]:
    return {
        "operation": name,
        "status": "error",
        "error": type(exc).__name__,
        "cause": str(exc),
    }


def run_operation(
    service: IssueService,
    name: str,
    params: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Execute a registered operation.

    Returns the operation's document, or a failure document carrying the
    operation name and cause when an :class:`InsightError` is raised. Other
    exceptions are programming errors and propagate.
    """
    params = dict(params or {})
    try:
        func = OPERATIONS.get(name)
        if func is None:
            raise UnknownOperationError(f"Unknown operation: {name}")
        try:
            inspect.signature(func).bind(service, **params)
        except TypeError as exc:
            raise InvalidParametersError(f"Invalid parameters for {name}: {exc}") from exc
        return func(service, **params)
    except InsightError as exc:
        logger.error("Operation %s failed: %s", name, exc)
        return failure(name, exc)
