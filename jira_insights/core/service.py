"""IssueService: builds provider queries, fetches, maps, and hands data to the engine."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any

import pytz

from jira_insights.analytics.component_health import component_health_report, component_health_summary
from jira_insights.analytics.duplicates import analyze_duplicates, search_signature
from jira_insights.analytics.experts import component_experts
from jira_insights.analytics.release import release_readiness
from jira_insights.analytics.sprint import sprint_insights
from jira_insights.analytics.triage import expert_component, triage_summary
from jira_insights.analytics.workload import analyze_workload

from .config import (
    COMMENT_BODY_LIMIT,
    DUPLICATE_CANDIDATE_LIMIT,
    EXPERT_HISTORY_LIMIT,
    JIRA_FETCH_BASE_FIELDS,
    LATEST_ISSUES_LIMIT,
    RECENT_DAYS,
    EngineConfig,
)
from .errors import DataFetchError
from .jira_client import JiraAPI
from .mappers import document_text, map_board, map_issue, map_issues, map_sprint
from .models import Issue, Sprint

logger = logging.getLogger(__name__)

FETCH_MAX_WORKERS = 4
OPEN_CLAUSE = "statusCategory != Done"


def quote(value: str) -> str:
    """Quote a value for use inside a JQL string literal."""
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def sprint_to_dict(sprint: Sprint, include_issues: bool = True) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": sprint.id,
        "name": sprint.name,
        "state": sprint.state.value,
        "start_date": sprint.start_date,
        "end_date": sprint.end_date,
    }
    if include_issues:
        out["columns"] = {
            name: [issue.to_summary() for issue in issues] for name, issues in sprint.columns.items()
        }
    return out


class IssueService:
    def __init__(
        self,
        api: JiraAPI,
        config: EngineConfig,
        clock: Callable[[], datetime] | None = None,
    ):
        self.api = api
        self.config = config
        self._tz = pytz.timezone(config.timezone)
        self._clock = clock

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self._tz)

    # ------------------ Fetch Methods ------------------
    def project_for(self, project: str | None = None, issue_key: str | None = None) -> str:
        if project:
            return project
        if issue_key and "-" in issue_key:
            return issue_key.rsplit("-", 1)[0]
        return self.config.default_project

    def fetch_issues(self, jql: str, limit: int | None = None) -> list[Issue]:
        raw = self.api.search_enhanced(jql, fields=list(JIRA_FETCH_BASE_FIELDS), max_results=limit)
        return map_issues(raw)

    def fetch_issue(self, issue_key: str) -> Issue:
        return map_issue(self.api.fetch_issue_raw(issue_key))

    def fetch_many(self, queries: dict[str, tuple[str, int | None]]) -> dict[str, list[Issue]]:
        """Run independent JQL queries concurrently; any failure propagates."""
        if not queries:
            return {}
        with ThreadPoolExecutor(max_workers=min(FETCH_MAX_WORKERS, len(queries))) as pool:
            futures = {
                name: pool.submit(self.fetch_issues, jql, limit) for name, (jql, limit) in queries.items()
            }
            return {name: fut.result() for name, fut in futures.items()}

    def find_board(self, board_name: str) -> dict[str, Any]:
        boards = self.api.boards(name=board_name)
        for board in boards:
            if board.get("name") == board_name:
                return board
        if boards:
            return boards[0]
        raise DataFetchError(f"Board not found: {board_name}", query=board_name)

    def fetch_sprints(
        self,
        board_name: str,
        sprint_name: str | None = None,
        *,
        show_all: bool = False,
        include_issues: bool = True,
    ) -> list[Sprint]:
        board = self.find_board(board_name)
        board_id = board.get("id")
        state = "active,closed,future" if show_all else "active,future"
        raw_sprints = self.api.sprints(board_id, state=state)
        if sprint_name:
            raw_sprints = [s for s in raw_sprints if s.get("name") == sprint_name]
        if not include_issues:
            return [map_sprint(s) for s in raw_sprints]

        columns = self.api.board_columns(board_id)
        status_to_column = {sid: col for col, ids in columns.items() for sid in ids}
        sprints = []
        for raw in raw_sprints:
            grouped: dict[str, list] = {col: [] for col in columns}
            issues = self.api.search_enhanced(
                f"sprint = {raw.get('id')}", fields=list(JIRA_FETCH_BASE_FIELDS)
            )
            for issue in issues:
                status = (issue.get("fields") or {}).get("status") or {}
                column = status_to_column.get(str(status.get("id"))) or status.get("name") or "Unknown"
                grouped.setdefault(column, []).append(issue)
            sprints.append(map_sprint({**raw, "columns": grouped}))
        return sprints

    # ------------------ Listing Operations ------------------
    def latest_issues(self, project: str | None = None, count: int = 5) -> dict[str, Any]:
        project_key = self.project_for(project)
        limit = max(1, min(int(count), LATEST_ISSUES_LIMIT))
        issues = self.fetch_issues(f"project = {project_key} ORDER BY created DESC", limit)
        return {
            "total_count": len(issues),
            "issues": [i.to_summary() for i in issues],
            "query_timestamp": self.now().isoformat(),
            "note": f"Retrieved {len(issues)} most recent {project_key} issues",
        }

    def issue_details(self, issue_key: str) -> dict[str, Any]:
        raw = self.api.fetch_issue_raw(issue_key)
        issue = map_issue(raw)
        fields = raw.get("fields") or {}
        links = []
        for link in fields.get("issuelinks") or []:
            target = link.get("outwardIssue") or link.get("inwardIssue") or {}
            links.append(
                {
                    "relationship": (link.get("type") or {}).get("name"),
                    "target": target.get("key"),
                    "target_summary": (target.get("fields") or {}).get("summary"),
                }
            )
        comments = []
        for comment in (fields.get("comment") or {}).get("comments") or []:
            body = document_text(comment.get("body")) or ""
            comments.append(
                {
                    "author": (comment.get("author") or {}).get("displayName"),
                    "created": comment.get("created"),
                    "body": body[:COMMENT_BODY_LIMIT] + ("..." if len(body) > COMMENT_BODY_LIMIT else ""),
                }
            )
        return {
            **issue.to_summary(),
            "description": issue.description or "No description",
            "reporter": issue.reporter or "Unknown",
            "issue_type": issue.issue_type,
            "links": links,
            "comments": comments,
            "watchers": (fields.get("watches") or {}).get("watchCount", 0),
            "votes": (fields.get("votes") or {}).get("votes", 0),
        }

    def search_issues(self, query: str, project: str | None = None, max_results: int = 10) -> dict[str, Any]:
        lowered = query.lower()
        if "project =" in lowered or "jql" in lowered:
            jql = query
        else:
            project_key = self.project_for(project)
            q = quote(query)
            jql = f"project = {project_key} AND (summary ~ {q} OR description ~ {q} OR comment ~ {q})"
        issues = self.fetch_issues(jql, min(int(max_results), self.config.max_results))
        return {
            "query": query,
            "jql_used": jql,
            "total_found": len(issues),
            "results": [i.to_summary() for i in issues],
        }

    def list_boards(self, limit: int = 25) -> dict[str, Any]:
        configured = set(self.config.boards)
        boards = [map_board(b) for b in self.api.boards(limit=int(limit))]
        return {
            "boards": [
                {"name": b.name, "type": b.type, "id": b.id, "configured": b.name in configured}
                for b in boards
            ],
            "total_count": len(boards),
            "query_timestamp": self.now().isoformat(),
        }

    def board_sprints(
        self,
        board_name: str,
        sprint_name: str | None = None,
        show_all: bool = False,
        include_issues: bool = True,
    ) -> dict[str, Any]:
        sprints = self.fetch_sprints(
            board_name, sprint_name, show_all=show_all, include_issues=include_issues
        )
        return {
            "board_name": board_name,
            "filters_applied": {
                "sprint_name": sprint_name,
                "show_all": show_all,
                "include_issues": include_issues,
            },
            "sprints": [sprint_to_dict(s, include_issues) for s in sprints],
            "total_sprints": len(sprints),
            "query_timestamp": self.now().isoformat(),
        }

    # ------------------ Analytics Operations ------------------
    def sprint_insights(self, board_name: str, sprint_name: str | None = None) -> dict[str, Any]:
        logger.info("Sprint insights for board %s", board_name)
        sprints = self.fetch_sprints(board_name, sprint_name)
        return sprint_insights(board_name, sprints, sprint_name, now=self.now())

    def duplicate_candidates(self, issue: Issue, project: str | None = None) -> list[Issue]:
        keywords = search_signature(issue)
        if not keywords:
            return []
        project_key = self.project_for(project, issue.key)
        text = quote(" OR ".join(keywords))
        jql = (
            f"project = {project_key} AND key != {issue.key} "
            f"AND (summary ~ {text} OR description ~ {text}) ORDER BY created DESC"
        )
        return self.fetch_issues(jql, DUPLICATE_CANDIDATE_LIMIT)

    def analyze_duplicates(self, issue_key: str, project: str | None = None) -> dict[str, Any]:
        logger.info("Duplicate analysis for %s", issue_key)
        issue = self.fetch_issue(issue_key)
        return analyze_duplicates(issue, self.duplicate_candidates(issue, project))

    def component_history_jql(self, component: str, project: str | None = None) -> str:
        return f"project = {self.project_for(project)} AND component = {quote(component)}"

    def component_experts(self, component: str, project: str | None = None) -> dict[str, Any]:
        logger.info("Component experts for %s", component)
        issues = self.fetch_issues(self.component_history_jql(component, project), EXPERT_HISTORY_LIMIT)
        return component_experts(component, issues, now=self.now())

    def workload_analysis(
        self,
        project: str | None = None,
        users: Sequence[str] | None = None,
        days: int = 90,
    ) -> dict[str, Any]:
        project_key = self.project_for(project)
        base = f"project = {project_key} AND assignee is not EMPTY AND updated >= -{int(days)}d"
        if users:
            base += f" AND assignee in ({', '.join(quote(u) for u in users)})"
        logger.info("Workload analysis for %s", project_key)
        fetched = self.fetch_many(
            {
                "assigned": (base, None),
                "in_progress": (f"{base} AND statusCategory = \"In Progress\"", None),
            }
        )
        return {
            "project": project_key,
            **analyze_workload(fetched["assigned"], fetched["in_progress"], now=self.now()),
        }

    def release_readiness(self, version: str, project: str | None = None) -> dict[str, Any]:
        project_key = self.project_for(project)
        base = f"project = {project_key} AND fixVersion = {quote(version)}"
        logger.info("Release readiness for %s %s", project_key, version)
        fetched = self.fetch_many(
            {
                "all": (base, None),
                "open": (f"{base} AND {OPEN_CLAUSE}", None),
                "blocked": (f"{base} AND {OPEN_CLAUSE} AND (priority = Blocker OR labels = blocked)", None),
            }
        )
        return release_readiness(version, fetched["all"], fetched["open"], fetched["blocked"])

    def component_health(self, component: str | None = None, project: str | None = None) -> dict[str, Any]:
        project_key = self.project_for(project)
        if not component:
            logger.info("Component health summary for %s", project_key)
            issues = self.fetch_issues(f"project = {project_key}")
            return {"project": project_key, **component_health_summary(issues, now=self.now())}

        logger.info("Component health for %s/%s", project_key, component)
        base = self.component_history_jql(component, project_key)
        fetched = self.fetch_many(
            {
                "all": (base, None),
                "open": (f"{base} AND {OPEN_CLAUSE}", None),
                "recent": (f"{base} AND created >= -{RECENT_DAYS}d", None),
            }
        )
        return component_health_report(
            component, fetched["all"], fetched["open"], fetched["recent"], now=self.now()
        )

    def triage_summary(self, issue_key: str) -> dict[str, Any]:
        logger.info("Triage summary for %s", issue_key)
        issue = self.fetch_issue(issue_key)
        component = expert_component(issue)
        with ThreadPoolExecutor(max_workers=2) as pool:
            candidates_future = pool.submit(self.duplicate_candidates, issue)
            history_future = None
            if component is not None:
                history_future = pool.submit(
                    self.fetch_issues,
                    self.component_history_jql(component, issue.project_key),
                    EXPERT_HISTORY_LIMIT,
                )
            candidates = candidates_future.result()
            history = history_future.result() if history_future is not None else None
        return triage_summary(issue, candidates, history, now=self.now())
