"""Jira API client wrapper (REST v3 enhanced search + Agile board/sprint endpoints)."""

from __future__ import annotations

import logging
from typing import Any

from jira import JIRA, JIRAError
from requests.exceptions import RequestException

from .errors import DataFetchError

logger = logging.getLogger(__name__)

REQUEST_ERRORS = (JIRAError, RequestException)


class JiraAPI:
    def __init__(self, server: str, email: str, token: str):
        self.server = server.rstrip("/")
        try:
            self.client = JIRA(
                basic_auth=(email, token), options={"server": self.server, "rest_api_version": "3"}
            )
        except REQUEST_ERRORS as exc:
            raise DataFetchError(f"Could not connect to {self.server}: {exc}") from exc

    def _get_json(
        self, path: str, params: dict[str, Any] | None = None, query: str | None = None
    ) -> dict[str, Any]:
        session = getattr(self.client, "_session", None)
        if session is None:
            raise DataFetchError("JIRA session unavailable", query=query)
        url = f"{self.server}{path}"
        try:
            resp = session.get(url, params=params)
        except REQUEST_ERRORS as exc:
            raise DataFetchError(f"Request to {path} failed: {exc}", query=query) from exc
        if resp.status_code >= 400:
            raise DataFetchError(
                f"Request to {path} failed {resp.status_code}: {resp.text[:200]}", query=query
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise DataFetchError(f"Request to {path} returned invalid JSON: {exc}", query=query) from exc

    def search_enhanced(
        self,
        jql: str,
        fields: list[str] | None = None,
        page_size: int = 100,
        max_results: int | None = None,
    ) -> list[dict[str, Any]]:
        """Run a JQL search, following ``nextPageToken`` until done or capped."""
        logger.debug("JQL search: %s", jql)
        params: dict[str, Any] = {"jql": jql, "maxResults": page_size}
        if max_results is not None:
            params["maxResults"] = min(page_size, max_results)
        if fields:
            params["fields"] = ",".join(fields)
        out: list[dict[str, Any]] = []
        token = None
        while True:
            qp = dict(params)
            if token:
                qp["nextPageToken"] = token
            try:
                data = self._get_json("/rest/api/3/search/jql", qp)
            except DataFetchError as exc:
                raise DataFetchError(f"Search failed: {exc}", query=jql) from exc
            out.extend(data.get("issues", []))
            if max_results is not None and len(out) >= max_results:
                return out[:max_results]
            token = data.get("nextPageToken")
            if not token or data.get("isLast") is True:
                break
        return out

    def fetch_issue_raw(self, issue_key: str) -> dict[str, Any]:
        try:
            issue = self.client.issue(issue_key)
        except REQUEST_ERRORS as exc:
            raise DataFetchError(f"Failed to fetch issue {issue_key}: {exc}", query=issue_key) from exc
        if hasattr(issue, "raw"):
            return issue.raw
        if isinstance(issue, dict):
            return issue
        raise DataFetchError(f"Unexpected issue payload type for {issue_key}: {type(issue)!r}")

    def boards(self, name: str | None = None, limit: int = 50) -> list[dict[str, Any]]:
        try:
            found = self.client.boards(maxResults=limit, name=name)
        except REQUEST_ERRORS as exc:
            raise DataFetchError(f"Failed to list boards: {exc}", query=name) from exc
        return [getattr(b, "raw", b) for b in found]

    def board_columns(self, board_id: int) -> dict[str, list[str]]:
        """Column name -> status ids, in board order."""
        data = self._get_json(f"/rest/agile/1.0/board/{board_id}/configuration")
        columns = (data.get("columnConfig") or {}).get("columns") or []
        return {
            col.get("name", ""): [str(s.get("id")) for s in col.get("statuses") or []] for col in columns
        }

    def sprints(self, board_id: int, state: str | None = None) -> list[dict[str, Any]]:
        try:
            found = self.client.sprints(board_id, state=state)
        except REQUEST_ERRORS as exc:
            raise DataFetchError(f"Failed to list sprints for board {board_id}: {exc}") from exc
        return [getattr(s, "raw", s) for s in found]
