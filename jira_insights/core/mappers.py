"""Mapping raw Jira issue/sprint JSON into domain models and DataFrames."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

import pandas as pd

from jira_insights.analytics.metrics.aging import age_days

from .errors import MalformedIssueError
from .models import Board, Issue, Sprint, SprintState
from .status import is_bug, is_critical_priority, is_high_priority, velocity_bucket


def parse_dt(val) -> datetime | None:
    if not val:
        return None
    if isinstance(val, datetime):
        ts = pd.Timestamp(val)
        ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    else:
        ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def _name(node: Any, attr: str = "name") -> str | None:
    if isinstance(node, Mapping):
        value = node.get(attr)
        return str(value) if value else None
    return None


def document_text(value: Any) -> str | None:
    """Flatten an Atlassian document (REST v3) or plain string into text."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    parts: list[str] = []

    def walk(node: Any):
        if isinstance(node, Mapping):
            text = node.get("text")
            if isinstance(text, str):
                parts.append(text)
            for child in node.get("content") or []:
                walk(child)
        elif isinstance(node, list):
            for item in node:
                walk(item)

    walk(value)
    return " ".join(parts) or None


def map_issue(raw: Mapping[str, Any]) -> Issue:
    """Build an :class:`Issue` from a Jira search/issue payload.

    Accepts both the nested REST shape (``{"key", "fields": {...}}``) and the
    flattened shape used by board/sprint listings (``assignee`` as a display
    name string).
    """
    if not isinstance(raw, Mapping):
        raise MalformedIssueError(f"Issue payload must be a mapping, got {type(raw).__name__}")
    fields = raw.get("fields")
    if not isinstance(fields, Mapping):
        fields = raw

    def person(value):
        if isinstance(value, Mapping):
            return value.get("displayName")
        return value or None

    def named(value):
        if isinstance(value, Mapping):
            return _name(value)
        return value or None

    return Issue(
        key=raw.get("key"),
        summary=fields.get("summary") or "",
        description=document_text(fields.get("description")),
        status=named(fields.get("status")),
        priority=named(fields.get("priority")),
        assignee=person(fields.get("assignee")),
        reporter=person(fields.get("reporter")),
        created=parse_dt(fields.get("created")),
        updated=parse_dt(fields.get("updated")),
        resolved=parse_dt(fields.get("resolutiondate")),
        issue_type=named(fields.get("issuetype") or fields.get("issue_type")),
        components=[named(c) for c in fields.get("components") or []],
        labels=list(fields.get("labels") or []),
    )


def map_issues(raw_issues: Iterable[Mapping[str, Any]]) -> list[Issue]:
    return [map_issue(r) for r in raw_issues]


def map_column_entry(entry: Any) -> Issue:
    if isinstance(entry, str):
        return Issue.stub(entry)
    return map_issue(entry)


def map_sprint(raw: Mapping[str, Any]) -> Sprint:
    columns = raw.get("columns") or {}
    return Sprint(
        id=raw.get("id"),
        name=raw.get("name") or "",
        state=SprintState.parse(raw.get("state")),
        start_date=raw.get("start_date_str") or raw.get("startDate"),
        end_date=raw.get("end_date_str") or raw.get("endDate"),
        columns={
            str(column): tuple(map_column_entry(e) for e in entries or [])
            for column, entries in columns.items()
        },
    )


def map_board(raw: Any) -> Board:
    raw_dict = getattr(raw, "raw", raw)
    return Board(
        name=raw_dict.get("name") or "",
        type=raw_dict.get("type"),
        id=raw_dict.get("id"),
    )


def issues_to_dataframe(issues: Iterable[Issue], now: datetime | None = None) -> pd.DataFrame:
    rows = []
    for i in issues:
        rows.append(
            {
                "key": i.key,
                "summary": i.summary,
                "status": i.status,
                "status_bucket": velocity_bucket(i.status),
                "priority": i.priority_name,
                "assignee": i.assignee_name,
                "issuetype": i.issue_type,
                "components": sorted(i.components),
                "labels": sorted(i.labels),
                "created": i.created,
                "updated": i.updated,
                "age_days": age_days(i.created, now),
                "is_bug": is_bug(i),
                "is_high": is_high_priority(i.priority),
                "is_critical": is_critical_priority(i.priority),
            }
        )
    df = pd.DataFrame(rows)
    if not df.empty:
        df["age_days"] = pd.to_numeric(df["age_days"], errors="coerce")
        for col in ("created", "updated"):
            df[col] = pd.to_datetime(df[col], utc=True, errors="coerce")
    return df
