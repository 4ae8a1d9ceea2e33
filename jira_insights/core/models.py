"""Domain data models for Jira issues, sprints, and boards."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .config import UNASSIGNED, UNDEFINED_PRIORITY, UNKNOWN_STATUS
from .errors import MalformedIssueError

ISSUE_KEY_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*-\d+$")


class SprintState(str, Enum):
    ACTIVE = "active"
    CLOSED = "closed"
    FUTURE = "future"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: str | None) -> SprintState:
        text = str(value or "").strip().lower()
        for state in cls:
            if state.value == text:
                return state
        return cls.UNKNOWN


def _as_frozenset(values) -> frozenset[str]:
    if not values:
        return frozenset()
    if isinstance(values, str):
        values = [values]
    return frozenset(str(v) for v in values if v)


@dataclass(frozen=True, slots=True)
class Issue:
    key: str
    summary: str = ""
    description: str | None = None
    status: str = UNKNOWN_STATUS
    priority: str | None = None
    assignee: str | None = None
    reporter: str | None = None
    created: datetime | None = None
    updated: datetime | None = None
    resolved: datetime | None = None
    issue_type: str | None = None
    components: frozenset[str] = field(default_factory=frozenset)
    labels: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if not self.key or not isinstance(self.key, str):
            raise MalformedIssueError("Issue is missing its key")
        if not ISSUE_KEY_PATTERN.match(self.key):
            raise MalformedIssueError(f"Issue key {self.key!r} is not in PROJECT-NUMBER form")
        # Normalize collections so callers may pass lists
        object.__setattr__(self, "components", _as_frozenset(self.components))
        object.__setattr__(self, "labels", _as_frozenset(self.labels))
        object.__setattr__(self, "summary", self.summary or "")
        object.__setattr__(self, "status", self.status or UNKNOWN_STATUS)

    @classmethod
    def stub(cls, key: str) -> Issue:
        """Key-only issue, used for sprint columns that list bare keys."""
        return cls(key=key)

    @property
    def project_key(self) -> str:
        return self.key.rsplit("-", 1)[0]

    @property
    def assignee_name(self) -> str:
        if not self.assignee or self.assignee == UNASSIGNED:
            return UNASSIGNED
        return self.assignee

    @property
    def is_unassigned(self) -> bool:
        return self.assignee_name == UNASSIGNED

    @property
    def priority_name(self) -> str:
        return self.priority or UNDEFINED_PRIORITY

    def to_summary(self) -> dict:
        return {
            "key": self.key,
            "summary": self.summary,
            "status": self.status,
            "priority": self.priority_name,
            "assignee": self.assignee_name,
            "created": self.created.isoformat() if self.created else None,
            "updated": self.updated.isoformat() if self.updated else None,
            "components": sorted(self.components),
            "labels": sorted(self.labels),
        }


@dataclass(frozen=True, slots=True)
class Sprint:
    id: int | str | None
    name: str
    state: SprintState = SprintState.UNKNOWN
    start_date: str | None = None
    end_date: str | None = None
    columns: dict[str, tuple[Issue, ...]] = field(default_factory=dict)

    @property
    def is_active(self) -> bool:
        return self.state is SprintState.ACTIVE


@dataclass(frozen=True, slots=True)
class Board:
    name: str
    type: str | None = None
    id: int | None = None
