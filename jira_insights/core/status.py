"""Status, priority, and label classification utilities.

All matching here is case-insensitive substring matching on the names the
tracker reports. Board columns and workflow statuses are free-form per
project, so categories are derived from keywords rather than a fixed enum.
"""

from __future__ import annotations

from .config import (
    ACTIVE_WORK_KEYWORDS,
    BLOCKED_MARKER,
    BLOCKER_PRIORITY,
    BUG_ISSUE_TYPE,
    CRITICAL_PRIORITY_KEYWORDS,
    DONE_KEYWORDS,
    HIGH_PRIORITY_KEYWORDS,
    IN_PROGRESS_KEYWORDS,
    INITIAL_STATUSES,
    TESTING_LABEL_KEYWORDS,
)
from .models import Issue

DONE = "done"
IN_PROGRESS = "in_progress"
TODO = "todo"


def _contains_any(value: str | None, keywords) -> bool:
    text = str(value or "").lower()
    return any(word in text for word in keywords)


def velocity_bucket(name: str | None) -> str:
    """Map a column or status name to one of ``done``, ``in_progress``, ``todo``.

    Examples
    --------
    >>> velocity_bucket("Done")
    'done'
    >>> velocity_bucket("Code Review")
    'in_progress'
    >>> velocity_bucket("Backlog")
    'todo'
    """
    if _contains_any(name, DONE_KEYWORDS):
        return DONE
    if _contains_any(name, IN_PROGRESS_KEYWORDS):
        return IN_PROGRESS
    return TODO


def is_active_work_status(status: str | None) -> bool:
    """True for statuses counted as "in progress" by workload queries."""
    return _contains_any(status, ACTIVE_WORK_KEYWORDS)


def is_initial_status(status: str | None) -> bool:
    return str(status or "").strip().lower() in INITIAL_STATUSES


def is_high_priority(priority: str | None) -> bool:
    return _contains_any(priority, HIGH_PRIORITY_KEYWORDS)


def is_critical_priority(priority: str | None) -> bool:
    return _contains_any(priority, CRITICAL_PRIORITY_KEYWORDS)


def is_bug(issue: Issue) -> bool:
    return str(issue.issue_type or "").strip().lower() == BUG_ISSUE_TYPE


def is_blocked(issue: Issue) -> bool:
    """Blocker priority, a ``blocked`` label, or a Blocked status."""
    if str(issue.priority or "").strip().lower() == BLOCKER_PRIORITY:
        return True
    if str(issue.status or "").strip().lower() == BLOCKED_MARKER:
        return True
    return any(label.lower() == BLOCKED_MARKER for label in issue.labels)


def has_testing_label(issue: Issue) -> bool:
    return any(_contains_any(label, TESTING_LABEL_KEYWORDS) for label in issue.labels)
