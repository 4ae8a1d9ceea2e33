"""Central configuration, analytics constants, and the runtime configuration loader."""

from __future__ import annotations

import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import pytz
import yaml

from .errors import ConfigurationError

# =============================================================================
# Jira Connection Defaults
# =============================================================================
DEFAULT_TIMEZONE = "UTC"
DEFAULT_MAX_RESULTS = 50
CONFIG_FILENAME = "insights.yaml"

# =============================================================================
# Named buckets for absent fields
# =============================================================================
UNASSIGNED = "Unassigned"
UNDEFINED_PRIORITY = "Undefined"
UNKNOWN_STATUS = "Unknown"
NO_COMPONENT = "No Component"

# =============================================================================
# Keyword extraction / similarity
# =============================================================================
KEYWORD_MIN_LENGTH = 3  # tokens of this length or shorter are dropped
STOP_WORDS: frozenset[str] = frozenset(
    {"the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
)
SEARCH_SIGNATURE_SIZE = 3
HIGH_SIMILARITY = 0.7
MEDIUM_SIMILARITY = 0.4

# =============================================================================
# Status and priority keywords (lowercase substring matching)
# =============================================================================
DONE_KEYWORDS: Sequence[str] = ("done", "closed", "complete")
IN_PROGRESS_KEYWORDS: Sequence[str] = ("progress", "review", "testing")
ACTIVE_WORK_KEYWORDS: Sequence[str] = ("progress", "review")
INITIAL_STATUSES: frozenset[str] = frozenset({"new", "to do", "open"})
HIGH_PRIORITY_KEYWORDS: Sequence[str] = ("high",)
CRITICAL_PRIORITY_KEYWORDS: Sequence[str] = ("critical", "blocker")
BLOCKED_MARKER = "blocked"
BLOCKER_PRIORITY = "blocker"
TESTING_LABEL_KEYWORDS: Sequence[str] = ("test", "qa")
BUG_ISSUE_TYPE = "bug"

# =============================================================================
# Time windows (days)
# =============================================================================
STALE_DAYS = 60
RECENT_DAYS = 30

# =============================================================================
# Workload
# =============================================================================
RECENT_ACTIVITY_SAMPLE = 5
EXPERT_ACTIVITY_SAMPLE = 3
WELL_BALANCED_SPREAD = 5
MODERATE_IMBALANCE_SPREAD = 15
OVERLOAD_FACTOR = 1.5
UNDERUTILIZED_FACTOR = 0.5
PRIORITY_SHARE_LIMIT = 0.5

# =============================================================================
# Release readiness
# =============================================================================
READINESS_INCOMPLETE_WEIGHT = 0.6
READINESS_CRITICAL_WEIGHT = 10
READINESS_BLOCKED_WEIGHT = 8
READINESS_UNASSIGNED_WEIGHT = 0.3
COMPLETION_HIGH_RISK_BELOW = 50
COMPLETION_MEDIUM_RISK_MAX = 80  # inclusive
CRITICAL_HIGH_RISK_ABOVE = 5
BLOCKED_HIGH_RISK_ABOVE = 3
UNASSIGNED_MEDIUM_RISK_ABOVE = 30

# =============================================================================
# Component health
# =============================================================================
HEALTH_DEFECT_WEIGHT = 50
HEALTH_STALENESS_WEIGHT = 40
HEALTH_OPEN_WEIGHT = 30
HEALTH_RECENT_BONUS = 5
HEALTHY_MIN_SCORE = 80
CONCERN_MIN_SCORE = 60
HIGH_ACTIVITY_ABOVE = 5
MEDIUM_ACTIVITY_ABOVE = 2

# =============================================================================
# Provider limits
# =============================================================================
LATEST_ISSUES_LIMIT = 20
DUPLICATE_CANDIDATE_LIMIT = 10
EXPERT_HISTORY_LIMIT = 50
COMMENT_BODY_LIMIT = 1000

JIRA_FETCH_BASE_FIELDS = [
    "summary",
    "description",
    "status",
    "priority",
    "assignee",
    "reporter",
    "created",
    "updated",
    "resolutiondate",
    "issuetype",
    "components",
    "labels",
]


@dataclass(frozen=True, slots=True)
class JiraConnection:
    server: str
    email: str
    token: str


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Per-call configuration shared read-only by every operation."""

    default_project: str
    boards: tuple[str, ...] = ()
    timezone: str = DEFAULT_TIMEZONE
    max_results: int = DEFAULT_MAX_RESULTS
    connection: JiraConnection | None = None


def _split_boards(value) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        value = value.split(",")
    return tuple(b.strip() for b in value if b and str(b).strip())


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> EngineConfig:
    """Build an :class:`EngineConfig` from an optional YAML file and the environment.

    Environment variables take precedence over the file. ``JIRA_DEFAULT_PROJECT``
    (or ``default_project`` in the file) is required.

    Parameters
    ----------
    path : str | Path | None
        YAML file to read. Defaults to ``insights.yaml`` in the working directory;
        a missing default file is not an error.
    environ : Mapping[str, str] | None
        Environment mapping, ``os.environ`` when omitted.
    """
    env = os.environ if environ is None else environ
    yaml_path = Path(path) if path is not None else Path.cwd() / CONFIG_FILENAME
    data: dict = {}
    if yaml_path.exists():
        try:
            data = yaml.safe_load(yaml_path.read_text()) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid configuration file {yaml_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigurationError(f"Configuration file {yaml_path} must contain a mapping")
    elif path is not None:
        raise ConfigurationError(f"Configuration file not found: {yaml_path}")

    jira_section = data.get("jira") or {}
    default_project = env.get("JIRA_DEFAULT_PROJECT") or data.get("default_project")
    if not default_project:
        raise ConfigurationError("Missing required setting: JIRA_DEFAULT_PROJECT")

    server = env.get("JIRA_SERVER") or jira_section.get("server")
    email = env.get("JIRA_EMAIL") or jira_section.get("email")
    token = env.get("JIRA_API_TOKEN") or jira_section.get("token")
    connection = JiraConnection(server, email, token) if server and email and token else None

    max_results = env.get("JIRA_MAX_RESULTS") or data.get("max_results") or DEFAULT_MAX_RESULTS
    try:
        max_results = int(max_results)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"max_results must be an integer, got {max_results!r}") from exc

    timezone = env.get("JIRA_TIMEZONE") or data.get("timezone") or DEFAULT_TIMEZONE
    if timezone not in pytz.all_timezones_set:
        raise ConfigurationError(f"Unknown timezone: {timezone}")

    return EngineConfig(
        default_project=str(default_project).strip(),
        boards=_split_boards(env.get("JIRA_BOARDS") or data.get("boards")),
        timezone=timezone,
        max_results=max_results,
        connection=connection,
    )
