"""Decision-support analytics for Jira issues, sprints, releases, and components."""

__version__ = "0.1.0"
