"""Exception hierarchy shared by the provider, the engine, and the operation registry."""

from __future__ import annotations


class InsightError(Exception):
    """Base class for every failure an operation reports to its caller."""


class ConfigurationError(InsightError):
    pass


class DataFetchError(InsightError):
    """The tracker could not return data (network, auth, or query failure)."""

    def __init__(self, message: str, *, query: str | None = None):
        super().__init__(message)
        self.query = query


class MalformedIssueError(InsightError, ValueError):
    """A supplied record violates the issue data model."""


class InvalidParametersError(InsightError, ValueError):
    pass


class UnknownOperationError(InsightError, KeyError):
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "unknown operation"
