import pytest
from requests.exceptions import ConnectionError as RequestsConnectionError

from jira_insights import app
from jira_insights.core.config import EngineConfig, JiraConnection
from jira_insights.core.errors import DataFetchError
from jira_insights.core.service import IssueService


class Notes:
    def __init__(self):
        self.messages = []

    def __getattr__(self, level):
        return lambda text: self.messages.append((level, text))


class FakeAPI:
    def __init__(self, server, email, token):
        self.server = server


def _config(connection=JiraConnection("https://example.atlassian.net", "dev@example.com", "secret")):
    return EngineConfig(default_project="APP", connection=connection)


def test_connect_stores_service(monkeypatch):
    monkeypatch.setattr(app, "JiraAPI", FakeAPI)
    state, notes = {}, Notes()
    assert app.connect(_config(), state, notes)
    assert isinstance(state["issue_service"], IssueService)
    assert state["jira_server"] == "https://example.atlassian.net"
    assert notes.messages[-1][0] == "success"


@pytest.mark.parametrize(
    "error",
    [DataFetchError("Could not connect: 401 Unauthorized"), RequestsConnectionError("connection refused")],
)
def test_connect_failure_is_reported_and_clears_state(monkeypatch, error):
    def unreachable(server, email, token):
        raise error

    monkeypatch.setattr(app, "JiraAPI", unreachable)
    state, notes = {"issue_service": object()}, Notes()
    assert not app.connect(_config(), state, notes)
    assert "issue_service" not in state
    level, text = notes.messages[-1]
    assert level == "error"
    assert str(error) in text


def test_connect_without_credentials_warns():
    state, notes = {}, Notes()
    assert not app.connect(_config(connection=None), state, notes)
    assert state == {}
    assert notes.messages[0][0] == "warning"
