"""Unit tests for Jira adapter (mocked API)."""

from unittest.mock import Mock, patch

import pytest
import requests

from jiradash.adapters.base import TrackerConfigError, TrackerError
from jiradash.adapters.jira import JiraAdapter


@pytest.fixture
def adapter() -> JiraAdapter:
    return JiraAdapter(base_url="https://acme.atlassian.net/", email="bot@acme.io", api_token="tok", timeout=5)


def _resp(status_code: int = 200, data: object = None, text: str = "") -> Mock:
    mock_resp = Mock()
    mock_resp.status_code = status_code
    mock_resp.text = text
    if isinstance(data, Exception):
        mock_resp.json.side_effect = data
    else:
        mock_resp.json.return_value = data
    return mock_resp


def test_search_issues_sends_jql_and_auth(adapter: JiraAdapter) -> None:
    """search_issues calls /rest/api/3/search with basic auth and params."""
    payload = {"total": 0, "issues": []}
    with patch.object(adapter._session, "request", return_value=_resp(200, payload)) as req:
        data = adapter.search_issues("project = POSC", ["summary", "status"], 1000)

    assert data == payload
    req.assert_called_once()
    args, kwargs = req.call_args
    assert args == ("GET", "https://acme.atlassian.net/rest/api/3/search")
    assert kwargs["auth"] == ("bot@acme.io", "tok")
    assert kwargs["timeout"] == 5
    assert kwargs["params"] == {
        "jql": "project = POSC",
        "fields": "summary,status",
        "maxResults": 1000,
        "expand": "names",
    }


def test_missing_credentials_raise_before_request() -> None:
    """No email/token raises TrackerConfigError and nothing is sent."""
    adapter = JiraAdapter(base_url="https://acme.atlassian.net", email="bot@acme.io", api_token=None)
    with patch.object(adapter._session, "request") as req:
        with pytest.raises(TrackerConfigError) as exc_info:
            adapter.search_issues("x", [], 10)
    req.assert_not_called()
    assert exc_info.value.status_code is None
    assert "JIRA_API_TOKEN" in exc_info.value.message


def test_error_status_uses_first_error_message(adapter: JiraAdapter) -> None:
    """401 keeps the status and the first errorMessages entry."""
    body = {"errorMessages": ["You are not authenticated", "second"], "errors": {}}
    with patch.object(adapter._session, "request", return_value=_resp(401, body)):
        with pytest.raises(TrackerError) as exc_info:
            adapter.search_issues("x", [], 10)
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == "You are not authenticated"
    assert exc_info.value.details == body


def test_error_status_falls_back_to_errors_dict(adapter: JiraAdapter) -> None:
    """Field errors are used when errorMessages is empty."""
    body = {"errorMessages": [], "errors": {"jql": "Field 'foo' does not exist"}}
    with patch.object(adapter._session, "request", return_value=_resp(400, body)):
        with pytest.raises(TrackerError) as exc_info:
            adapter.search_issues("foo = 1", [], 10)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Field 'foo' does not exist"


def test_error_status_with_non_json_body(adapter: JiraAdapter) -> None:
    """Non-JSON error bodies become a generic message with text details."""
    with patch.object(adapter._session, "request", return_value=_resp(503, ValueError("no json"), "Service Unavailable")):
        with pytest.raises(TrackerError) as exc_info:
            adapter.get_sprint("1")
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == "Request failed with status code 503"
    assert exc_info.value.details == "Service Unavailable"


def test_network_error_has_no_status(adapter: JiraAdapter) -> None:
    """Transport failures raise TrackerError without a status code."""
    with patch.object(adapter._session, "request", side_effect=requests.ConnectionError("refused")):
        with pytest.raises(TrackerError) as exc_info:
            adapter.list_fields()
    assert exc_info.value.status_code is None
    assert "refused" in exc_info.value.message


def test_invalid_json_on_success(adapter: JiraAdapter) -> None:
    """A 200 with an unparsable body carries no upstream status."""
    with patch.object(adapter._session, "request", return_value=_resp(200, ValueError("bad"), "<html>")):
        with pytest.raises(TrackerError) as exc_info:
            adapter.myself()
    assert exc_info.value.status_code is None
    assert exc_info.value.details == "<html>"


def test_list_fields_non_list_is_empty(adapter: JiraAdapter) -> None:
    """list_fields returns [] when Jira does not answer with a list."""
    with patch.object(adapter._session, "request", return_value=_resp(200, {"unexpected": True})):
        assert adapter.list_fields() == []


def test_list_board_sprints_path(adapter: JiraAdapter) -> None:
    """Board sprints use the Agile API with maxResults."""
    with patch.object(adapter._session, "request", return_value=_resp(200, {"values": []})) as req:
        adapter.list_board_sprints("506")
    args, kwargs = req.call_args
    assert args[1] == "https://acme.atlassian.net/rest/agile/1.0/board/506/sprint"
    assert kwargs["params"] == {"maxResults": 1000}


def test_list_boards_params(adapter: JiraAdapter) -> None:
    """Only given board filters are forwarded."""
    with patch.object(adapter._session, "request", return_value=_resp(200, {"values": []})) as req:
        adapter.list_boards()
        assert req.call_args[1]["params"] is None
        adapter.list_boards(board_type="scrum", max_results=50)
        assert req.call_args[1]["params"] == {"type": "scrum", "maxResults": 50}
    assert req.call_args[0][1] == "https://acme.atlassian.net/rest/agile/1.0/board"
