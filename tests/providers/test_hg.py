"""Tests for HgPushLog using pytest-httpx."""

import httpx
import pytest
from pytest_httpx import HTTPXMock

from pushgraph.errors import PushLogError
from pushgraph.models import Push
from pushgraph.providers.hg import HgPushLog

REPO_URL = "https://hg.mozilla.org/try/"

_PUSHES = {
    "lastpushid": 43,
    "pushes": {
        "42": {
            "changesets": [
                {"node": "aaaa1111", "desc": "Bug 1 - first", "author": "Jane"},
                {"node": "bbbb2222", "desc": "Bug 1 - second\ntry: -b do", "author": "Jane"},
            ],
            "date": 1700000000,
            "user": "jane@example.com",
        }
    },
}


class TestGetOne:
    def test_returns_push(self, httpx_mock: HTTPXMock) -> None:
        # No url= — query params are checked on the recorded request instead.
        httpx_mock.add_response(json=_PUSHES)
        push = HgPushLog().get_one(REPO_URL, 42)

        assert isinstance(push, Push)
        assert push.id == 42
        assert push.user == "jane@example.com"
        assert push.date == 1700000000
        assert [c.node for c in push.changesets] == ["aaaa1111", "bbbb2222"]
        assert push.tip.desc == "Bug 1 - second\ntry: -b do"

        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.path == "/try/json-pushes"
        assert request.url.params["version"] == "2"
        assert request.url.params["full"] == "1"
        assert request.url.params["startID"] == "41"
        assert request.url.params["endID"] == "42"

    def test_missing_push(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json={"lastpushid": 10, "pushes": {}})
        with pytest.raises(PushLogError, match="not found"):
            HgPushLog().get_one(REPO_URL, 42)

    def test_push_without_changesets(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(
            json={"pushes": {"42": {"changesets": [], "date": 1, "user": "jane@example.com"}}},
        )
        with pytest.raises(PushLogError, match="no changesets"):
            HgPushLog().get_one(REPO_URL, 42)

    def test_404_raises(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=404)
        with pytest.raises(PushLogError, match="No pushlog"):
            HgPushLog().get_one(REPO_URL, 42)

    def test_string_id(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(json=_PUSHES)
        push = HgPushLog().get_one(REPO_URL, "42")
        assert push.id == 42
        request = httpx_mock.get_request()
        assert request is not None
        assert request.url.params["startID"] == "41"

    def test_non_numeric_id(self) -> None:
        with pytest.raises(PushLogError, match="Invalid push id"):
            HgPushLog().get_one(REPO_URL, "tip")

    def test_server_error_wrapped(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_response(status_code=500)
        with pytest.raises(PushLogError, match="Could not fetch pushlog") as excinfo:
            HgPushLog().get_one(REPO_URL, 42)
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)

    def test_connection_error_wrapped(self, httpx_mock: HTTPXMock) -> None:
        httpx_mock.add_exception(httpx.ConnectError("connection refused"))
        with pytest.raises(PushLogError, match="connection refused"):
            HgPushLog().get_one(REPO_URL, 42)
