"""Shared pytest fixtures for the test suite.

The dashboard never talks to a real backend in tests: every component reaches
the REST API through ``app.extensions['backend_session']``, which the ``app``
fixture replaces with a ``FakeSession`` that serves canned responses and
records each call.

Fixture overview
----------------
backend     - the FakeSession; register responses with ``backend.add(...)``
app         - dashboard app with rate limiting off and the fake backend wired in
client      - Flask test client for ``app``
login_as    - store a user and token in the client session
admin_user  - user holding ``admin:manage``
"""

from __future__ import annotations

import json

import pytest
import requests

from station_admin.core import monitoring
from station_admin.dashboard_app import create_app

API = "http://backend.test/api"
LOCATION_API = "http://backend.test/location"


class FakeResponse:
    def __init__(self, status_code=200, payload=None, content=None, headers=None):
        self.status_code = status_code
        self.ok = status_code < 400
        self._payload = payload
        if content is None:
            content = json.dumps(payload).encode() if payload is not None else b""
        self.content = content
        self.headers = headers or {"Content-Type": "application/json"}

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeSession:
    """Stands in for ``requests.Session``; unknown URLs answer 404"""

    def __init__(self):
        self.responses = {}
        self.calls = []

    def add(self, method, url, payload=None, status=200, content=None, headers=None, error=None):
        self.responses[(method, url)] = error or FakeResponse(status, payload, content, headers)

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        response = self.responses.get((method, url))
        if response is None:
            return FakeResponse(404, {"message": "Not found"})
        if isinstance(response, Exception):
            raise response
        return response

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def calls_to(self, method, url):
        return [call for call in self.calls if call["method"] == method and call["url"] == url]


@pytest.fixture(autouse=True)
def clear_activity_log():
    monitoring.system_logs.clear()
    yield
    monitoring.system_logs.clear()


@pytest.fixture
def backend() -> FakeSession:
    return FakeSession()


@pytest.fixture
def app(backend):
    app = create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "RATELIMIT_ENABLED": False,
        "API_BASE_URL": API,
        "LOCATION_API_URL": LOCATION_API,
    })
    app.extensions["backend_session"] = backend
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login_as(client):
    def _login(user, token="test-token"):
        with client.session_transaction() as sess:
            sess["token"] = token
            sess["user"] = user
        return user
    return _login


def make_user(user_id=1, username="alice", role="admin", permissions=()):
    return {
        "id": user_id,
        "username": username,
        "email": f"{username}@example.com",
        "role": role,
        "permissions": [
            {"resource": p.partition(":")[0], "action": p.partition(":")[2]} for p in permissions
        ],
    }


@pytest.fixture
def admin_user():
    return make_user(permissions=["admin:manage"])


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("connection refused")
