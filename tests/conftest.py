"""Shared fixtures: throwaway data dir, cheap bcrypt, fake system actions, live HTTP server."""

import json
import os
import tempfile
import urllib.error
import urllib.request

# Keep logs and default config paths out of the real home directory.
os.environ.setdefault("STREAMLAUNCHER_HOME", tempfile.mkdtemp(prefix="streamlauncher-test-"))
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from streamlauncher.errors import ActionFailedError
from streamlauncher.managers.state import LoginStore, ProfileStore
from streamlauncher.security import PasswordHasher
from streamlauncher.web.server import WebServer


class FakeRunner:
    """Records requested system actions instead of running commands."""

    def __init__(self, fail_with=None):
        self.performed = []
        self.fail_with = fail_with

    def perform(self, action):
        self.performed.append(action)
        if self.fail_with:
            raise ActionFailedError(self.fail_with)


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


@pytest.fixture
def config_path(tmp_path):
    return tmp_path / "config.json"


@pytest.fixture
def login_store(config_path, hasher):
    store = LoginStore(config_path, hasher=hasher)
    store.load()
    return store


@pytest.fixture
def profile_store(config_path, hasher):
    store = ProfileStore(config_path, hasher=hasher)
    store.load()
    return store


@pytest.fixture
def runner():
    return FakeRunner()


class Client:
    """Minimal JSON client around urllib for the live test server."""

    def __init__(self, base_url):
        self.base_url = base_url

    def request(self, method, path, body=None, raw=None):
        data = raw if raw is not None else (json.dumps(body).encode() if body is not None else None)
        req = urllib.request.Request(self.base_url + path, data=data, method=method)
        if data is not None:
            req.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=10) as resp:
                return resp.status, resp.read(), dict(resp.headers)
        except urllib.error.HTTPError as exc:
            return exc.code, exc.read(), dict(exc.headers)

    def get_json(self, path):
        status, payload, _ = self.request("GET", path)
        assert status == 200, payload
        return json.loads(payload)

    def post(self, path, body=None, raw=None):
        return self.request("POST", path, body=body, raw=raw)


@pytest.fixture
def server(login_store, runner):
    srv = WebServer(login_store, runner)
    srv.start("127.0.0.1", 0)
    yield srv
    srv.stop()


@pytest.fixture
def client(server):
    return Client(server.url)
