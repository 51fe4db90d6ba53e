import json

import pytest

from streamlauncher.constants import PLATFORMS
from streamlauncher.managers.state import LoginStore
from streamlauncher.security import verify_password
from streamlauncher.system import SystemAction
from streamlauncher.web import __main__ as web_main
from streamlauncher.web.server import WebServer

from conftest import Client, FakeRunner


# ---------------------------------------------------------------------------
# Root page and static files
# ---------------------------------------------------------------------------

def test_index_is_rendered(client):
    status, payload, headers = client.request("GET", "/")
    assert status == 200
    assert headers["Content-Type"].startswith("text/html")
    page = payload.decode("utf-8")
    assert "$app_name" not in page
    assert "StreamLauncher" in page


def test_static_file_served(client):
    status, payload, headers = client.request("GET", "/static/style.css")
    assert status == 200
    assert headers["Content-Type"].startswith("text/css")
    assert payload


@pytest.mark.parametrize("path", ["/static/missing.js", "/static/%2e%2e/server.py"])
def test_static_missing_or_outside_root(client, path):
    status, _, _ = client.request("GET", path)
    assert status == 404


def test_unknown_path_is_404(client):
    status, payload, _ = client.request("GET", "/api/nope")
    assert status == 404
    assert b"404 page not found" in payload


def test_wrong_verb_is_405_with_allow(client):
    status, _, headers = client.request("GET", "/api/clear-logins")
    assert status == 405
    assert headers["Allow"] == "POST"


def test_head_is_405_with_allow(client):
    status, payload, headers = client.request("HEAD", "/api/settings")
    assert status == 405
    assert headers["Allow"] == "GET, POST"
    assert payload == b""


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

SCENARIO = {
    "interface_scale": 1.5,
    "brightness": 80,
    "gpu_acceleration": False,
    "language": "pl_PL",
}


def test_default_settings(client):
    assert client.get_json("/api/settings") == {
        "interface_scale": 1.0,
        "brightness": 50,
        "gpu_acceleration": True,
        "language": "en_US",
    }


def test_settings_survive_restart(client, server, config_path, hasher):
    status, _, _ = client.post("/api/settings", SCENARIO)
    assert status == 200
    assert client.get_json("/api/settings") == SCENARIO

    server.stop()
    store = LoginStore(config_path, hasher=hasher)
    store.load()
    again = WebServer(store, FakeRunner())
    again.start("127.0.0.1", 0)
    try:
        assert Client(again.url).get_json("/api/settings") == SCENARIO
    finally:
        again.stop()


def test_omitted_settings_fields_reset_to_zero(client):
    client.post("/api/settings", {"language": "de_DE"})
    assert client.get_json("/api/settings") == {
        "interface_scale": 0.0,
        "brightness": 0,
        "gpu_acceleration": False,
        "language": "de_DE",
    }


@pytest.mark.parametrize(
    "raw",
    [
        b"{not json",
        b"[1, 2]",
        json.dumps({"brightness": "80"}).encode(),
        b"",
        b'{"interface_scale": NaN, "brightness": 1, "gpu_acceleration": true, "language": "x"}',
        b'{"interface_scale": Infinity, "brightness": 1}',
        b'{"interface_scale": -Infinity}',
    ],
)
def test_invalid_settings_body(client, raw):
    status, payload, _ = client.post("/api/settings", raw=raw)
    assert status == 400
    assert payload.strip() == b"Invalid settings data"
    assert client.get_json("/api/settings")["brightness"] == 50


# ---------------------------------------------------------------------------
# Logins
# ---------------------------------------------------------------------------

def test_login_scenario(client):
    status, _, _ = client.post(
        "/api/login/Netflix",
        {"username": "alice", "password": "secret", "remember": True},
    )
    assert status == 200

    cred = client.get_json("/api/login/Netflix")
    assert cred["username"] == "alice"
    assert cred["remember"] is True
    assert cred["password"] != "secret"
    assert verify_password(cred["password"], "secret")

    client.post("/api/login/Netflix", {"remember": False})
    assert client.get_json("/api/login/Netflix") == {
        "username": "",
        "password": "",
        "remember": False,
    }


def test_login_platform_name_is_url_decoded(client):
    client.post("/api/login/Prime%20Video", {"username": "p", "password": "v", "remember": True})
    assert client.get_json("/api/login/Prime%20Video")["username"] == "p"
    client.post("/api/login/Disney+", {"username": "d", "password": "v", "remember": True})
    assert client.get_json("/api/login/Disney+")["username"] == "d"


def test_unknown_platform_is_404(client):
    status, payload, _ = client.request("GET", "/api/login/Betamax")
    assert status == 404
    assert payload.strip() == b"Unknown platform"
    status, _, _ = client.post("/api/login/Betamax", {"username": "x", "remember": True})
    assert status == 404


def test_invalid_login_body(client):
    status, payload, _ = client.post("/api/login/Netflix", raw=b"nope")
    assert status == 400
    assert payload.strip() == b"Invalid login data"


def test_clear_logins(client):
    for name in ("Netflix", "Twitch"):
        client.post(f"/api/login/{name}", {"username": "u", "password": "p", "remember": True})
    status, _, _ = client.post("/api/clear-logins")
    assert status == 200
    assert client.get_json("/api/login/Netflix")["username"] == ""
    assert client.get_json("/api/login/Twitch")["username"] == ""


# ---------------------------------------------------------------------------
# Catalog and favorites
# ---------------------------------------------------------------------------

def test_platform_catalog(client):
    catalog = client.get_json("/api/platforms")
    assert [p["name"] for p in catalog] == [name for name, _, _ in PLATFORMS]
    assert set(catalog[0]) == {"name", "url", "icon"}


def test_toggle_favorite(client):
    assert client.get_json("/api/favorites") == []
    status, payload, _ = client.post("/api/favorites/Spotify")
    assert status == 200
    assert json.loads(payload) == {"favorite": True}
    assert client.get_json("/api/favorites") == ["Spotify"]
    _, payload, _ = client.post("/api/favorites/Spotify")
    assert json.loads(payload) == {"favorite": False}
    status, _, _ = client.post("/api/favorites/Betamax")
    assert status == 404


# ---------------------------------------------------------------------------
# System actions
# ---------------------------------------------------------------------------

def test_system_action_runs(client, runner):
    status, _, _ = client.post("/api/system/reboot")
    assert status == 200
    assert runner.performed == [SystemAction.REBOOT]


def test_unknown_system_action(client, runner, login_store):
    before = login_store.snapshot()
    status, payload, _ = client.post("/api/system/bogus-action")
    assert status == 400
    assert payload.strip() == b"Invalid action"
    assert runner.performed == []
    assert login_store.snapshot() == before


def test_system_action_failure(login_store):
    srv = WebServer(login_store, FakeRunner(fail_with="exit status 1"))
    srv.start("127.0.0.1", 0)
    try:
        status, payload, _ = Client(srv.url).post("/api/system/poweroff")
    finally:
        srv.stop()
    assert status == 500
    assert payload.strip() == b"Failed to execute poweroff: exit status 1"


# ---------------------------------------------------------------------------
# Lifecycle and CLI
# ---------------------------------------------------------------------------

def test_server_lifecycle(login_store, runner):
    srv = WebServer(login_store, runner)
    assert not srv.running
    assert srv.port == 0
    srv.start("127.0.0.1", 0)
    assert srv.running
    assert srv.port > 0
    srv.stop()
    assert not srv.running


def test_cli_exits_nonzero_when_port_busy(server, tmp_path):
    code = web_main.main([
        "--host", "127.0.0.1",
        "--port", str(server.port),
        "--config", str(tmp_path / "cli.json"),
    ])
    assert code == 1


def test_cli_parser_defaults(tmp_path):
    args = web_main.build_parser().parse_args(["--port", "9000", "--action-timeout", "5"])
    assert args.port == 9000
    assert args.action_timeout == 5.0
