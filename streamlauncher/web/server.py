"""HTTP front-end for the kiosk: settings, saved logins and system actions.

Runs a :class:`ThreadingHTTPServer`; each request gets its own thread and
all state access goes through the (locked) :class:`LoginStore`.

API
---
GET  /                          Root page (rendered from static/index.html)
GET  /api/settings              Current settings
POST /api/settings              body: Settings JSON – replaces settings wholesale
GET  /api/login/{platform}      Saved credential (empty object when none)
POST /api/login/{platform}      body: {"username", "password", "remember"}
POST /api/clear-logins          Forget every saved credential
POST /api/system/{action}       restart-app | reboot | poweroff | sway-exit
GET  /api/platforms             Static platform catalog
GET  /api/favorites             Favorite platform names
POST /api/favorites/{platform}  Toggle favorite, returns {"favorite": bool}
GET  /static/{path}             Static files
"""

from __future__ import annotations

import json
import mimetypes
import pathlib
import re
import string
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional
from urllib.parse import unquote

from streamlauncher.constants import APP_NAME, APP_VERSION, DEFAULT_HOST, DEFAULT_PORT
from streamlauncher.errors import (
    ActionFailedError,
    InvalidPayloadError,
    UnknownActionError,
    UnknownPlatformError,
)
from streamlauncher.managers.logger import get_logger
from streamlauncher.managers.state import LoginStore
from streamlauncher.models import CATALOG, Credential, Settings
from streamlauncher.system import ActionRunner, SystemAction

log = get_logger(__name__)

STATIC_DIR = pathlib.Path(__file__).resolve().parent / "static"
MAX_BODY_BYTES = 64 * 1024


def _reject_constant(token: str):
    """NaN and Infinity are not JSON."""
    raise ValueError(f"invalid JSON token {token}")

# (pattern, {verb: handler method name})
_ROUTES: list[tuple[re.Pattern, dict[str, str]]] = [
    (re.compile(r"^/$"),                                  {"GET": "_handle_index"}),
    (re.compile(r"^/api/settings$"),                      {"GET": "_handle_get_settings",
                                                           "POST": "_handle_set_settings"}),
    (re.compile(r"^/api/login/(?P<platform>[^/]+)$"),     {"GET": "_handle_get_login",
                                                           "POST": "_handle_set_login"}),
    (re.compile(r"^/api/clear-logins$"),                  {"POST": "_handle_clear_logins"}),
    (re.compile(r"^/api/system/(?P<action>[^/]+)$"),      {"POST": "_handle_system_action"}),
    (re.compile(r"^/api/platforms$"),                     {"GET": "_handle_platforms"}),
    (re.compile(r"^/api/favorites$"),                     {"GET": "_handle_favorites"}),
    (re.compile(r"^/api/favorites/(?P<platform>[^/]+)$"), {"POST": "_handle_toggle_favorite"}),
    (re.compile(r"^/static/(?P<path>.+)$"),               {"GET": "_handle_static"}),
]


# ---------------------------------------------------------------------------
# Request handler
# ---------------------------------------------------------------------------

class _Handler(BaseHTTPRequestHandler):
    """HTTP request handler for the launcher API."""

    server: "_LauncherHTTPServer"
    server_version = f"{APP_NAME}/{APP_VERSION}"

    # Silence the default per-request log to stderr; we use our own logger.
    def log_message(self, fmt: str, *args) -> None:
        log.debug("http: " + fmt, *args)

    def log_error(self, fmt: str, *args) -> None:
        log.error("http: " + fmt, *args)

    # ------------------------------------------------------------------
    # Verb dispatch
    # ------------------------------------------------------------------

    def do_GET(self) -> None:
        self._dispatch("GET")

    def do_POST(self) -> None:
        self._dispatch("POST")

    def do_PUT(self) -> None:
        self._dispatch("PUT")

    def do_HEAD(self) -> None:
        self._dispatch("HEAD")

    def do_DELETE(self) -> None:
        self._dispatch("DELETE")

    def _dispatch(self, verb: str) -> None:
        path = self.path.split("?", 1)[0]
        for pattern, verbs in _ROUTES:
            match = pattern.match(path)
            if not match:
                continue
            name = verbs.get(verb)
            if name is None:
                self._text("Method not allowed", 405, allow=", ".join(verbs))
                return
            params = {k: unquote(v) for k, v in match.groupdict().items()}
            getattr(self, name)(**params)
            return
        self._text("404 page not found", 404)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _handle_index(self) -> None:
        try:
            template = (self.server.static_dir / "index.html").read_text(encoding="utf-8")
        except OSError as exc:
            log.error("Failed to load index template: %s", exc)
            self._text("Failed to load template", 500)
            return
        page = string.Template(template).safe_substitute(
            app_name=APP_NAME,
            app_version=APP_VERSION,
            platforms=json.dumps([p.to_dict() for p in CATALOG]),
        )
        self._send(page.encode("utf-8"), "text/html; charset=utf-8")

    def _handle_get_settings(self) -> None:
        self._json(self.server.store.get_settings().to_dict())

    def _handle_set_settings(self) -> None:
        try:
            settings = Settings.from_dict(self._read_json())
        except InvalidPayloadError as exc:
            log.info("Rejected settings body: %s", exc)
            self._text("Invalid settings data", 400)
            return
        self.server.store.set_settings(settings)
        self._ok()

    def _handle_get_login(self, platform: str) -> None:
        try:
            cred = self.server.store.get_login(platform)
        except UnknownPlatformError:
            self._text("Unknown platform", 404)
            return
        self._json(cred.to_dict())

    def _handle_set_login(self, platform: str) -> None:
        try:
            cred = Credential.from_dict(self._read_json())
        except InvalidPayloadError as exc:
            log.info("Rejected login body for %s: %s", platform, exc)
            self._text("Invalid login data", 400)
            return
        try:
            self.server.store.set_login(platform, cred)
        except UnknownPlatformError:
            self._text("Unknown platform", 404)
            return
        self._ok()

    def _handle_clear_logins(self) -> None:
        self.server.store.clear_logins()
        self._ok()

    def _handle_system_action(self, action: str) -> None:
        try:
            kind = SystemAction.parse(action)
        except UnknownActionError:
            log.warning("Rejected unknown system action %r from %s", action, self.client_address[0])
            self._text("Invalid action", 400)
            return
        log.warning("System action %s requested by %s", kind.value, self.client_address[0])
        try:
            self.server.actions.perform(kind)
        except ActionFailedError as exc:
            self._text(f"Failed to execute {action}: {exc}", 500)
            return
        self._ok()

    def _handle_platforms(self) -> None:
        self._json([p.to_dict() for p in CATALOG])

    def _handle_favorites(self) -> None:
        self._json(self.server.store.favorites())

    def _handle_toggle_favorite(self, platform: str) -> None:
        try:
            now = self.server.store.toggle_favorite(platform)
        except UnknownPlatformError:
            self._text("Unknown platform", 404)
            return
        self._json({"favorite": now})

    def _handle_static(self, path: str) -> None:
        root = self.server.static_dir.resolve()
        target = (root / path).resolve()
        if root not in target.parents or not target.is_file():
            self._text("404 page not found", 404)
            return
        ctype = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        try:
            data = target.read_bytes()
        except OSError as exc:
            log.error("Could not read static file %s: %s", target, exc)
            self._text("Failed to read file", 500)
            return
        self._send(data, ctype)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read_json(self):
        """Decode the request body; anything unreadable is an InvalidPayloadError."""
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            raise InvalidPayloadError("bad Content-Length") from None
        if length <= 0:
            raise InvalidPayloadError("empty body")
        if length > MAX_BODY_BYTES:
            raise InvalidPayloadError("body too large")
        try:
            return json.loads(self.rfile.read(length), parse_constant=_reject_constant)
        except ValueError as exc:
            raise InvalidPayloadError(str(exc)) from exc

    def _send(self, payload: bytes, ctype: str, status: int = 200, **headers: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type",   ctype)
        self.send_header("Content-Length", str(len(payload)))
        for name, value in headers.items():
            self.send_header(name.capitalize(), value)
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    def _json(self, data, status: int = 200) -> None:
        self._send(json.dumps(data).encode(), "application/json", status)

    def _text(self, message: str, status: int, **headers: str) -> None:
        self._send(f"{message}\n".encode(), "text/plain; charset=utf-8", status, **headers)

    def _ok(self) -> None:
        self._send(b"", "text/plain; charset=utf-8")


class _LauncherHTTPServer(ThreadingHTTPServer):
    daemon_threads = True
    # A second launcher on the same port must fail to bind.
    allow_reuse_port = False

    def __init__(
        self,
        address: tuple[str, int],
        store: LoginStore,
        actions: ActionRunner,
        static_dir: pathlib.Path,
    ) -> None:
        self.store = store
        self.actions = actions
        self.static_dir = static_dir
        super().__init__(address, _Handler)


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------

class WebServer:
    """Manages the lifecycle of the launcher HTTP server.

    :meth:`serve_forever` blocks (CLI use); :meth:`start` runs the server in
    a daemon thread (tests, embedding) until :meth:`stop`.
    """

    def __init__(
        self,
        store: LoginStore,
        actions: ActionRunner,
        static_dir: Optional[pathlib.Path] = None,
    ) -> None:
        self._store = store
        self._actions = actions
        self._static_dir = static_dir or STATIC_DIR
        self._httpd: _LauncherHTTPServer | None = None
        self._thread: threading.Thread | None = None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._httpd is not None

    @property
    def port(self) -> int:
        return self._httpd.server_address[1] if self._httpd else 0

    @property
    def url(self) -> str:
        host = self._httpd.server_address[0] if self._httpd else DEFAULT_HOST
        if host in ("0.0.0.0", ""):
            host = "127.0.0.1"
        return f"http://{host}:{self.port}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def bind(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        """Create the listening socket.  Raises :class:`OSError` if the port is busy."""
        if self._httpd is not None:
            return
        self._httpd = _LauncherHTTPServer(
            (host, port), self._store, self._actions, self._static_dir
        )
        log.info("Launcher server listening on %s:%d", host, self.port)

    def start(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        """Bind and serve in a daemon thread."""
        if self._thread is not None:
            return
        self.bind(host, port)
        self._thread = threading.Thread(
            target=self._httpd.serve_forever,
            name="streamlauncher-http",
            daemon=True,
        )
        self._thread.start()

    def serve_forever(self, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
        """Bind and serve on the calling thread until interrupted."""
        self.bind(host, port)
        try:
            self._httpd.serve_forever()
        finally:
            self._httpd.server_close()
            self._httpd = None

    def stop(self) -> None:
        """Shut down the server gracefully."""
        if self._httpd is None:
            return
        self._httpd.shutdown()
        self._httpd.server_close()
        self._httpd = None
        self._thread = None
        log.info("Launcher server stopped")

