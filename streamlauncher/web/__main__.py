"""Command-line entry point for the served front-end.

    python -m streamlauncher.web --port 8080
"""

from __future__ import annotations

import argparse
import pathlib
import sys

from streamlauncher.constants import (
    ACTION_TIMEOUT_S,
    APP_NAME,
    APP_VERSION,
    DEFAULT_HOST,
    DEFAULT_PORT,
    WEB_CONFIG_FILE,
)
from streamlauncher.managers.logger import get_logger
from streamlauncher.managers.state import LoginStore, resolve_config_path
from streamlauncher.system import CommandRunner
from streamlauncher.web.server import STATIC_DIR, WebServer

log = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streamlauncher-web",
        description=f"{APP_NAME} served UI",
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="bind address (default: %(default)s)")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="listen port (default: %(default)s)")
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        default=resolve_config_path(WEB_CONFIG_FILE),
        help="JSON state file (default: %(default)s)",
    )
    parser.add_argument(
        "--static-dir",
        type=pathlib.Path,
        default=STATIC_DIR,
        help="directory holding index.html and static assets",
    )
    parser.add_argument(
        "--action-timeout",
        type=float,
        default=ACTION_TIMEOUT_S,
        help="seconds before a system command is abandoned (default: %(default)s)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    store = LoginStore(args.config)
    store.load()

    server = WebServer(store, CommandRunner(timeout=args.action_timeout), args.static_dir)
    log.info("%s %s starting on %s:%d", APP_NAME, APP_VERSION, args.host, args.port)
    try:
        server.serve_forever(args.host, args.port)
    except OSError as exc:
        log.critical("Server failed: %s", exc)
        return 1
    except KeyboardInterrupt:
        log.info("%s shutting down", APP_NAME)
    return 0


if __name__ == "__main__":
    sys.exit(main())
