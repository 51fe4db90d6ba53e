"""Application-wide constants: paths, platform catalog, and colour palettes."""

from __future__ import annotations

import os
import pathlib

APP_NAME = "StreamLauncher"
APP_VERSION = "1.0.0"
DATA_DIR = pathlib.Path(
    os.environ.get("STREAMLAUNCHER_HOME", pathlib.Path.home() / ".streamlauncher")
)
WEB_CONFIG_FILE = DATA_DIR / "web_config.json"
DESKTOP_CONFIG_FILE = DATA_DIR / "desktop_config.json"

# Overrides both config files when set (one kiosk, one front-end).
CONFIG_ENV_VAR = "STREAMLAUNCHER_CONFIG"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
ACTION_TIMEOUT_S = 30.0

DEFAULT_PROFILE = "default"

# ---------------------------------------------------------------------------
# Platform catalog  (name, url, icon) – ordered, not user-editable
# ---------------------------------------------------------------------------
PLATFORMS: list[tuple[str, str, str]] = [
    ("Netflix",     "https://www.netflix.com",        "netflix.svg"),
    ("YouTube",     "https://www.youtube.com/tv",     "youtube.svg"),
    ("Disney+",     "https://www.disneyplus.com",     "disneyplus.svg"),
    ("Prime Video", "https://www.primevideo.com",     "primevideo.svg"),
    ("Max",         "https://play.max.com",           "max.svg"),
    ("Apple TV+",   "https://tv.apple.com",           "appletv.svg"),
    ("Twitch",      "https://www.twitch.tv",          "twitch.svg"),
    ("Spotify",     "https://open.spotify.com",       "spotify.svg"),
]

TABS = ("all", "favorites")

# ---------------------------------------------------------------------------
# Themes  (Catppuccin Mocha for "dark", Catppuccin Latte for "light")
# ---------------------------------------------------------------------------
THEMES: dict[str, dict[str, str]] = {
    "dark": {
        "base":      "#1e1e2e",
        "mantle":    "#181825",
        "crust":     "#11111b",
        "surface0":  "#313244",
        "surface1":  "#45475a",
        "surface2":  "#585b70",
        "overlay0":  "#6c7086",
        "overlay1":  "#7f849c",
        "subtext0":  "#a6adc8",
        "text":      "#cdd6f4",
        "lavender":  "#b4befe",
        "blue":      "#89b4fa",
        "green":     "#a6e3a1",
        "yellow":    "#f9e2af",
        "peach":     "#fab387",
        "red":       "#f38ba8",
        "mauve":     "#cba6f7",
    },
    "light": {
        "base":      "#eff1f5",
        "mantle":    "#e6e9ef",
        "crust":     "#dce0e8",
        "surface0":  "#ccd0da",
        "surface1":  "#bcc0cc",
        "surface2":  "#acb0be",
        "overlay0":  "#9ca0b0",
        "overlay1":  "#8c8fa1",
        "subtext0":  "#6c6f85",
        "text":      "#4c4f69",
        "lavender":  "#7287fd",
        "blue":      "#1e66f5",
        "green":     "#40a02b",
        "yellow":    "#df8e1d",
        "peach":     "#fe640b",
        "red":       "#d20f39",
        "mauve":     "#8839ef",
    },
}

# Active palette; theme.apply_theme() swaps its contents in place.
C: dict[str, str] = dict(THEMES["dark"])
