"""Data models for StreamLauncher."""

from __future__ import annotations

import dataclasses
import math
from typing import Any, Optional

from streamlauncher.constants import DEFAULT_PROFILE, PLATFORMS, TABS
from streamlauncher.errors import InvalidPayloadError, UnknownPlatformError

# Zero values keyed by the (string) annotation of a scalar field.
_ZERO: dict[str, Any] = {"float": 0.0, "int": 0, "bool": False, "str": ""}


def _coerce(name: str, type_name: str, value: Any) -> Any:
    """Check *value* against a scalar annotation, the way a strict JSON decoder would."""
    if type_name == "bool":
        ok = isinstance(value, bool)
    elif type_name == "int":
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif type_name == "float":
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok:
            try:
                value = float(value)
            except OverflowError:
                value = math.inf
            if not math.isfinite(value):
                raise InvalidPayloadError(f"{name}: expected a finite number, got {value}")
    else:
        ok = isinstance(value, str)
    if not ok:
        raise InvalidPayloadError(
            f"{name}: expected {type_name}, got {type(value).__name__}"
        )
    return value


class _ScalarRecord:
    """Mixin for flat dataclasses whose fields are JSON scalars."""

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Any, base: Optional["_ScalarRecord"] = None):
        """Decode *data* strictly.

        Missing (or null) fields take their value from *base* when given,
        otherwise the zero value of their type.  Unknown keys are ignored;
        a present field of the wrong type raises :class:`InvalidPayloadError`.
        """
        if not isinstance(data, dict):
            raise InvalidPayloadError(
                f"expected a JSON object, got {type(data).__name__}"
            )
        values: dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            raw = data.get(f.name)
            if raw is not None:
                values[f.name] = _coerce(f.name, f.type, raw)
            elif base is not None:
                values[f.name] = getattr(base, f.name)
            else:
                values[f.name] = _ZERO[f.type]
        return cls(**values)

    @classmethod
    def merge(cls, data: Any, base: "_ScalarRecord") -> tuple[Any, list[str]]:
        """Lenient decode used when loading from disk.

        Every well-typed field in *data* overrides *base*; badly typed fields
        are skipped and reported in the returned problem list.
        """
        if not isinstance(data, dict):
            return dataclasses.replace(base), [
                f"{cls.__name__}: expected an object, got {type(data).__name__}"
            ]
        values = base.to_dict()
        problems: list[str] = []
        for f in dataclasses.fields(cls):
            raw = data.get(f.name)
            if raw is None:
                continue
            try:
                values[f.name] = _coerce(f.name, f.type, raw)
            except InvalidPayloadError as exc:
                problems.append(f"{cls.__name__}.{exc}")
        return cls(**values), problems


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class Settings(_ScalarRecord):
    """Scalar configuration shared by both front-ends."""

    interface_scale: float = 1.0
    brightness: int = 50
    gpu_acceleration: bool = True
    language: str = "en_US"


@dataclasses.dataclass
class DesktopSettings(Settings):
    """Desktop settings: adds the UI theme and the active profile name."""

    theme: str = "dark"
    active_profile: str = DEFAULT_PROFILE


# ---------------------------------------------------------------------------
# Credentials and profiles
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class Credential(_ScalarRecord):
    """A platform-scoped username / password / remember triple."""

    username: str = ""
    password: str = ""
    remember: bool = False

    def is_empty(self) -> bool:
        return self == Credential()


@dataclasses.dataclass
class Profile:
    """A named bundle of per-platform credentials."""

    name: str
    logins: dict[str, Credential] = dataclasses.field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "logins": {p: c.to_dict() for p, c in self.logins.items()},
        }


# ---------------------------------------------------------------------------
# Platform catalog
# ---------------------------------------------------------------------------

@dataclasses.dataclass(frozen=True)
class Platform:
    name: str
    url: str
    icon: str

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


CATALOG: tuple[Platform, ...] = tuple(Platform(*row) for row in PLATFORMS)


def platform_names() -> list[str]:
    return [p.name for p in CATALOG]


def find_platform(name: str) -> Optional[Platform]:
    return next((p for p in CATALOG if p.name == name), None)


def require_platform(name: str) -> Platform:
    """Return the catalog entry for *name* or raise :class:`UnknownPlatformError`."""
    platform = find_platform(name)
    if platform is None:
        raise UnknownPlatformError(name)
    return platform


def catalog_order(names) -> list[str]:
    """Return the known names among *names*, deduplicated, in catalog order."""
    wanted = set(names)
    return [p.name for p in CATALOG if p.name in wanted]


# ---------------------------------------------------------------------------
# Root aggregates
# ---------------------------------------------------------------------------

def _decode_logins(raw: Any, where: str, problems: list[str]) -> dict[str, Credential]:
    """Decode a {platform: credential} mapping, dropping anything invalid."""
    if not isinstance(raw, dict):
        problems.append(f"{where}: expected an object, got {type(raw).__name__}")
        return {}
    logins: dict[str, Credential] = {}
    for platform, entry in raw.items():
        if find_platform(platform) is None:
            problems.append(f"{where}[{platform!r}]: unknown platform")
            continue
        try:
            cred = Credential.from_dict(entry)
        except InvalidPayloadError as exc:
            problems.append(f"{where}[{platform!r}]: {exc}")
            continue
        if not cred.remember:
            problems.append(f"{where}[{platform!r}]: not marked remember, dropped")
            continue
        logins[platform] = cred
    return logins


def _decode_ui(state: Any, data: dict, problems: list[str]) -> None:
    """Merge favorites / active_tab / cinema_mode from *data* into *state*."""
    favorites = data.get("favorites")
    if favorites is not None:
        if isinstance(favorites, list) and all(isinstance(f, str) for f in favorites):
            state.favorites = catalog_order(favorites)
        else:
            problems.append("favorites: expected a list of strings")
    tab = data.get("active_tab")
    if tab is not None:
        if tab in TABS:
            state.active_tab = tab
        else:
            problems.append(f"active_tab: unknown tab {tab!r}")
    cinema = data.get("cinema_mode")
    if cinema is not None:
        if isinstance(cinema, bool):
            state.cinema_mode = cinema
        else:
            problems.append("cinema_mode: expected bool")


@dataclasses.dataclass
class AppState:
    """Served-variant root aggregate: flat platform → credential mapping."""

    settings: Settings = dataclasses.field(default_factory=Settings)
    saved_logins: dict[str, Credential] = dataclasses.field(default_factory=dict)
    favorites: list[str] = dataclasses.field(default_factory=list)
    active_tab: str = "all"
    cinema_mode: bool = False

    def to_dict(self) -> dict:
        return {
            "settings":     self.settings.to_dict(),
            "saved_logins": {p: c.to_dict() for p, c in self.saved_logins.items()},
            "favorites":    list(self.favorites),
            "active_tab":   self.active_tab,
            "cinema_mode":  self.cinema_mode,
        }

    @classmethod
    def from_dict(cls, data: dict) -> tuple["AppState", list[str]]:
        """Merge *data* into a default state; returns (state, problems)."""
        state = cls()
        problems: list[str] = []
        if "settings" in data:
            state.settings, bad = Settings.merge(data["settings"], state.settings)
            problems.extend(bad)
        if "saved_logins" in data and data["saved_logins"] is not None:
            state.saved_logins = _decode_logins(data["saved_logins"], "saved_logins", problems)
        _decode_ui(state, data, problems)
        return state, problems


@dataclasses.dataclass
class DesktopState:
    """Desktop-variant root aggregate: credentials grouped by profile."""

    settings: DesktopSettings = dataclasses.field(default_factory=DesktopSettings)
    profiles: dict[str, Profile] = dataclasses.field(
        default_factory=lambda: {DEFAULT_PROFILE: Profile(DEFAULT_PROFILE)}
    )
    favorites: list[str] = dataclasses.field(default_factory=list)
    active_tab: str = "all"
    cinema_mode: bool = False

    def to_dict(self) -> dict:
        return {
            "settings":    self.settings.to_dict(),
            "profiles":    {n: p.to_dict() for n, p in self.profiles.items()},
            "favorites":   list(self.favorites),
            "active_tab":  self.active_tab,
            "cinema_mode": self.cinema_mode,
        }

    @classmethod
    def from_dict(cls, data: dict) -> tuple["DesktopState", list[str]]:
        """Merge *data* into a default state; returns (state, problems).

        The active-profile reference is repaired here: when it does not name
        a loaded profile, it falls back to ``"default"`` (created if needed).
        """
        state = cls()
        problems: list[str] = []
        if "settings" in data:
            state.settings, bad = DesktopSettings.merge(data["settings"], state.settings)
            problems.extend(bad)

        raw_profiles = data.get("profiles")
        if raw_profiles is not None:
            if isinstance(raw_profiles, dict):
                profiles: dict[str, Profile] = {}
                for name, entry in raw_profiles.items():
                    if not name.strip() or not isinstance(entry, dict):
                        problems.append(f"profiles[{name!r}]: invalid entry")
                        continue
                    logins = _decode_logins(
                        entry.get("logins", {}), f"profiles[{name!r}].logins", problems
                    )
                    profiles[name] = Profile(name, logins)
                state.profiles = profiles
            else:
                problems.append("profiles: expected an object")

        if state.settings.active_profile not in state.profiles:
            problems.append(
                f"active_profile {state.settings.active_profile!r} does not exist,"
                f" falling back to {DEFAULT_PROFILE!r}"
            )
            state.profiles.setdefault(DEFAULT_PROFILE, Profile(DEFAULT_PROFILE))
            state.settings.active_profile = DEFAULT_PROFILE

        _decode_ui(state, data, problems)
        return state, problems
