"""Thread-safe application state store with JSON persistence.

One store owns one state aggregate and the JSON file it is persisted to.
Every public method takes the store lock; mutations update memory and
rewrite the whole file before releasing it, so concurrent requests never
observe (or persist) a half-applied change.

Two concrete stores exist:

* :class:`LoginStore`   – served front-end, flat platform → credential map
* :class:`ProfileStore` – desktop front-end, credentials grouped by profile
"""

from __future__ import annotations

import copy
import json
import os
import pathlib
import tempfile
import threading
from typing import Optional

from streamlauncher.constants import CONFIG_ENV_VAR, TABS
from streamlauncher.errors import UnknownProfileError
from streamlauncher.managers.logger import get_logger
from streamlauncher.models import (
    AppState,
    Credential,
    DesktopState,
    Profile,
    catalog_order,
    require_platform,
)
from streamlauncher.security import PasswordHasher

log = get_logger(__name__)


def resolve_config_path(default: pathlib.Path) -> pathlib.Path:
    """Return the config path, honouring the ``STREAMLAUNCHER_CONFIG`` override."""
    override = os.environ.get(CONFIG_ENV_VAR)
    return pathlib.Path(override) if override else default


class StateStore:
    """Base store: lock, load/save, settings, favorites and UI flags."""

    state_cls: type = AppState

    def __init__(
        self,
        path: pathlib.Path | str,
        hasher: Optional[PasswordHasher] = None,
    ) -> None:
        self._path = pathlib.Path(path)
        self._hasher = hasher or PasswordHasher()
        self._lock = threading.RLock()
        self._state = self.state_cls()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def path(self) -> pathlib.Path:
        return self._path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Merge the config file into the defaults.

        A missing or unreadable file leaves the defaults untouched.  A file
        that is not a JSON object is logged and ignored.  Otherwise every
        well-formed field overrides its default and anything malformed is
        logged and skipped.
        """
        try:
            with open(self._path, "r", encoding="utf-8") as fh:
                raw = json.load(fh)
        except FileNotFoundError:
            log.info("No config file at %s, using defaults", self._path)
            return
        except OSError as exc:
            log.warning("Could not read config %s: %s", self._path, exc)
            return
        except ValueError as exc:
            log.warning("Failed to parse config %s: %s", self._path, exc)
            return

        if not isinstance(raw, dict):
            log.warning(
                "Config %s is not a JSON object (%s), using defaults",
                self._path, type(raw).__name__,
            )
            return

        state, problems = self.state_cls.from_dict(raw)
        for problem in problems:
            log.warning("Config %s: %s", self._path, problem)
        with self._lock:
            self._state = state
        log.info("Config loaded from %s", self._path)

    def save(self) -> bool:
        """Write the whole state to disk atomically.

        Errors are logged, never raised; the in-memory state is kept either
        way.  Returns True on success.
        """
        with self._lock:
            payload = json.dumps(self._state.to_dict(), indent=2)
            directory = self._path.parent
            tmp_name = ""
            try:
                directory.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
                )
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self._path)
            except OSError as exc:
                log.error("Failed to save config %s: %s", self._path, exc)
                if tmp_name:
                    try:
                        os.unlink(tmp_name)
                    except OSError:
                        pass
                return False
        log.debug("Config saved to %s", self._path)
        return True

    def snapshot(self):
        """Return a deep copy of the current state."""
        with self._lock:
            return copy.deepcopy(self._state)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def get_settings(self):
        with self._lock:
            return copy.deepcopy(self._state.settings)

    def set_settings(self, settings) -> None:
        """Replace the settings wholesale and persist."""
        with self._lock:
            self._state.settings = copy.deepcopy(settings)
            self.save()
        log.info("Settings updated: %s", settings)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def favorites(self) -> list[str]:
        with self._lock:
            return list(self._state.favorites)

    def is_favorite(self, platform: str) -> bool:
        with self._lock:
            return platform in self._state.favorites

    def toggle_favorite(self, platform: str) -> bool:
        """Flip the favorite flag for *platform*; returns the new value."""
        require_platform(platform)
        with self._lock:
            current = set(self._state.favorites)
            if platform in current:
                current.discard(platform)
                now = False
            else:
                current.add(platform)
                now = True
            self._state.favorites = catalog_order(current)
            self.save()
        log.debug("Favorite %s → %s", platform, now)
        return now

    # ------------------------------------------------------------------
    # Transient UI flags
    # ------------------------------------------------------------------

    def active_tab(self) -> str:
        with self._lock:
            return self._state.active_tab

    def set_active_tab(self, tab: str) -> None:
        if tab not in TABS:
            raise ValueError(f"Unknown tab: {tab!r}")
        with self._lock:
            self._state.active_tab = tab
            self.save()

    def cinema_mode(self) -> bool:
        with self._lock:
            return self._state.cinema_mode

    def set_cinema_mode(self, enabled: bool) -> None:
        with self._lock:
            self._state.cinema_mode = bool(enabled)
            self.save()

    # ------------------------------------------------------------------
    # Credential helpers (subclasses supply the mapping)
    # ------------------------------------------------------------------

    def _logins(self) -> dict[str, Credential]:
        raise NotImplementedError

    def _set_logins(self, logins: dict[str, Credential]) -> None:
        raise NotImplementedError

    def get_login(self, platform: str) -> Credential:
        """Return the stored credential, or an empty one when none is saved."""
        require_platform(platform)
        with self._lock:
            cred = self._logins().get(platform)
            return copy.deepcopy(cred) if cred else Credential()

    def set_login(self, platform: str, credential: Credential) -> None:
        """Store (hashed) when remember is set, otherwise forget; then persist."""
        require_platform(platform)
        with self._lock:
            logins = self._logins()
            if credential.remember:
                logins[platform] = Credential(
                    username=credential.username,
                    password=self._hasher.hash(credential.password),
                    remember=True,
                )
                log.info("Login saved for %s (user=%s)", platform, credential.username)
            else:
                if logins.pop(platform, None) is not None:
                    log.info("Login forgotten for %s", platform)
            self.save()

    def clear_logins(self) -> None:
        with self._lock:
            self._set_logins({})
            self.save()
        log.info("All saved logins cleared")

    def verify_login(self, platform: str, password: str) -> bool:
        """Check *password* against the digest stored for *platform*."""
        cred = self.get_login(platform)
        return bool(cred.password) and self._hasher.verify(cred.password, password)


class LoginStore(StateStore):
    """Served-variant store: one flat platform → credential mapping."""

    state_cls = AppState

    def _logins(self) -> dict[str, Credential]:
        return self._state.saved_logins

    def _set_logins(self, logins: dict[str, Credential]) -> None:
        self._state.saved_logins = logins


class ProfileStore(StateStore):
    """Desktop-variant store: credentials scoped to the active profile."""

    state_cls = DesktopState

    def _active(self) -> Profile:
        # from_dict() and every mutation keep active_profile valid
        return self._state.profiles[self._state.settings.active_profile]

    def _logins(self) -> dict[str, Credential]:
        return self._active().logins

    def _set_logins(self, logins: dict[str, Credential]) -> None:
        self._active().logins = logins

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_settings(self, settings) -> None:
        """Replace settings; a stale active_profile is kept from the old value."""
        with self._lock:
            if settings.active_profile not in self._state.profiles:
                settings = copy.deepcopy(settings)
                settings.active_profile = self._state.settings.active_profile
            super().set_settings(settings)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def profile_names(self) -> list[str]:
        with self._lock:
            return list(self._state.profiles)

    def active_profile(self) -> str:
        with self._lock:
            return self._state.settings.active_profile

    def create_profile(self, name: str) -> bool:
        """Create and activate profile *name*.

        Blank names are ignored.  An existing name is simply activated.
        Returns True only when a new profile was created.
        """
        name = (name or "").strip()
        if not name:
            log.debug("Ignoring blank profile name")
            return False
        with self._lock:
            created = name not in self._state.profiles
            if created:
                self._state.profiles[name] = Profile(name)
            self._state.settings.active_profile = name
            self.save()
        log.info("Profile %s %s", name, "created" if created else "activated")
        return created

    def switch_profile(self, name: str) -> None:
        with self._lock:
            if name not in self._state.profiles:
                raise UnknownProfileError(name)
            self._state.settings.active_profile = name
            self.save()
        log.info("Active profile → %s", name)
