import pytest

from streamlauncher.constants import DEFAULT_PROFILE
from streamlauncher.errors import InvalidPayloadError, UnknownPlatformError
from streamlauncher.models import (
    CATALOG,
    AppState,
    Credential,
    DesktopState,
    Profile,
    Settings,
    catalog_order,
    find_platform,
    platform_names,
    require_platform,
)


def test_settings_defaults():
    s = Settings()
    assert s.to_dict() == {
        "interface_scale": 1.0,
        "brightness": 50,
        "gpu_acceleration": True,
        "language": "en_US",
    }


def test_from_dict_missing_fields_take_zero_values():
    s = Settings.from_dict({"language": "pl_PL"})
    assert s == Settings(interface_scale=0.0, brightness=0, gpu_acceleration=False, language="pl_PL")


def test_from_dict_with_base_merges():
    s = Settings.from_dict({"brightness": 10}, base=Settings())
    assert s == Settings(brightness=10)


def test_from_dict_accepts_int_for_float_and_ignores_unknown_keys():
    s = Settings.from_dict({"interface_scale": 2, "brightness": 1, "extra": "x"})
    assert s.interface_scale == 2.0
    assert isinstance(s.interface_scale, float)


@pytest.mark.parametrize(
    "payload",
    [
        {"brightness": "80"},
        {"brightness": True},
        {"brightness": 80.5},
        {"gpu_acceleration": 1},
        {"language": 5},
        {"interface_scale": float("nan")},
        {"interface_scale": float("inf")},
        {"interface_scale": 10 ** 400},
        ["not", "an", "object"],
    ],
)
def test_from_dict_rejects_wrong_types(payload):
    with pytest.raises(InvalidPayloadError):
        Settings.from_dict(payload)


def test_merge_skips_bad_fields_and_reports_them():
    s, problems = Settings.merge({"brightness": "high", "language": "de_DE"}, Settings())
    assert s.brightness == 50
    assert s.language == "de_DE"
    assert len(problems) == 1 and "brightness" in problems[0]


def test_credential_is_empty():
    assert Credential().is_empty()
    assert not Credential(username="a").is_empty()
    assert Credential.from_dict({"remember": False}).is_empty()


def test_catalog_lookup():
    assert platform_names()[0] == CATALOG[0].name
    assert find_platform("Netflix").url.startswith("https://")
    assert find_platform("Betamax") is None
    with pytest.raises(UnknownPlatformError):
        require_platform("Betamax")


def test_catalog_order_dedupes_and_drops_unknown():
    assert catalog_order(["Spotify", "Netflix", "Nope", "Netflix"]) == ["Netflix", "Spotify"]


def test_app_state_from_dict_drops_invalid_logins():
    data = {
        "saved_logins": {
            "Netflix": {"username": "a", "password": "x", "remember": True},
            "Betamax": {"username": "b", "password": "y", "remember": True},
            "Twitch": {"username": "c", "password": "z", "remember": False},
            "YouTube": {"username": 7},
        },
        "favorites": ["Twitch", "Netflix"],
        "cinema_mode": True,
    }
    state, problems = AppState.from_dict(data)
    assert list(state.saved_logins) == ["Netflix"]
    assert state.favorites == ["Netflix", "Twitch"]
    assert state.cinema_mode is True
    assert len(problems) == 3


def test_desktop_state_repairs_dangling_active_profile():
    data = {
        "settings": {"active_profile": "ghost"},
        "profiles": {"kids": {"name": "kids", "logins": {}}},
    }
    state, problems = DesktopState.from_dict(data)
    assert state.settings.active_profile == DEFAULT_PROFILE
    assert set(state.profiles) == {"kids", DEFAULT_PROFILE}
    assert any("ghost" in p for p in problems)


def test_desktop_state_to_dict_round_trip():
    state = DesktopState()
    state.profiles["kids"] = Profile("kids")
    state.profiles["kids"].logins["Netflix"] = Credential("k", "digest", True)
    state.settings.active_profile = "kids"
    again, problems = DesktopState.from_dict(state.to_dict())
    assert problems == []
    assert again == state
