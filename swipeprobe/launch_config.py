#!/usr/bin/env python3
"""Launch environments for the app under test, all in one place.

Every UITEST_* flag the suites pass at launch is defined here instead of being
scattered across individual tests. Profiles build on each other:

    BASE -> TICKER_PLAYBACK -> swipe_configuration(...)
         -> AVPLAYER_PLAYBACK

Usage:
    env = swipe_configuration(suite="us.zig.zpod.swipe-uitests", reset=True)
    env = custom({"UITEST_OFFLINE_MODE": "1"}, base=TICKER_PLAYBACK)
"""

from typing import Optional

from .seeding import SEED_ENV_VAR

DEFAULT_SWIPE_SUITE = "us.zig.zpod.swipe-uitests"

# No background downloads, no animations, readable slider values
BASE = {
    "UITEST_DISABLE_DOWNLOAD_COORDINATOR": "1",
    "UITEST_DISABLE_ANIMATIONS": "1",
    "UITEST_SLIDER_OPACITY": "0.1",
}

# Timer-driven playback: deterministic, no audio
TICKER_PLAYBACK = {**BASE, "UITEST_DISABLE_AUDIO_ENGINE": "1"}

# Real AVPlayer streaming, for audio session tests
AVPLAYER_PLAYBACK = {**BASE, "UITEST_DISABLE_AUDIO_ENGINE": "0"}


def custom(overrides: dict, base: Optional[dict] = None) -> dict:
    """Merge overrides over base (BASE by default); overrides win."""
    env = dict(BASE if base is None else base)
    env.update({k: str(v) for k, v in overrides.items()})
    return env


def swipe_configuration(
    suite: str = DEFAULT_SWIPE_SUITE,
    reset: bool = False,
    seeded_configuration: Optional[str] = None,
) -> dict:
    """Environment for swipe configuration tests.

    Turns on the debug state summary, isolates UserDefaults in `suite`, stubs the
    playlist sheet and pre-materializes lazy sections so rows can be found
    without scrolling. `seeded_configuration` is a base64 payload from
    seeding.encode_seed().
    """
    env = dict(TICKER_PLAYBACK)
    env["UITEST_SWIPE_DEBUG"] = "1"
    env["UITEST_USER_DEFAULTS_SUITE"] = suite
    env["UITEST_STUB_PLAYLIST_SHEET"] = "1"
    env["UITEST_AUTO_SCROLL_PRESETS"] = "1"
    env["UITEST_SWIPE_PRELOAD_SECTIONS"] = "1"
    env["UITEST_RESET_SWIPE_SETTINGS"] = "1" if reset else "0"
    if seeded_configuration:
        env[SEED_ENV_VAR] = seeded_configuration
    return env


def batch_operations(force_overlay: bool = False) -> dict:
    env = dict(TICKER_PLAYBACK)
    if force_overlay:
        env["UITEST_FORCE_BATCH_OVERLAY"] = "1"
    return env


def debug() -> dict:
    """BASE with 3x timeouts, for chasing flaky tests locally."""
    return custom({"UITEST_TIMEOUT_SCALE": "3.0"})


PROFILES = {
    "base": lambda: dict(BASE),
    "ticker-playback": lambda: dict(TICKER_PLAYBACK),
    "avplayer-playback": lambda: dict(AVPLAYER_PLAYBACK),
    "swipe-configuration": swipe_configuration,
    "batch-operations": batch_operations,
    "debug": debug,
}


def profile_environment(name: str) -> dict:
    try:
        builder = PROFILES[name]
    except KeyError:
        raise ValueError(
            f"Unknown launch profile '{name}'. Choose from: {', '.join(sorted(PROFILES))}"
        ) from None
    return builder()
