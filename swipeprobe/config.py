#!/usr/bin/env python3
"""Config management for swipeprobe — load swipeprobe.yaml and fill in defaults.

Environment variables override the file so CI can point the same config at
whichever simulator it booted:
  SWIPEPROBE_UDID        simulator UDID to drive
  SWIPEPROBE_BUNDLE_ID   bundle identifier of the app under test
  UITEST_TIMEOUT_SCALE   multiplier applied to every adaptive timeout
"""

import copy
import os
from pathlib import Path
from typing import Optional

import yaml

from .launch_config import DEFAULT_SWIPE_SUITE

CONFIG_FILENAME = "swipeprobe.yaml"

DEFAULT_CONFIG = {
    "app": {
        "bundle_id": "us.zig.zpod",
        "app_path": None,
    },
    "device": {
        "name": "iPhone 16",
        "type": "com.apple.CoreSimulator.SimDeviceType.iPhone-16",
        "udid": None,
    },
    "runtime": "com.apple.CoreSimulator.SimRuntime.iOS-26-1",
    "profile": "swipe-configuration",
    "swipe": {
        "defaults_suite": DEFAULT_SWIPE_SUITE,
    },
    "env": {},
    "timeouts": {
        "scale": None,
    },
    "diagnostics": {
        "directory": "./swipeprobe-diagnostics",
    },
    "verbose": False,
}

STARTER_CONFIG = """\
# swipeprobe configuration
app:
  bundle_id: us.zig.zpod
  # app_path: /tmp/zpod-build/Build/Products/Debug-iphonesimulator/zpod.app

device:
  name: iPhone 16
  type: com.apple.CoreSimulator.SimDeviceType.iPhone-16
  # udid: 00000000-0000-0000-0000-000000000000

runtime: com.apple.CoreSimulator.SimRuntime.iOS-26-1

# base | ticker-playback | avplayer-playback | swipe-configuration | batch-operations | debug
profile: swipe-configuration

swipe:
  defaults_suite: us.zig.zpod.swipe-uitests

# Extra launch flags, passed through untouched
env:
  # UITEST_OFFLINE_MODE: "1"

timeouts:
  # scale: 2.0

diagnostics:
  directory: ./swipeprobe-diagnostics
"""


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        elif value is not None:
            merged[key] = value
    return merged


def load_config(path: Optional[str] = None, environ=None) -> dict:
    """Load swipeprobe.yaml (or `path`) merged over the defaults.

    Raises FileNotFoundError when an explicit path does not exist. Without a
    path, a missing swipeprobe.yaml in the working directory just means
    defaults.
    """
    env = os.environ if environ is None else environ

    data = {}
    config_path = Path(path) if path else Path(CONFIG_FILENAME)
    if config_path.exists():
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{config_path}: expected a mapping at the top level")
    elif path:
        raise FileNotFoundError(f"Config not found: {path}. Run 'swipeprobe init' first.")

    config = _merge(DEFAULT_CONFIG, data)

    if env.get("SWIPEPROBE_UDID"):
        config["device"]["udid"] = env["SWIPEPROBE_UDID"]
    if env.get("SWIPEPROBE_BUNDLE_ID"):
        config["app"]["bundle_id"] = env["SWIPEPROBE_BUNDLE_ID"]

    config["env"] = {str(k): str(v) for k, v in (config.get("env") or {}).items()}
    return config


def write_default_config(path: str = CONFIG_FILENAME, force: bool = False) -> Path:
    """Write a starter swipeprobe.yaml; refuses to overwrite unless force."""
    target = Path(path)
    if target.exists() and not force:
        raise FileExistsError(f"{target} already exists (use --force to overwrite)")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(STARTER_CONFIG)
    return target
