#!/usr/bin/env python3
"""Seeded swipe configurations — build the launch-time payload the app reads.

The app looks for UITEST_SEEDED_SWIPE_CONFIGURATION_B64 at launch, base64-decodes
it, parses the JSON and installs it as the initial swipe configuration:

    {"swipeActions": {"leadingActions": [...], "trailingActions": [...],
                      "allowFullSwipeLeading": bool, "allowFullSwipeTrailing": bool,
                      "hapticFeedbackEnabled": bool},
     "hapticStyle": "medium"}

List order is on-screen order, so it is preserved exactly.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field, replace

from .errors import SeedPayloadError

SEED_ENV_VAR = "UITEST_SEEDED_SWIPE_CONFIGURATION_B64"

KNOWN_ACTIONS = (
    "play",
    "download",
    "markPlayed",
    "markUnplayed",
    "addToPlaylist",
    "favorite",
    "archive",
    "delete",
    "share",
    "deleteDownload",
    "cancelDownload",
)

HAPTIC_STYLES = ("light", "medium", "heavy", "soft", "rigid")


@dataclass
class SeededConfiguration:
    """Desired initial swipe configuration, written once before launch."""

    leading: list = field(default_factory=list)
    trailing: list = field(default_factory=list)
    allow_full_swipe_leading: bool = True
    allow_full_swipe_trailing: bool = False
    haptics_enabled: bool = True
    haptic_style: str = "medium"

    def to_payload(self) -> dict:
        return {
            "swipeActions": {
                "leadingActions": list(self.leading),
                "trailingActions": list(self.trailing),
                "allowFullSwipeLeading": self.allow_full_swipe_leading,
                "allowFullSwipeTrailing": self.allow_full_swipe_trailing,
                "hapticFeedbackEnabled": self.haptics_enabled,
            },
            "hapticStyle": self.haptic_style,
        }

    def validate(self) -> None:
        """Raise SeedPayloadError if the payload would not match the schema."""
        for side, actions in (("leading", self.leading), ("trailing", self.trailing)):
            if not isinstance(actions, (list, tuple)):
                raise SeedPayloadError(f"{side} actions must be a list, got {type(actions).__name__}")
            for tag in actions:
                if not isinstance(tag, str) or not tag:
                    raise SeedPayloadError(f"{side} action tags must be non-empty strings, got {tag!r}")
        for name in ("allow_full_swipe_leading", "allow_full_swipe_trailing", "haptics_enabled"):
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise SeedPayloadError(f"{name} must be a bool, got {value!r}")
        if not isinstance(self.haptic_style, str) or not self.haptic_style:
            raise SeedPayloadError(f"haptic_style must be a non-empty string, got {self.haptic_style!r}")

    def encode(self) -> str:
        """Return base64(UTF-8 JSON) for the launch environment.

        Raises SeedPayloadError rather than handing back an empty payload; an
        unseeded app silently falls back to defaults and tests pass for the
        wrong reason.
        """
        self.validate()
        try:
            data = json.dumps(self.to_payload(), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as e:
            raise SeedPayloadError(f"Swipe configuration payload is not valid JSON: {e}") from e
        return base64.b64encode(data.encode("utf-8")).decode("ascii")

    def unknown_actions(self) -> list:
        """Action tags the app is not known to support (kept, not rejected)."""
        return [t for t in list(self.leading) + list(self.trailing) if t not in KNOWN_ACTIONS]

    def expectation(self) -> "SeedExpectation":
        return SeedExpectation(
            leading=tuple(self.leading),
            trailing=tuple(self.trailing),
            haptics_enabled=self.haptics_enabled,
        )


@dataclass(frozen=True)
class SeedExpectation:
    """What a baseline-loaded debug state must show once a seed is consumed."""

    leading: tuple
    trailing: tuple
    haptics_enabled: bool

    def matches(self, state) -> bool:
        if not state.baseline_loaded:
            return False
        return (
            state.leading == self.leading
            and state.trailing == self.trailing
            and state.haptics_enabled == self.haptics_enabled
        )

    def describe(self) -> str:
        return (
            f"expectedLeading={list(self.leading)}\n"
            f"expectedTrailing={list(self.trailing)}\n"
            f"expectedHaptics={self.haptics_enabled}"
        )


def encode_seed(
    leading: list,
    trailing: list,
    allow_full_swipe_leading: bool = True,
    allow_full_swipe_trailing: bool = False,
    haptics_enabled: bool = True,
    haptic_style: str = "medium",
) -> str:
    """Encode a swipe configuration as the base64 launch payload."""
    return SeededConfiguration(
        leading=list(leading),
        trailing=list(trailing),
        allow_full_swipe_leading=allow_full_swipe_leading,
        allow_full_swipe_trailing=allow_full_swipe_trailing,
        haptics_enabled=haptics_enabled,
        haptic_style=haptic_style,
    ).encode()


def decode_seed(payload: str) -> SeededConfiguration:
    """Decode a base64 launch payload back into a SeededConfiguration."""
    try:
        raw = base64.b64decode(payload.strip(), validate=True)
        data = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError, AttributeError) as e:
        raise SeedPayloadError(f"Seed payload is not base64-encoded JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("swipeActions"), dict):
        raise SeedPayloadError("Seed payload has no 'swipeActions' object")

    actions = data["swipeActions"]
    config = SeededConfiguration(
        leading=actions.get("leadingActions", []),
        trailing=actions.get("trailingActions", []),
        allow_full_swipe_leading=actions.get("allowFullSwipeLeading", True),
        allow_full_swipe_trailing=actions.get("allowFullSwipeTrailing", False),
        haptics_enabled=actions.get("hapticFeedbackEnabled", True),
        haptic_style=data.get("hapticStyle", "medium"),
    )
    config.validate()
    return config


# Presets shared by the download and offline playback suites. Use preset() to
# get a copy that is safe to modify.
DOWNLOAD_FOCUSED = SeededConfiguration(
    leading=["download", "markPlayed"],
    trailing=["deleteDownload", "archive", "delete"],
)

CANCEL_DOWNLOAD_FOCUSED = SeededConfiguration(
    leading=["download", "markPlayed"],
    trailing=["cancelDownload", "deleteDownload", "delete"],
)

PRESETS = {
    "download-focused": DOWNLOAD_FOCUSED,
    "cancel-download-focused": CANCEL_DOWNLOAD_FOCUSED,
}


def preset(name: str) -> SeededConfiguration:
    """Fresh copy of a named preset."""
    try:
        base = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset '{name}'. Choose from: {', '.join(sorted(PRESETS))}") from None
    return replace(base, leading=list(base.leading), trailing=list(base.trailing))
