#!/usr/bin/env python3
"""Debug-state strings published by the app through accessibility values.

SwipeActions.Debug.StateSummary carries the live swipe configuration:

    Leading=play,addToPlaylist;Trailing=delete,favorite;Full=0/1;Haptics=1;Unsaved=0;Baseline=1

SwipeActions.Debug.LastExecution carries the most recent swipe action:

    action=favorite;episode=ep-42;timestamp=1718034023.51

Parsing is deliberately tolerant. The harness polls while views are still
rendering, so partial or garbled strings are normal and must decode to
defaults instead of raising.
"""

from dataclasses import dataclass
from typing import Optional

STATE_SUMMARY_ID = "SwipeActions.Debug.StateSummary"
LAST_EXECUTION_ID = "SwipeActions.Debug.LastExecution"


@dataclass(frozen=True)
class DebugState:
    """Point-in-time snapshot of the app's swipe configuration.

    Nothing but baseline_loaded is meaningful until baseline_loaded is True.
    """

    leading: tuple = ()
    trailing: tuple = ()
    full_leading: bool = False
    full_trailing: bool = False
    haptics_enabled: bool = False
    unsaved: bool = False
    baseline_loaded: bool = False

    @property
    def is_provisional(self) -> bool:
        return not self.baseline_loaded

    def describe(self) -> str:
        return (
            f"leading={list(self.leading)} trailing={list(self.trailing)} "
            f"full={int(self.full_leading)}/{int(self.full_trailing)} "
            f"haptics={self.haptics_enabled} unsaved={self.unsaved} "
            f"baseline={self.baseline_loaded}"
        )


def _split_fields(raw: str):
    for component in raw.split(";"):
        if "=" not in component:
            continue
        key, value = component.split("=", 1)
        yield key.strip(), value.strip()


def _split_actions(value: str) -> tuple:
    if not value:
        return ()
    return tuple(tag for tag in value.split(",") if tag)


def parse_debug_state(raw: Optional[str]) -> Optional[DebugState]:
    """Parse a state summary string.

    Returns None only when there is nothing to parse (the element is missing
    or its value is not a string). Any string, however malformed, yields a
    DebugState with unrecognised fields left at their defaults.
    """
    if not isinstance(raw, str):
        return None

    fields = {}
    for key, value in _split_fields(raw):
        if key in ("Leading", "Trailing"):
            fields[key.lower()] = _split_actions(value)
        elif key == "Full":
            parts = [p for p in value.split("/") if p]
            if len(parts) == 2:
                fields["full_leading"] = parts[0] == "1"
                fields["full_trailing"] = parts[1] == "1"
            else:
                fields["full_leading"] = False
                fields["full_trailing"] = False
        elif key == "Haptics":
            fields["haptics_enabled"] = value == "1"
        elif key == "Unsaved":
            fields["unsaved"] = value == "1"
        elif key == "Baseline":
            fields["baseline_loaded"] = value == "1"
        # anything else: newer app build, ignore

    return DebugState(**fields)


@dataclass(frozen=True)
class SwipeExecutionRecord:
    action: str
    episode_id: str
    timestamp: float

    def describe(self) -> str:
        return f"{self.action} for episode {self.episode_id} at {self.timestamp}"


def parse_execution_record(raw: Optional[str]) -> Optional[SwipeExecutionRecord]:
    """Parse a LastExecution string; None unless action, episode and timestamp are all present."""
    if not isinstance(raw, str) or not raw:
        return None

    action = episode_id = None
    timestamp = None
    for key, value in _split_fields(raw):
        if key == "action":
            action = value
        elif key == "episode":
            episode_id = value
        elif key == "timestamp":
            try:
                timestamp = float(value)
            except ValueError:
                timestamp = None

    if action is None or episode_id is None or timestamp is None:
        return None
    return SwipeExecutionRecord(action=action, episode_id=episode_id, timestamp=timestamp)
