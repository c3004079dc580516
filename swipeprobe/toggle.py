#!/usr/bin/env python3
"""Interpret the accessibility value of a toggle as on/off.

Switch values come back in whatever shape the UI framework felt like that day:
a real bool, 0/1, "on"/"off", "true", or a Swift "Optional(\"1\")" that leaked
through string interpolation. Everything is normalised to True/False, or None
when the value is genuinely unreadable.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Optional

TRUE_WORDS = frozenset({"1", "on", "true", "yes", "enabled"})
FALSE_WORDS = frozenset({"0", "off", "false", "no", "disabled"})

_OPTIONAL_PREFIX = "Optional("


def _unwrap_optional(text: str) -> str:
    while text.startswith(_OPTIONAL_PREFIX) and text.endswith(")"):
        text = text[len(_OPTIONAL_PREFIX):-1].strip()
    return text.strip('"').strip()


def interpret_toggle_string(raw: str) -> Optional[bool]:
    candidate = raw.strip()
    if not candidate:
        return None
    candidate = _unwrap_optional(candidate)

    lowered = candidate.lower()
    if lowered in TRUE_WORDS:
        return True
    if lowered in FALSE_WORDS:
        return False

    try:
        return int(candidate) != 0
    except ValueError:
        pass
    try:
        number = Decimal(candidate)
    except (InvalidOperation, ValueError):
        return None
    if number.is_nan():
        return None
    return number != 0


def interpret_toggle_value(raw: Any) -> Optional[bool]:
    """Return True/False for anything toggle-shaped, None when indeterminate."""
    if raw is None:
        return None
    # bool before int: bool is an int subclass
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, Decimal):
        # comparing a signalling NaN raises InvalidOperation
        return None if raw.is_nan() else raw != 0
    if isinstance(raw, float) and math.isnan(raw):
        return None
    if isinstance(raw, (int, float)):
        return raw != 0
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(raw, str):
        return interpret_toggle_string(raw)
    return interpret_toggle_string(str(raw))


def value_signature(raw: Any) -> str:
    if raw is None:
        return "nil"
    return f"{type(raw).__name__}::{raw!r}"


class ToggleInterpreter:
    """Interprets toggle values and reports each unreadable shape only once."""

    def __init__(self, report: Optional[Callable[[str], None]] = None):
        self._report = report
        self.reported_signatures = set()

    def interpret(self, raw: Any) -> Optional[bool]:
        result = interpret_toggle_value(raw)
        if result is None:
            self.note_unrecognized(raw)
        return result

    def note_unrecognized(self, raw: Any) -> bool:
        """Record an unreadable value; True the first time its signature is seen."""
        signature = value_signature(raw)
        if signature in self.reported_signatures:
            return False
        self.reported_signatures.add(signature)
        if self._report:
            self._report(signature)
        else:
            print(f"  ⚠️  Unrecognized toggle value signature: {signature}")
        return True

    def state_of(self, element) -> Optional[bool]:
        """On/off state of an element snapshot, falling back to its selected flag."""
        if element is None:
            return None
        result = interpret_toggle_value(element.value)
        if result is not None:
            return result
        if getattr(element, "selected", False):
            return True
        self.note_unrecognized(element.value)
        return None
