"""Failure types raised by the harness.

Every failure carries enough context to diagnose it without re-running:
the identifier that never appeared (plus what was on screen instead), or the
last debug state that was observed before the wait gave up.
"""

from typing import Optional


class HarnessError(RuntimeError):
    """Base class for harness failures."""


class ElementNotFoundError(HarnessError):
    """An accessibility query returned nothing within its timeout."""

    def __init__(self, identifier: str, timeout: float, available: Optional[list] = None):
        self.identifier = identifier
        self.timeout = timeout
        self.available = list(available or [])
        msg = f"Element '{identifier}' did not appear within {timeout:.1f}s"
        if self.available:
            msg += "\nAvailable identifiers:\n  " + "\n  ".join(self.available)
        super().__init__(msg)


class StateMismatchError(HarnessError):
    """Debug state was readable but never satisfied the expectation."""

    def __init__(self, message: str, last_observed=None):
        self.last_observed = last_observed
        if last_observed is None:
            message += "\nLast observed: <never produced a parsable state>"
        elif hasattr(last_observed, "describe"):
            message += f"\nLast observed: {last_observed.describe()}"
        else:
            message += f"\nLast observed: {last_observed!r}"
        super().__init__(message)


class SeedPayloadError(HarnessError, ValueError):
    """A seeded configuration payload could not be built or read."""
