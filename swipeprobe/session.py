#!/usr/bin/env python3
"""Swipe configuration test session.

One SwipeSession per test: it owns the driver, the pending seed, the toggle
interpreter and the diagnostics collected along the way. Tests receive it as an
argument (see pytest_plugin) instead of sharing a mutable app handle.

Typical flow:

    session.launch_with_seed(SeededConfiguration(leading=["play"], trailing=["delete"]))
    session.complete_seed_if_needed()
    session.set_toggle(HAPTICS_TOGGLE, False)
    session.wait_for_debug_summary(leading=["play"], trailing=["delete"], unsaved=True)
"""

import time
from pathlib import Path
from typing import Callable, Optional

from . import launch_config
from .debug_state import (
    LAST_EXECUTION_ID,
    STATE_SUMMARY_ID,
    DebugState,
    SwipeExecutionRecord,
    parse_debug_state,
    parse_execution_record,
)
from .diagnostics import DiagnosticsRecorder
from .errors import ElementNotFoundError, HarnessError, StateMismatchError
from .seeding import SeededConfiguration
from .toggle import ToggleInterpreter
from .waiting import Timeouts, wait_for_debug_state, wait_until

HAPTICS_TOGGLE = "SwipeActions.Haptics.Toggle"
LEADING_FULL_SWIPE_TOGGLE = "SwipeActions.Leading.FullSwipe"
TRAILING_FULL_SWIPE_TOGGLE = "SwipeActions.Trailing.FullSwipe"
SWIPE_ID_PREFIXES = ("SwipeActions.", "SwipeAction.")

MAX_TEST_DURATION = 300.0  # seconds


class SwipeSession:
    def __init__(
        self,
        driver,
        config: Optional[dict] = None,
        timeouts: Optional[Timeouts] = None,
        diagnostics: Optional[DiagnosticsRecorder] = None,
        verbose: bool = False,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.driver = driver
        self.config = config or {}
        self.verbose = verbose or bool(self.config.get("verbose"))
        scale = (self.config.get("timeouts") or {}).get("scale")
        self.timeouts = timeouts or Timeouts.from_env(scale=scale)
        self.diagnostics = diagnostics or DiagnosticsRecorder(verbose=self.verbose)
        self.toggles = ToggleInterpreter(report=self._report_toggle_signature)
        self.clock = clock
        self.sleep = sleep

        self.defaults_suite = (self.config.get("swipe") or {}).get(
            "defaults_suite", launch_config.DEFAULT_SWIPE_SUITE
        )
        self.seeded_payload: Optional[str] = None
        self.pending_seed = None
        self.last_execution_timestamp = 0.0
        self.started_at = clock()

    def log(self, msg: str):
        print(msg)

    def debug(self, msg: str):
        if self.verbose:
            print(f"  [debug] {msg}")

    def _wait(self, probe, predicate, timeout: float, interval: float = 0.1):
        return wait_until(probe, predicate, timeout, interval=interval, clock=self.clock, sleep=self.sleep)

    # ── Seeding & launch ──────────────────────────────────────────────

    def seed(self, configuration: SeededConfiguration) -> str:
        """Encode `configuration` for the next launch and remember what to expect."""
        payload = configuration.encode()
        unknown = configuration.unknown_actions()
        if unknown:
            self.debug(f"Seeding actions the app may not know: {unknown}")
        self.seeded_payload = payload
        self.pending_seed = configuration.expectation()
        return payload

    def clear_seed(self):
        self.seeded_payload = None
        self.pending_seed = None

    def launch_environment(self, reset: bool = False) -> dict:
        # A seed only takes effect on top of reset settings
        env = launch_config.swipe_configuration(
            suite=self.defaults_suite,
            reset=reset or self.seeded_payload is not None,
            seeded_configuration=self.seeded_payload,
        )
        return launch_config.custom(self.config.get("env") or {}, base=env)

    def launch(self, reset: bool = False):
        env = self.launch_environment(reset=reset)
        self.debug(f"Launching with reset={env['UITEST_RESET_SWIPE_SETTINGS']} seeded={self.seeded_payload is not None}")
        self.driver.launch_app(env)

    def launch_with_seed(self, configuration: SeededConfiguration):
        self.seed(configuration)
        self.launch(reset=False)

    def relaunch(self, reset_defaults: bool = False):
        self.driver.terminate_app()
        self.launch(reset=reset_defaults)

    def restore_default_configuration(self):
        self.clear_seed()
        self.driver.clear_defaults(self.defaults_suite)
        self.relaunch(reset_defaults=True)

    def complete_seed_if_needed(self, timeout: float = 10.0) -> Optional[DebugState]:
        """Block until the pending seed shows up in the debug state, then forget it."""
        expectation = self.pending_seed
        if expectation is None:
            return None

        try:
            return self.wait_for_debug_state(expectation.matches, timeout=timeout)
        except HarnessError as e:
            last_observed = getattr(e, "last_observed", None)
            observed = last_observed.describe() if last_observed else "<unavailable>"
            self.diagnostics.attach_text(
                "Seeded Swipe Configuration Diagnostics",
                f"{expectation.describe()}\nobserved={observed}",
            )
            if isinstance(e, ElementNotFoundError):
                raise
            raise StateMismatchError(
                f"Seeded swipe configuration did not materialize within {timeout} seconds",
                last_observed,
            ) from e
        finally:
            self.clear_seed()

    # ── Element discovery ─────────────────────────────────────────────

    def wait_for_element(self, identifier: str, timeout: Optional[float] = None):
        timeout = self.timeouts.short if timeout is None else timeout
        result = self._wait(lambda: self.driver.element(identifier), lambda e: True, timeout)
        if not result:
            available = self.report_available_identifiers(f"Missing {identifier}")
            raise ElementNotFoundError(identifier, timeout, available)
        return result.value

    def report_available_identifiers(self, context: str) -> list:
        identifiers = self.driver.identifiers(SWIPE_ID_PREFIXES)
        if identifiers:
            self.diagnostics.attach_text(
                "Swipe Identifier Snapshot",
                "\n".join([f"Context: {context}"] + identifiers),
            )
        return identifiers

    # ── Debug state ───────────────────────────────────────────────────

    def read_state_summary(self) -> Optional[str]:
        value = self.driver.element_value(STATE_SUMMARY_ID)
        return value if isinstance(value, str) else None

    def current_debug_state(self) -> Optional[DebugState]:
        return parse_debug_state(self.read_state_summary())

    def wait_for_debug_state(
        self,
        predicate: Optional[Callable[[DebugState], bool]] = None,
        timeout: Optional[float] = None,
    ) -> DebugState:
        """Wait for a baseline-loaded state matching predicate; raise with the last state seen."""
        self.wait_for_element(STATE_SUMMARY_ID)
        timeout = self.timeouts.short if timeout is None else timeout
        result = wait_for_debug_state(
            self.read_state_summary, predicate, timeout, clock=self.clock, sleep=self.sleep
        )
        if result:
            return result.value

        if result.ever_observed:
            self.diagnostics.attach_text("Observed debug state", result.last_observed.describe())
        else:
            self.diagnostics.attach_text("Observed debug state", "Debug summary never produced a parsable state")
        raise StateMismatchError(
            f"Debug state did not match within {timeout:.1f}s", result.last_observed
        )

    def wait_for_baseline_loaded(self, timeout: float = 5.0) -> DebugState:
        return self.wait_for_debug_state(timeout=timeout)

    def wait_for_debug_summary(
        self,
        leading: list,
        trailing: list,
        unsaved: Optional[bool] = None,
        timeout: Optional[float] = None,
    ) -> DebugState:
        leading, trailing = tuple(leading), tuple(trailing)

        def matches(state: DebugState) -> bool:
            if state.leading != leading or state.trailing != trailing:
                return False
            return unsaved is None or state.unsaved == unsaved

        return self.wait_for_debug_state(matches, timeout=timeout)

    def log_debug_state(self, label: str):
        state = self.current_debug_state()
        if state:
            self.debug(f"[SwipeDebug] {label}: {state.describe()}")
        else:
            self.debug(f"[SwipeDebug] {label}: state unavailable")

    # ── Swipe executions ──────────────────────────────────────────────

    def latest_swipe_execution(self) -> Optional[SwipeExecutionRecord]:
        return parse_execution_record(self.driver.element_value(LAST_EXECUTION_ID))

    def wait_for_swipe_execution(self, action: str, timeout: float = 5.0) -> SwipeExecutionRecord:
        """Wait for a swipe execution of `action` newer than the last one accepted."""
        result = self._wait(
            self.latest_swipe_execution,
            lambda r: r.action == action and r.timestamp > self.last_execution_timestamp,
            timeout,
            interval=0.05,
        )
        if result:
            self.last_execution_timestamp = result.value.timestamp
            return result.value

        if result.ever_observed:
            self.diagnostics.attach_text(
                "Swipe Execution", f"Last recorded swipe action: {result.last_observed.describe()}"
            )
        else:
            self.diagnostics.attach_text("Swipe Execution", "No swipe execution was recorded")
        raise StateMismatchError(
            f"Expected swipe action {action} to execute within {timeout} seconds", result.last_observed
        )

    # ── Toggles ───────────────────────────────────────────────────────

    def _report_toggle_signature(self, signature: str):
        self.debug(f"Unrecognized toggle value signature: {signature}")
        self.diagnostics.attach_text("Toggle Value Snapshot", f"Unrecognized toggle value signature: {signature}")

    def toggle_state(self, identifier: str) -> Optional[bool]:
        return self.toggles.state_of(self.driver.element(identifier))

    def attach_toggle_diagnostics(self, identifier: str, context: str, element=None):
        element = element or self.driver.element(identifier)
        lines = [f"Context: {context}", f"Identifier: {identifier}"]
        if element is None:
            lines.append("element: nil")
        else:
            lines.append(f"elementType: {element.element_type}")
            lines.append(f"isEnabled: {element.enabled}")
            lines.append(f"isSelected: {element.selected}")
            lines.append(f"value: {element.value!r}")
            lines.append(f"frame: {element.frame}")
        self.diagnostics.attach_text("Toggle Diagnostics", "\n".join(lines))

    def _toggle_reaches(self, identifier: str, on: bool, timeout: float = 1.0) -> bool:
        return bool(self._wait(lambda: self.toggle_state(identifier), lambda s: s == on, timeout))

    def set_toggle(self, identifier: str, on: bool):
        """Flip a switch to `on`: plain tap, then a coordinate tap on the knob side, then a press."""
        toggle = self.wait_for_element(identifier)
        current = self.toggles.state_of(toggle)
        if current is None:
            self.attach_toggle_diagnostics(identifier, "set_toggle unreadable state", toggle)
            raise StateMismatchError(f"Toggle {identifier} state is unreadable", self.current_debug_state())
        if current == on:
            return

        self.driver.tap(toggle)
        if self._toggle_reaches(identifier, on):
            return
        self.debug(f"Tap on {identifier} did not stick, tapping knob side")
        self.driver.tap_point(toggle, 0.8 if on else 0.2, 0.5)
        if self._toggle_reaches(identifier, on):
            return
        self.driver.press(toggle, 0.05)
        if self._toggle_reaches(identifier, on):
            return

        self.attach_toggle_diagnostics(identifier, "set_toggle did not reach target")
        raise StateMismatchError(f"Toggle {identifier} did not switch to {on}", self.current_debug_state())

    def assert_toggle_state(self, identifier: str, expected: bool):
        toggle = self.wait_for_element(identifier)
        result = self._wait(lambda: self.toggle_state(identifier), lambda s: s == expected, self.timeouts.short)
        if result:
            return
        self.attach_toggle_diagnostics(identifier, "assert_toggle_state mismatch", toggle)
        raw = self.read_state_summary()
        detail = f"Debug: {raw}" if raw is not None else "(debug summary unavailable)"
        raise StateMismatchError(
            f"Toggle {identifier} state mismatch, expected {expected}. {detail}", self.current_debug_state()
        )

    def assert_full_swipe_state(self, leading: bool, trailing: bool):
        self.assert_toggle_state(LEADING_FULL_SWIPE_TOGGLE, leading)
        self.assert_toggle_state(TRAILING_FULL_SWIPE_TOGGLE, trailing)
        self.wait_for_debug_state(lambda s: s.full_leading == leading and s.full_trailing == trailing)

    def assert_haptics_enabled(self, expected: bool, timeout: Optional[float] = None):
        self.assert_toggle_state(HAPTICS_TOGGLE, expected)
        self.wait_for_debug_state(lambda s: s.haptics_enabled == expected, timeout=timeout)

    # ── Teardown ──────────────────────────────────────────────────────

    def capture_screenshot(self, name: str = "Failure Screenshot") -> Path:
        directory = Path((self.config.get("diagnostics") or {}).get("directory", "./swipeprobe-diagnostics"))
        stem = f"{time.time_ns()}-{len(self.diagnostics.attachments):02d}"
        path = self.driver.take_screenshot(str(directory / "raw" / f"{stem}.png"))
        self.diagnostics.attach_screenshot(name, path)
        return path

    def finish(self, failed: bool = False, output_dir: Optional[str] = None) -> list:
        """Write diagnostics, terminate the app and enforce the per-test time limit.

        The app is terminated even when the screenshot or writing fails, so it
        never leaks into the next test.
        """
        elapsed = self.clock() - self.started_at
        written = []
        try:
            if failed:
                try:
                    self.capture_screenshot()
                except (RuntimeError, OSError) as e:
                    self.log(f"  ⚠️  Failure screenshot unavailable: {e}")
                    self.diagnostics.attach_text("Failure Screenshot Error", str(e))

            if self.diagnostics.attachments:
                directory = output_dir or (self.config.get("diagnostics") or {}).get(
                    "directory", "./swipeprobe-diagnostics"
                )
                written = self.diagnostics.write(directory, failed=failed)
                self.log(f"  📎 Wrote {len(written)} attachments to {directory}")
        finally:
            self.driver.terminate_app()

        if elapsed > MAX_TEST_DURATION:
            raise HarnessError(f"Swipe test exceeded {MAX_TEST_DURATION:.1f} seconds (actual {elapsed:.1f})")
        return written
