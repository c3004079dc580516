"""Shared fakes: a simulated clock and an in-memory app standing in for the simulator."""

from pathlib import Path

import pytest
from PIL import Image

from swipeprobe.debug_state import STATE_SUMMARY_ID
from swipeprobe.seeding import SEED_ENV_VAR, decode_seed
from swipeprobe.session import SwipeSession
from swipeprobe.simulator import ElementSnapshot
from swipeprobe.waiting import Timeouts


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class FakeDriver:
    """Accessibility tree held in a dict; the state summary can follow a script.

    `summary_script` is a list of raw values handed out one per read; the last
    one repeats forever. None in the script means "element not on screen".
    """

    def __init__(self):
        self.elements = {}
        self.summary_script = None
        self.launches = []
        self.terminations = 0
        self.cleared_domains = []
        self.taps = []
        self.screenshots = []
        self.on_tap = None

    def set_element(self, identifier, value=None, element_type="StaticText", selected=False):
        self.elements[identifier] = ElementSnapshot(
            identifier=identifier,
            value=value,
            element_type=element_type,
            frame={"x": 10.0, "y": 100.0, "width": 50.0, "height": 30.0},
            selected=selected,
        )

    def element(self, identifier):
        if identifier == STATE_SUMMARY_ID and self.summary_script:
            raw = self.summary_script.pop(0) if len(self.summary_script) > 1 else self.summary_script[0]
            if raw is None:
                self.elements.pop(STATE_SUMMARY_ID, None)
            else:
                self.set_element(STATE_SUMMARY_ID, raw)
        return self.elements.get(identifier)

    def element_value(self, identifier):
        e = self.element(identifier)
        return e.value if e else None

    def identifiers(self, prefixes=()):
        ids = [i for i in self.elements if not prefixes or i.startswith(tuple(prefixes))]
        return sorted(ids)

    def launch_app(self, env=None, launch_args=None):
        self.launches.append(dict(env or {}))

    def terminate_app(self):
        self.terminations += 1

    def clear_defaults(self, domain=None):
        self.cleared_domains.append(domain)

    def _record_tap(self, kind, element, dx=0.5, dy=0.5):
        self.taps.append((kind, element.identifier, dx, dy))
        if self.on_tap:
            self.on_tap(self, kind, element.identifier, dx)

    def tap(self, element):
        self._record_tap("tap", element)

    def tap_point(self, element, dx=0.5, dy=0.5):
        self._record_tap("tap_point", element, dx, dy)

    def press(self, element, duration=0.05):
        self._record_tap("press", element)

    def take_screenshot(self, output_path):
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", (1206, 2622), (30, 30, 30)).save(path)
        self.screenshots.append(path)
        return path


class FakeSwipeApp(FakeDriver):
    """Consumes the seeded payload at launch like the real app does.

    The first `loading_reads` reads of the summary report Baseline=0, as the
    settings sheet materializes.
    """

    def __init__(self, loading_reads=2):
        super().__init__()
        self.loading_reads = loading_reads

    def launch_app(self, env=None, launch_args=None):
        super().launch_app(env, launch_args)
        payload = (env or {}).get(SEED_ENV_VAR)
        if payload:
            seed = decode_seed(payload)
            leading, trailing = ",".join(seed.leading), ",".join(seed.trailing)
            full = f"{int(seed.allow_full_swipe_leading)}/{int(seed.allow_full_swipe_trailing)}"
            haptics = int(seed.haptics_enabled)
        else:
            leading, trailing, full, haptics = "markPlayed", "delete,archive", "1/1", 1
        live = f"Leading={leading};Trailing={trailing};Full={full};Haptics={haptics};Unsaved=0;Baseline=1"
        loading = live.replace("Baseline=1", "Baseline=0")
        self.summary_script = [loading] * self.loading_reads + [live]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def driver():
    return FakeDriver()


@pytest.fixture
def app():
    return FakeSwipeApp()


def make_session(driver, clock, tmp_path=None, **config):
    cfg = {"diagnostics": {"directory": str(tmp_path)}} if tmp_path else {}
    cfg.update(config)
    return SwipeSession(
        driver,
        config=cfg,
        timeouts=Timeouts(standard=10.0, short=3.0),
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def session(driver, clock, tmp_path):
    return make_session(driver, clock, tmp_path)


@pytest.fixture
def app_session(app, clock, tmp_path):
    return make_session(app, clock, tmp_path)


@pytest.fixture
def session_factory(clock, tmp_path):
    return lambda driver, **config: make_session(driver, clock, tmp_path, **config)
