"""pytest integration: a `swipe_session` fixture driving a booted simulator.

Tests that need a real simulator carry the `ios_simulator` marker and are
skipped unless SWIPEPROBE_UDID is set:

    export SWIPEPROBE_UDID=$(xcrun simctl list devices | grep Booted | head -n1 | sed -E 's/.*\\(([A-F0-9-]+)\\).*/\\1/')
    pytest -m ios_simulator
"""

import os

import pytest

from .config import load_config
from .session import SwipeSession
from .simulator import Simulator


def pytest_addoption(parser):
    group = parser.getgroup("swipeprobe")
    group.addoption("--swipeprobe-config", default=None, help="Path to swipeprobe.yaml")


def pytest_configure(config):
    config.addinivalue_line("markers", "ios_simulator: needs a booted iOS simulator (SWIPEPROBE_UDID)")


def pytest_collection_modifyitems(config, items):
    if os.environ.get("SWIPEPROBE_UDID"):
        return
    skip = pytest.mark.skip(reason="SWIPEPROBE_UDID not set")
    for item in items:
        if "ios_simulator" in item.keywords:
            item.add_marker(skip)


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"swipeprobe_{report.when}", report)


@pytest.fixture(scope="session")
def swipeprobe_config(request):
    return load_config(request.config.getoption("--swipeprobe-config"))


@pytest.fixture
def swipe_session(request, swipeprobe_config):
    """A fresh SwipeSession per test; diagnostics are written on teardown."""
    cfg = swipeprobe_config
    simulator = Simulator(cfg["app"]["bundle_id"], udid=cfg["device"]["udid"], verbose=cfg["verbose"])
    session = SwipeSession(simulator, config=cfg)
    yield session

    call = getattr(request.node, "swipeprobe_call", None)
    failed = bool(call and call.failed)
    out = os.path.join(cfg["diagnostics"]["directory"], request.node.name)
    session.finish(failed=failed, output_dir=out)
