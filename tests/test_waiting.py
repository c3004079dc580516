import pytest

from swipeprobe.waiting import Timeouts, wait_for_debug_state, wait_until

LOADING = "Leading=play;Trailing=delete;Full=1/0;Haptics=1;Unsaved=0;Baseline=0"
LIVE = "Leading=play;Trailing=delete;Full=1/0;Haptics=1;Unsaved=0;Baseline=1"


def scripted(values):
    """Probe returning each value once, then repeating the last."""
    values = list(values)

    def probe():
        return values.pop(0) if len(values) > 1 else values[0]

    return probe


def test_returns_as_soon_as_predicate_holds(clock):
    result = wait_until(scripted([1, 2, 3, 4]), lambda v: v >= 3, timeout=5.0, clock=clock, sleep=clock.sleep)
    assert result.matched
    assert result.value == 3
    assert result.attempts == 3
    assert clock.now == pytest.approx(0.2)


def test_times_out_with_last_observed_value(clock):
    result = wait_until(scripted([1, 2]), lambda v: v > 10, timeout=1.0, clock=clock, sleep=clock.sleep)
    assert not result.matched
    assert not result
    assert result.value is None
    assert result.last_observed == 2
    assert result.ever_observed
    assert result.elapsed >= 1.0


def test_distinguishes_never_observed(clock):
    result = wait_until(lambda: None, lambda v: True, timeout=0.5, clock=clock, sleep=clock.sleep)
    assert not result.matched
    assert not result.ever_observed


def test_none_does_not_overwrite_earlier_observation(clock):
    result = wait_until(scripted(["seen", None]), lambda v: False, timeout=0.5, clock=clock, sleep=clock.sleep)
    assert result.last_observed == "seen"


def test_probe_runs_at_least_once_with_zero_timeout(clock):
    calls = []
    result = wait_until(lambda: calls.append(1) or "x", lambda v: v == "x", timeout=0, clock=clock, sleep=clock.sleep)
    assert result.matched
    assert calls == [1]


def test_never_reports_success_for_unsatisfiable_predicate(clock):
    # state eventually changes, but only after the deadline
    values = [LOADING] * 40 + [LIVE]
    result = wait_for_debug_state(scripted(values), timeout=2.0, clock=clock, sleep=clock.sleep)
    assert not result.matched
    assert result.last_observed.baseline_loaded is False


def test_sleeps_never_overshoot_deadline(clock):
    wait_until(lambda: 0, lambda v: False, timeout=0.25, interval=0.1, clock=clock, sleep=clock.sleep)
    assert clock.now == pytest.approx(0.25)
    assert max(clock.sleeps) <= 0.1 + 1e-9


def test_debug_state_waits_for_baseline(clock):
    result = wait_for_debug_state(scripted([None, LOADING, LOADING, LIVE]), timeout=3.0, clock=clock, sleep=clock.sleep)
    assert result.matched
    assert result.value.baseline_loaded
    assert result.attempts == 4


def test_debug_state_predicate_sees_only_baseline_states(clock):
    seen = []

    def predicate(state):
        seen.append(state.baseline_loaded)
        return True

    wait_for_debug_state(scripted([LOADING, LIVE]), predicate, timeout=3.0, clock=clock, sleep=clock.sleep)
    assert seen == [True]


def test_debug_state_reparses_each_poll(clock):
    changed = LIVE.replace("Unsaved=0", "Unsaved=1")
    result = wait_for_debug_state(
        scripted([LIVE, LIVE, changed]), lambda s: s.unsaved, timeout=3.0, clock=clock, sleep=clock.sleep
    )
    assert result.matched
    assert result.value.unsaved


def test_debug_state_timeout_keeps_provisional_snapshot(clock):
    result = wait_for_debug_state(lambda: LOADING, timeout=1.0, clock=clock, sleep=clock.sleep)
    assert not result.matched
    assert result.last_observed.leading == ("play",)


def test_timeouts_local_defaults():
    assert Timeouts.from_env({}) == Timeouts(standard=10.0, short=3.0)


def test_timeouts_on_ci():
    assert Timeouts.from_env({"CI": "true"}) == Timeouts(standard=15.0, short=5.0)


def test_timeouts_scaled():
    t = Timeouts.from_env({"UITEST_TIMEOUT_SCALE": "3.0"})
    assert t.standard == pytest.approx(30.0)
    assert t.short == pytest.approx(9.0)


@pytest.mark.parametrize("scale", ["0", "-1", "fast", ""])
def test_timeouts_ignore_bad_scale(scale):
    assert Timeouts.from_env({"UITEST_TIMEOUT_SCALE": scale}) == Timeouts()


def test_explicit_scale_wins():
    t = Timeouts.from_env({"UITEST_TIMEOUT_SCALE": "3.0"}, scale=2.0)
    assert t.short == pytest.approx(6.0)


def test_empty_ci_variable_still_means_ci():
    assert Timeouts.from_env({"CI": ""}) == Timeouts(standard=15.0, short=5.0)
