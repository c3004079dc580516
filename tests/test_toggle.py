from decimal import Decimal

import pytest

from swipeprobe.simulator import ElementSnapshot
from swipeprobe.toggle import ToggleInterpreter, interpret_toggle_value, value_signature

TRUE_FORMS = ["1", "on", "true", "yes", "enabled"]
FALSE_FORMS = ["0", "off", "false", "no", "disabled"]


@pytest.mark.parametrize("word", TRUE_FORMS)
def test_true_keywords(word):
    assert interpret_toggle_value(word) is True
    assert interpret_toggle_value(word.upper()) is True
    assert interpret_toggle_value(f"  {word.title()} ") is True
    assert interpret_toggle_value(f"Optional({word})") is True
    assert interpret_toggle_value(f'Optional("{word}")') is True
    assert interpret_toggle_value(f"Optional(Optional({word.upper()}))") is True


@pytest.mark.parametrize("word", FALSE_FORMS)
def test_false_keywords(word):
    assert interpret_toggle_value(word) is False
    assert interpret_toggle_value(word.upper()) is False
    assert interpret_toggle_value(f"Optional({word})") is False
    assert interpret_toggle_value(f'Optional(Optional("{word}"))') is False


@pytest.mark.parametrize(
    "raw, expected",
    [
        (True, True),
        (False, False),
        (1, True),
        (0, False),
        (-3, True),
        (0.0, False),
        (0.5, True),
        (Decimal("0"), False),
        ("2", True),
        ("0.0", False),
        ("1.5", True),
        (b"on", True),
    ],
)
def test_native_and_numeric_values(raw, expected):
    assert interpret_toggle_value(raw) is expected


@pytest.mark.parametrize(
    "raw",
    [None, "", "   ", "maybe", "Optional(nil)", float("nan"), "nan", "sNaN", Decimal("NaN"), Decimal("sNaN"), object()],
)
def test_indeterminate_values(raw):
    assert interpret_toggle_value(raw) is None


def test_objects_are_interpreted_through_str():
    class Wrapped:
        def __str__(self):
            return "Optional(1)"

    assert interpret_toggle_value(Wrapped()) is True


def test_unrecognized_signature_reported_once():
    reported = []
    interpreter = ToggleInterpreter(report=reported.append)

    assert interpreter.interpret("maybe") is None
    assert interpreter.interpret("maybe") is None
    assert interpreter.interpret("perhaps") is None
    assert interpreter.interpret("1") is True

    assert reported == [value_signature("maybe"), value_signature("perhaps")]


def test_signature_distinguishes_types():
    assert value_signature(None) == "nil"
    assert value_signature("x") == "str::'x'"
    assert value_signature(["x"]) != value_signature("x")


def test_state_of_falls_back_to_selected():
    interpreter = ToggleInterpreter(report=lambda s: None)
    selected = ElementSnapshot(identifier="t", value=None, selected=True)
    unselected = ElementSnapshot(identifier="t", value=None, selected=False)
    assert interpreter.state_of(selected) is True
    assert interpreter.state_of(unselected) is None
    assert interpreter.state_of(None) is None
    assert interpreter.reported_signatures == {"nil"}


def test_state_of_prefers_value_over_selected():
    interpreter = ToggleInterpreter(report=lambda s: None)
    element = ElementSnapshot(identifier="t", value="0", selected=True)
    assert interpreter.state_of(element) is False


def test_default_reporter_prints(capsys):
    ToggleInterpreter().interpret("sideways")
    assert "Unrecognized toggle value signature" in capsys.readouterr().out
