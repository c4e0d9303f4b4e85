import math

import pytest

from core.state import ButtonMode, ButtonTransition, Color, MobileCommand, StateSnapshot


def test_transition_between():
    assert ButtonTransition.between(False, True) == ButtonTransition.TO_ON
    assert ButtonTransition.between(True, False) == ButtonTransition.TO_OFF
    assert ButtonTransition.between(True, True) == ButtonTransition.UNCHANGED
    assert ButtonTransition.between(False, False) == ButtonTransition.UNCHANGED
    assert int(ButtonTransition.TO_OFF) == -1 and int(ButtonTransition.TO_ON) == 1


def test_button_mode_parse():
    assert ButtonMode.parse("Toggle") is ButtonMode.TOGGLE
    assert ButtonMode.parse(" momentary ") is ButtonMode.MOMENTARY
    assert ButtonMode.parse(1) is ButtonMode.TOGGLE
    assert ButtonMode.parse(ButtonMode.MOMENTARY) is ButtonMode.MOMENTARY
    with pytest.raises(ValueError):
        ButtonMode.parse("latching")


def test_color_range():
    assert Color(1, 2, 3).a == 255
    with pytest.raises(ValueError):
        Color(0, -1, 0)


def test_snapshot_copy_does_not_alias():
    snap = StateSnapshot()
    copy = snap.copy()
    copy.axes[0] = 1.0
    copy.buttons[0] = True
    assert snap.axes[0] == 0.0 and snap.buttons[0] is False
    assert snap != copy


def test_snapshot_equality_treats_nan_as_equal():
    snap = StateSnapshot()
    snap.axes[2] = math.nan
    assert snap == snap.copy()


def test_empty_command_has_no_fields():
    assert MobileCommand().fields() == {}
    cmd = MobileCommand(button_leds={1: False})
    assert cmd.fields() == {"button_leds": {1: False}}
