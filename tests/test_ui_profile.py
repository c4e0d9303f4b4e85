import math
import os

import pytest
import yaml

from core.state import ButtonMode, Color
from devices.mobile_io import MobileIO
from devices.sim import SimulatedGroup, SimulatedMobileDevice
from ui_profile import UIProfile

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def make_mio():
    group = SimulatedGroup(SimulatedMobileDevice())
    return MobileIO(group), group


def test_apply_buttons_axes_color_and_text():
    profile = UIProfile({
        "buttons": {1: {"mode": "toggle", "label": "Enable", "led": True}},
        "axes": {3: {"snap": None, "value": 0.25, "label": "Speed"}, 1: {"snap": 0.0}},
        "led_color": [0, 128, 255],
        "text": "ready",
    })
    mio, group = make_mio()
    assert profile.apply(mio) is True

    dev = group.device
    assert dev.button_modes[0] == ButtonMode.TOGGLE
    assert dev.button_labels[0] == "Enable"
    assert dev.button_leds[0] is True
    assert math.isnan(dev.axis_snaps[2])
    assert dev.axis_snaps[0] == 0.0
    assert dev.axes[2] == 0.25
    assert dev.axis_labels[2] == "Speed"
    assert dev.led_color == Color(0, 128, 255)
    assert dev.text == "ready"
    assert all(ack for _, ack in group.sent)


def test_acknowledge_false_uses_unacknowledged_sends():
    profile = UIProfile({"acknowledge": False, "buttons": {2: {"led": True}}})
    mio, group = make_mio()
    group.drop_acks = True
    assert profile.apply(mio) is True
    (cmd, ack), = group.sent
    assert ack is False


def test_unconfirmed_step_reports_false_but_continues():
    profile = UIProfile({"buttons": {1: {"label": "A"}, 2: {"label": "B"}}})
    mio, group = make_mio()
    group.drop_acks = True
    assert profile.apply(mio) is False
    assert len(group.sent) == 2
    assert group.device.button_labels[:2] == ["A", "B"]


def test_missing_layout_file_fails_but_rest_is_sent(tmp_path):
    path = tmp_path / "p.yaml"
    path.write_text(yaml.safe_dump({"layout": "nope.json", "text": "hi"}))
    profile = UIProfile.load_profile(str(path))
    mio, group = make_mio()
    assert profile.apply(mio) is False
    assert group.device.layout is None
    assert group.device.text == "hi"


def test_layout_is_resolved_relative_to_profile(tmp_path):
    (tmp_path / "ui.json").write_text('{"rows": 1}')
    path = tmp_path / "p.yaml"
    path.write_text("layout: ui.json\nreset_ui: true\n")
    profile = UIProfile.load_profile(str(path))
    mio, group = make_mio()
    assert profile.apply(mio) is True
    assert group.device.layout == b'{"rows": 1}'
    assert group.sent[0][0].reset_ui is True


def test_sample_profile_loads_and_applies():
    profile = UIProfile.load_profile(os.path.join(REPO_ROOT, "profiles", "teleop.yaml"))
    assert profile.family == "HEBI"
    assert profile.name == "mobileIO"
    assert profile.timeout_ms == 1000
    mio, group = make_mio()
    assert profile.apply(mio) is True
    assert group.device.layout.startswith(b"{")
    assert group.device.button_labels[7] == "Quit"


@pytest.mark.parametrize("data", [
    {"buttons": {1: {"mode": "latching"}}},
    {"buttons": {"one": {"label": "x"}}},
    {"axes": [1, 2]},
    {"led_color": [0, 0]},
    {"led_color": [0, 0, 300]},
    {"buttons": {9: {"label": "Z"}}},
    {"buttons": {True: {"label": "Z"}}},
    {"axes": {0: {"label": "X"}}},
    {"axes": {1: {"value": "fast"}}},
    {"axes": {1: {"snap": [0.0]}}},
    {"timeout_ms": "500"},
    {"timeout_ms": 0},
])
def test_invalid_profiles_raise(data):
    with pytest.raises(ValueError):
        UIProfile(data)


def test_out_of_range_button_rejected_before_anything_is_sent(tmp_path):
    path = tmp_path / "p.yaml"
    path.write_text(yaml.safe_dump({"reset_ui": True, "buttons": {1: {"label": "A"}, 9: {"label": "Z"}}}))
    with pytest.raises(ValueError, match="buttons key 9"):
        UIProfile.load_profile(str(path))


def test_empty_profile_sends_nothing():
    mio, group = make_mio()
    assert UIProfile(None).apply(mio) is True
    assert group.sent == []
