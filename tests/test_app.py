import logging
import os

import pytest

import app
from core.group import set_default_lookup
from devices.mobile_io import MobileIO
from devices.sim import SimulatedLookup

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


@pytest.fixture(autouse=True)
def reset_default_lookup():
    yield
    set_default_lookup(None)


def test_main_without_device_exits_1():
    assert app.main(["--duration", "0"]) == 1


@pytest.mark.parametrize("hz", ["0", "-5", "nan"])
def test_non_positive_hz_is_rejected(hz):
    with pytest.raises(SystemExit) as exc:
        app.build_parser().parse_args(["--hz", hz])
    assert exc.value.code == 2


def test_main_simulated_with_profile():
    profile = os.path.join(REPO_ROOT, "profiles", "teleop.yaml")
    assert app.main(["--simulate", "--profile", profile, "--duration", "0.05", "--hz", "100"]) == 0


def test_log_changes_reports_edges(caplog):
    lookup = SimulatedLookup()
    dev = lookup.add_device()
    mio = MobileIO.create("HEBI", "mobileIO", lookup)
    assert mio.update()
    dev.press(5)
    dev.move_axis(2, 0.5)
    assert mio.update()
    with caplog.at_level(logging.INFO, logger="mobileio.app"):
        app.log_changes(mio)
    assert "button 5 pressed" in caplog.text
    assert "axis 2 -> 0.500" in caplog.text


def test_run_counts_polls():
    lookup = SimulatedLookup()
    lookup.add_device()
    mio = MobileIO.create("HEBI", "mobileIO", lookup)
    polls, misses = app.run(mio, hz=200, timeout_ms=1, duration=0.05)
    assert polls > 0
    assert misses == 0
