"""In-process mobile IO simulator

Implements the Group/Lookup interfaces against a simulated device so the
wrapper and the CLI can run without hardware or a network transport.
Simulated timeouts return immediately instead of waiting.
"""
import logging
import math
import threading
from collections import deque

from core.group import DEFAULT_TIMEOUT_MS, Group, Lookup
from core.state import NUM_AXES, NUM_BUTTONS, ButtonMode, MobileFeedback

LOG = logging.getLogger("mobileio.sim")


class SimulatedMobileDevice:
    """On-screen state of a mobile IO app.

    press/release/move_axis are what a user does on the screen; apply() is
    what a command does.
    """

    def __init__(self, family="HEBI", name="mobileIO"):
        self.family = family
        self.name = name
        self._lock = threading.Lock()
        self.ar_position = None
        self.ar_orientation = None
        self.battery = 1.0
        self.layout = None
        self._reset()

    def _reset(self):
        self.buttons = [False] * NUM_BUTTONS
        self.axes = [0.0] * NUM_AXES
        self.button_modes = [ButtonMode.MOMENTARY] * NUM_BUTTONS
        self.button_leds = [False] * NUM_BUTTONS
        self.button_labels = [""] * NUM_BUTTONS
        self.axis_labels = [""] * NUM_AXES
        self.axis_snaps = [math.nan] * NUM_AXES
        self.led_color = None
        self.text = ""

    # User side

    def press(self, button: int):
        with self._lock:
            i = button - 1
            if self.button_modes[i] == ButtonMode.TOGGLE:
                self.buttons[i] = not self.buttons[i]
            else:
                self.buttons[i] = True

    def release(self, button: int):
        with self._lock:
            i = button - 1
            if self.button_modes[i] == ButtonMode.MOMENTARY:
                self.buttons[i] = False

    def move_axis(self, axis: int, value: float):
        with self._lock:
            self.axes[axis - 1] = float(value)

    def release_axis(self, axis: int):
        """Let go of a slider; it springs to its snap value unless snapping is off."""
        with self._lock:
            snap = self.axis_snaps[axis - 1]
            if not math.isnan(snap):
                self.axes[axis - 1] = snap

    def set_ar_pose(self, position, orientation):
        with self._lock:
            self.ar_position = tuple(position)
            self.ar_orientation = tuple(orientation)

    # Device side

    def feedback(self) -> MobileFeedback:
        with self._lock:
            return MobileFeedback(
                digital={i + 1: v for i, v in enumerate(self.buttons)},
                analog={i + 1: v for i, v in enumerate(self.axes)},
                ar_position=self.ar_position,
                ar_orientation=self.ar_orientation,
                battery=self.battery,
            )

    def apply(self, cmd):
        with self._lock:
            if cmd.reset_ui:
                self._reset()
            for n, v in cmd.axis_values.items():
                self.axes[n - 1] = v
            for n, v in cmd.axis_snaps.items():
                self.axis_snaps[n - 1] = v
            for n, v in cmd.axis_labels.items():
                self.axis_labels[n - 1] = v
            for n, v in cmd.button_modes.items():
                self.button_modes[n - 1] = v
            for n, v in cmd.button_leds.items():
                self.button_leds[n - 1] = v
            for n, v in cmd.button_labels.items():
                self.button_labels[n - 1] = v
            if cmd.led_color is not None:
                self.led_color = cmd.led_color
            if cmd.clear_text:
                self.text = ""
            if cmd.append_text is not None:
                self.text += cmd.append_text
            if cmd.layout is not None:
                self.layout = cmd.layout


class SimulatedGroup(Group):
    """Single-device group backed by a SimulatedMobileDevice.

    online=False makes feedback requests time out. drop_acks=True delivers
    commands but loses every acknowledgment. fail_sends=True rejects commands
    before they reach the device.
    """

    def __init__(self, device: SimulatedMobileDevice):
        self.device = device
        self.online = True
        self.drop_acks = False
        self.fail_sends = False
        self.sent = []  # (command, acknowledge) for every accepted command
        self.send_timeouts = []  # timeout_ms of every send_command call, accepted or not
        self.feedback_timeouts = []  # timeout_ms of every request_feedback call
        self._scripted = deque()
        self._lock = threading.Lock()

    def size(self) -> int:
        return 1

    def queue_feedback(self, fbk: MobileFeedback):
        """Return fbk from the next request instead of the device's own state."""
        with self._lock:
            self._scripted.append(fbk)

    def request_feedback(self, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        self.feedback_timeouts.append(timeout_ms)
        if not self.online:
            LOG.debug("%s offline, feedback request timed out", self.device.name)
            return None
        with self._lock:
            if self._scripted:
                return [self._scripted.popleft()]
        return [self.device.feedback()]

    def send_command(self, command, acknowledge: bool = False,
                     timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        self.send_timeouts.append(timeout_ms)
        if self.fail_sends or not self.online:
            LOG.debug("%s dropped command %s", self.device.name, sorted(command.fields()))
            return False
        with self._lock:
            self.sent.append((command, acknowledge))
        self.device.apply(command)
        if acknowledge and self.drop_acks:
            LOG.debug("%s lost acknowledgment for %s", self.device.name, sorted(command.fields()))
            return False
        return True


class SimulatedLookup(Lookup):
    def __init__(self):
        self._devices = {}

    def add_device(self, family="HEBI", name="mobileIO") -> SimulatedMobileDevice:
        device = SimulatedMobileDevice(family, name)
        self._devices[(family, name)] = device
        LOG.info("simulated mobile IO %s/%s added", family, name)
        return device

    def get_group_from_names(self, family: str, name: str,
                             timeout_ms: int = DEFAULT_TIMEOUT_MS):
        device = self._devices.get((family, name))
        if device is None:
            return None
        return SimulatedGroup(device)
