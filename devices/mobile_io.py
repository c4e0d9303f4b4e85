"""Mobile IO controller wrapper

Polls a single-member group for feedback, keeps the current and previous
button/axis snapshots for edge detection, and sends typed UI commands back to
the device. Axis and button numbers are one-indexed to match the screen.

Button edges are computed from the two latest polls only, so a press and
release that both happen between two update() calls are not visible.
"""
import logging
import math

from core.group import DEFAULT_TIMEOUT_MS, get_default_lookup
from core.state import (
    NUM_AXES,
    NUM_BUTTONS,
    ButtonMode,
    ButtonTransition,
    Color,
    MobileCommand,
    MobileFeedback,
    StateSnapshot,
)

LOG = logging.getLogger("mobileio.device")


class MobileIO:
    """Wrapper around a mobile IO device used as a robot controller.

    The group is shared: other code may hold and use the same group, and the
    wrapper never closes it. No locking is done here; drive update() and the
    setters from one thread.
    """

    NUM_BUTTONS = NUM_BUTTONS
    NUM_AXES = NUM_AXES

    def __init__(self, group):
        if group.size() != 1:
            raise ValueError(f"MobileIO needs a group of exactly one device, got {group.size()}")
        self._group = group
        self._current = StateSnapshot()
        self._previous = StateSnapshot()
        self._last_feedback = MobileFeedback()

    @classmethod
    def create(cls, family: str, name: str, lookup=None, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        """Look up the named device and wrap it; returns None if it can't be found."""
        if lookup is None:
            lookup = get_default_lookup()
        if lookup is None:
            LOG.warning("No lookup available to find mobile IO %s/%s", family, name)
            return None
        group = lookup.get_group_from_names(family, name, timeout_ms)
        if group is None:
            LOG.warning("Mobile IO %s/%s not found", family, name)
            return None
        if group.size() != 1:
            LOG.warning("Lookup for %s/%s returned %d devices, expected 1", family, name, group.size())
            return None
        LOG.info("Connected to mobile IO %s/%s", family, name)
        return cls(group)

    @property
    def group(self):
        return self._group

    @property
    def current(self) -> StateSnapshot:
        return self._current.copy()

    @property
    def previous(self) -> StateSnapshot:
        return self._previous.copy()

    # ------------------------------------------------------------------
    # Feedback

    def update(self, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Poll once. Returns False (state untouched) if no feedback arrived in time."""
        group_fbk = self._group.request_feedback(timeout_ms)
        if not group_fbk:
            LOG.debug("no feedback within %d ms", timeout_ms)
            return False
        fbk = group_fbk[0]

        # Parse into a copy so a bad value leaves both snapshots as they were.
        # Channels missing from this feedback keep their last-known value.
        new = self._current.copy()
        for i in range(NUM_BUTTONS):
            if i + 1 in fbk.digital:
                new.buttons[i] = bool(fbk.digital[i + 1])
        for i in range(NUM_AXES):
            if i + 1 in fbk.analog:
                new.axes[i] = float(fbk.analog[i + 1])
        self._previous, self._current = self._current, new
        self._last_feedback = fbk
        return True

    def get_axis(self, axis: int) -> float:
        return self._current.axes[self._axis_index(axis)]

    def get_button(self, button: int) -> bool:
        return self._current.buttons[self._button_index(button)]

    def get_button_diff(self, button: int) -> ButtonTransition:
        """Edge between the previous and current poll for this button."""
        idx = self._button_index(button)
        return ButtonTransition.between(self._previous.buttons[idx], self._current.buttons[idx])

    def get_axis_diff(self, axis: int) -> float:
        idx = self._axis_index(axis)
        return self._current.axes[idx] - self._previous.axes[idx]

    def get_last_feedback(self) -> MobileFeedback:
        return self._last_feedback

    def get_ar_position(self):
        return self._last_feedback.ar_position

    def get_ar_orientation(self):
        return self._last_feedback.ar_orientation

    # ------------------------------------------------------------------
    # Outputs
    #
    # With acknowledge_send a False return is ambiguous: the send may have
    # failed, or the acknowledgment may have been lost after delivery. All
    # of these are safe to repeat.

    def reset_ui(self, acknowledge_send: bool = True) -> bool:
        return self._send(MobileCommand(reset_ui=True), acknowledge_send)

    def set_axis_snap(self, axis: int, snap_to: float, acknowledge_send: bool = True) -> bool:
        """Make the axis spring back to snap_to when released; NaN disables snapping."""
        self._axis_index(axis)
        return self._send(MobileCommand(axis_snaps={axis: float(snap_to)}), acknowledge_send)

    def disable_axis_snap(self, axis: int, acknowledge_send: bool = True) -> bool:
        return self.set_axis_snap(axis, math.nan, acknowledge_send)

    def set_axis_value(self, axis: int, value: float, acknowledge_send: bool = True) -> bool:
        self._axis_index(axis)
        return self._send(MobileCommand(axis_values={axis: float(value)}), acknowledge_send)

    def set_axis_label(self, axis: int, label: str, acknowledge_send: bool = True) -> bool:
        self._axis_index(axis)
        return self._send(MobileCommand(axis_labels={axis: label}), acknowledge_send)

    def set_button_mode(self, button: int, mode, acknowledge_send: bool = True) -> bool:
        self._button_index(button)
        return self._send(MobileCommand(button_modes={button: ButtonMode.parse(mode)}), acknowledge_send)

    def set_button_led(self, button: int, on: bool, acknowledge_send: bool = True) -> bool:
        self._button_index(button)
        return self._send(MobileCommand(button_leds={button: bool(on)}), acknowledge_send)

    def set_button_label(self, button: int, label: str, acknowledge_send: bool = True) -> bool:
        self._button_index(button)
        return self._send(MobileCommand(button_labels={button: label}), acknowledge_send)

    def set_led_color(self, r: int, g: int, b: int, acknowledge_send: bool = True) -> bool:
        return self._send(MobileCommand(led_color=Color(r, g, b)), acknowledge_send)

    def append_text(self, message: str, acknowledge_send: bool = True) -> bool:
        return self._send(MobileCommand(append_text=message), acknowledge_send)

    def clear_text(self, acknowledge_send: bool = True) -> bool:
        return self._send(MobileCommand(clear_text=True), acknowledge_send)

    # ------------------------------------------------------------------
    # Layout transfer

    def send_layout(self, layout_file, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Send a layout file (JSON) to the device, requesting acknowledgment.

        Returns False without sending anything if the file can't be read.
        Otherwise False means delivery wasn't confirmed, which may be a send
        error or a dropped acknowledgment after a successful transmission.
        """
        try:
            with open(layout_file, "rb") as f:
                buffer = f.read()
        except OSError as e:
            LOG.warning("Could not read layout file %s: %s", layout_file, e)
            return False
        return self.send_layout_buffer(buffer, timeout_ms)

    def send_layout_buffer(self, layout_buffer, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Send a layout from a str or bytes buffer, requesting acknowledgment.

        The buffer is passed through as-is; it is not parsed here.
        """
        if isinstance(layout_buffer, str):
            layout_buffer = layout_buffer.encode("utf-8")
        cmd = MobileCommand(layout=bytes(layout_buffer))
        return self._send(cmd, True, timeout_ms)

    # ------------------------------------------------------------------

    def _send(self, cmd: MobileCommand, acknowledge: bool, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        LOG.debug("send %s (ack=%s)", sorted(cmd.fields()), acknowledge)
        if acknowledge:
            ok = self._group.send_command(cmd, acknowledge=True, timeout_ms=timeout_ms)
            if not ok:
                LOG.debug("no acknowledgment within %d ms for %s", timeout_ms, sorted(cmd.fields()))
        else:
            ok = self._group.send_command(cmd, acknowledge=False)
            if not ok:
                LOG.debug("command not accepted for transmission: %s", sorted(cmd.fields()))
        return bool(ok)

    @staticmethod
    def _axis_index(axis: int) -> int:
        if not _is_index(axis) or not 1 <= axis <= NUM_AXES:
            raise IndexError(f"axis {axis!r} out of range 1..{NUM_AXES}")
        return axis - 1

    @staticmethod
    def _button_index(button: int) -> int:
        if not _is_index(button) or not 1 <= button <= NUM_BUTTONS:
            raise IndexError(f"button {button!r} out of range 1..{NUM_BUTTONS}")
        return button - 1


def _is_index(n) -> bool:
    return isinstance(n, int) and not isinstance(n, bool)
