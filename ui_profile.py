"""UI profiles: load a YAML description of the mobile IO screen and push it to a device"""
import logging
import math
import os

import yaml

from core.group import DEFAULT_TIMEOUT_MS
from core.state import NUM_AXES, NUM_BUTTONS, ButtonMode, Color

LOG = logging.getLogger("mobileio.profile")


class UIProfile:
    def __init__(self, profile: dict, base_dir: str = "."):
        self.profile = profile or {}
        self.base_dir = base_dir
        self._validate()

    @classmethod
    def load_profile(cls, path: str):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(data, base_dir=os.path.dirname(os.path.abspath(path)))

    def _validate(self):
        if not isinstance(self.profile, dict):
            raise ValueError("profile must be a mapping")
        for section, count in (("buttons", NUM_BUTTONS), ("axes", NUM_AXES)):
            entries = self.profile.get(section) or {}
            if not isinstance(entries, dict):
                raise ValueError(f"'{section}' must map numbers to settings")
            for n, props in entries.items():
                if not isinstance(n, int) or isinstance(n, bool):
                    raise ValueError(f"{section} key {n!r} is not a number")
                if not 1 <= n <= count:
                    raise ValueError(f"{section} key {n} out of range 1..{count}")
                if props is not None and not isinstance(props, dict):
                    raise ValueError(f"{section}.{n} must be a mapping")
        for n, props in (self.profile.get("buttons") or {}).items():
            if props and "mode" in props:
                ButtonMode.parse(props["mode"])
        for n, props in (self.profile.get("axes") or {}).items():
            props = props or {}
            if "value" in props:
                _check_number(f"axes.{n}.value", props["value"])
            if props.get("snap") is not None:
                _check_number(f"axes.{n}.snap", props["snap"])
        if "timeout_ms" in self.profile:
            timeout = self.profile["timeout_ms"]
            if not isinstance(timeout, int) or isinstance(timeout, bool) or timeout <= 0:
                raise ValueError(f"timeout_ms must be a positive integer, got {timeout!r}")
        color = self.profile.get("led_color")
        if color is not None:
            if not isinstance(color, (list, tuple)) or len(color) != 3:
                raise ValueError("led_color must be [r, g, b]")
            Color(*color)

    @property
    def family(self):
        return (self.profile.get("device") or {}).get("family")

    @property
    def name(self):
        return (self.profile.get("device") or {}).get("name")

    @property
    def acknowledge(self) -> bool:
        return bool(self.profile.get("acknowledge", True))

    @property
    def timeout_ms(self) -> int:
        return int(self.profile.get("timeout_ms", DEFAULT_TIMEOUT_MS))

    def layout_path(self):
        layout = self.profile.get("layout")
        if not layout:
            return None
        return os.path.join(self.base_dir, layout)

    def apply(self, mobile_io) -> bool:
        """Send every configured setting; True only if all of them were confirmed.

        A step that isn't confirmed is logged and the rest still go out.
        """
        ack = self.acknowledge
        steps = []

        if self.profile.get("reset_ui"):
            steps.append(("reset_ui", lambda: mobile_io.reset_ui(ack)))

        layout = self.layout_path()
        if layout:
            steps.append((f"layout {layout}", lambda: mobile_io.send_layout(layout, self.timeout_ms)))

        for n, props in sorted((self.profile.get("buttons") or {}).items()):
            props = props or {}
            if "mode" in props:
                steps.append((f"button {n} mode", _bind(mobile_io.set_button_mode, n, ButtonMode.parse(props["mode"]), ack)))
            if "label" in props:
                steps.append((f"button {n} label", _bind(mobile_io.set_button_label, n, str(props["label"]), ack)))
            if "led" in props:
                steps.append((f"button {n} led", _bind(mobile_io.set_button_led, n, bool(props["led"]), ack)))

        for n, props in sorted((self.profile.get("axes") or {}).items()):
            props = props or {}
            if "snap" in props:
                snap = props["snap"]
                snap = math.nan if snap is None else float(snap)
                steps.append((f"axis {n} snap", _bind(mobile_io.set_axis_snap, n, snap, ack)))
            if "value" in props:
                steps.append((f"axis {n} value", _bind(mobile_io.set_axis_value, n, float(props["value"]), ack)))
            if "label" in props:
                steps.append((f"axis {n} label", _bind(mobile_io.set_axis_label, n, str(props["label"]), ack)))

        color = self.profile.get("led_color")
        if color is not None:
            steps.append(("led color", _bind(mobile_io.set_led_color, *color, ack)))

        text = self.profile.get("text")
        if text is not None:
            steps.append(("clear text", lambda: mobile_io.clear_text(ack)))
            steps.append(("text", lambda: mobile_io.append_text(str(text), ack)))

        all_ok = True
        for desc, send in steps:
            if not send():
                LOG.warning("profile step not confirmed: %s", desc)
                all_ok = False
            else:
                LOG.debug("profile step ok: %s", desc)
        LOG.info("applied profile (%d steps, %s)", len(steps), "all confirmed" if all_ok else "some unconfirmed")
        return all_ok


def _bind(fn, *args):
    return lambda: fn(*args)


def _check_number(key, value):
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ValueError(f"{key} must be a number, got {value!r}")
