"""State models and lightweight DTOs for the mobile IO device"""
import enum
import math
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

NUM_BUTTONS = 8
NUM_AXES = NUM_BUTTONS


class ButtonMode(enum.IntEnum):
    MOMENTARY = 0
    TOGGLE = 1

    @classmethod
    def parse(cls, value):
        """Accept a ButtonMode, its int value, or a case-insensitive name ('toggle')."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(f"unknown button mode: {value!r}") from None
        return cls(value)


class ButtonTransition(enum.IntEnum):
    TO_OFF = -1     # edge: on last poll, off now
    UNCHANGED = 0
    TO_ON = 1       # edge: off last poll, on now

    @classmethod
    def between(cls, previous: bool, current: bool) -> "ButtonTransition":
        if previous == current:
            return cls.UNCHANGED
        return cls.TO_ON if current else cls.TO_OFF


@dataclass(frozen=True)
class Color:
    r: int
    g: int
    b: int
    a: int = 255

    def __post_init__(self):
        for name in ("r", "g", "b", "a"):
            v = getattr(self, name)
            if not 0 <= int(v) <= 255:
                raise ValueError(f"color channel {name}={v} outside 0..255")


@dataclass
class StateSnapshot:
    """Axis values and button bits captured at one polling instant.

    Storage is zero-indexed; the one-indexed mapping lives in MobileIO.
    """
    axes: list = field(default_factory=lambda: [0.0] * NUM_AXES)
    buttons: list = field(default_factory=lambda: [False] * NUM_BUTTONS)

    def copy(self) -> "StateSnapshot":
        return StateSnapshot(axes=list(self.axes), buttons=list(self.buttons))

    def __eq__(self, other):
        if not isinstance(other, StateSnapshot):
            return NotImplemented
        if self.buttons != other.buttons:
            return False
        # NaN compares equal to NaN here so an untouched snapshot equals its copy
        for a, b in zip(self.axes, other.axes):
            if a != b and not (math.isnan(a) and math.isnan(b)):
                return False
        return len(self.axes) == len(other.axes)


@dataclass
class MobileFeedback:
    """One member's feedback. Banks are keyed by one-indexed channel number."""
    digital: Dict[int, bool] = field(default_factory=dict)
    analog: Dict[int, float] = field(default_factory=dict)
    ar_position: Optional[Tuple[float, float, float]] = None
    ar_orientation: Optional[Tuple[float, float, float, float]] = None  # w, x, y, z
    battery: Optional[float] = None


@dataclass
class MobileCommand:
    """Sparse command for a single device; only fields that were set are sent."""
    axis_values: Dict[int, float] = field(default_factory=dict)
    axis_snaps: Dict[int, float] = field(default_factory=dict)  # NaN disables snap
    axis_labels: Dict[int, str] = field(default_factory=dict)
    button_modes: Dict[int, ButtonMode] = field(default_factory=dict)
    button_leds: Dict[int, bool] = field(default_factory=dict)
    button_labels: Dict[int, str] = field(default_factory=dict)
    led_color: Optional[Color] = None
    append_text: Optional[str] = None
    clear_text: bool = False
    reset_ui: bool = False
    layout: Optional[bytes] = None

    def fields(self) -> dict:
        out = {}
        for name, value in vars(self).items():
            if value is None or value is False or value == {}:
                continue
            out[name] = value
        return out
