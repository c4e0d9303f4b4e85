"""Entry point for mobileio

Connects to a mobile IO device, optionally pushes a UI profile, then polls it
and logs button edges and axis movement.
"""
import argparse
import logging
import time

from core.group import DEFAULT_TIMEOUT_MS, set_default_lookup
from core.state import ButtonTransition
from devices.mobile_io import MobileIO
from devices.sim import SimulatedLookup
from ui_profile import UIProfile

LOG = logging.getLogger("mobileio.app")

DEFAULT_FAMILY = "HEBI"
DEFAULT_NAME = "mobileIO"
AXIS_EPSILON = 1e-3


def positive_float(text):
    value = float(text)
    if not value > 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {text}")
    return value


def build_parser():
    parser = argparse.ArgumentParser(description="mobileio: mobile IO controller monitor")
    parser.add_argument("--profile", help="YAML UI profile to apply after connecting")
    parser.add_argument("--family", help=f"device family (default: profile or {DEFAULT_FAMILY})")
    parser.add_argument("--name", help=f"device name (default: profile or {DEFAULT_NAME})")
    parser.add_argument("--hz", type=positive_float, default=50, help="poll frequency")
    parser.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS,
                        help="feedback/lookup timeout in ms")
    parser.add_argument("--simulate", action="store_true",
                        help="use an in-process simulated device")
    parser.add_argument("--duration", type=float, default=None,
                        help="stop after this many seconds (default: run until Ctrl+C)")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default: INFO)")
    parser.add_argument("--log-format", default="%(levelname)s:%(name)s:%(message)s",
                        help="Logging format string (default: %(levelname)s:%(name)s:%(message)s)")
    parser.add_argument("--debug-modules", nargs="*", default=[],
                        help="Modules to set to DEBUG level (e.g., 'device', 'sim', 'profile')")
    return parser


def log_changes(mobile_io):
    for n in range(1, MobileIO.NUM_BUTTONS + 1):
        diff = mobile_io.get_button_diff(n)
        if diff == ButtonTransition.TO_ON:
            LOG.info("button %d pressed", n)
        elif diff == ButtonTransition.TO_OFF:
            LOG.info("button %d released", n)
    for n in range(1, MobileIO.NUM_AXES + 1):
        if abs(mobile_io.get_axis_diff(n)) > AXIS_EPSILON:
            LOG.info("axis %d -> %.3f", n, mobile_io.get_axis(n))


def run(mobile_io, hz: float, timeout_ms: int, duration=None):
    period = 1.0 / hz
    deadline = None if duration is None else time.monotonic() + duration
    polls = misses = 0
    while deadline is None or time.monotonic() < deadline:
        start = time.monotonic()
        if mobile_io.update(timeout_ms):
            polls += 1
            log_changes(mobile_io)
        else:
            misses += 1
            LOG.debug("no feedback this cycle")
        remaining = period - (time.monotonic() - start)
        if remaining > 0:
            time.sleep(remaining)
    return polls, misses


def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format=args.log_format)
    for module in args.debug_modules:
        logging.getLogger(f"mobileio.{module}").setLevel(logging.DEBUG)

    profile = UIProfile.load_profile(args.profile) if args.profile else None
    family = args.family or (profile and profile.family) or DEFAULT_FAMILY
    name = args.name or (profile and profile.name) or DEFAULT_NAME

    if args.simulate:
        lookup = SimulatedLookup()
        lookup.add_device(family, name)
        set_default_lookup(lookup)

    mobile_io = MobileIO.create(family, name, timeout_ms=args.timeout_ms)
    if mobile_io is None:
        LOG.error("could not connect to mobile IO %s/%s", family, name)
        return 1

    if profile is not None and not profile.apply(mobile_io):
        LOG.warning("profile applied but not every setting was confirmed")

    try:
        LOG.info("mobileio running, press Ctrl+C to stop")
        polls, misses = run(mobile_io, args.hz, args.timeout_ms, args.duration)
        LOG.info("stopped after %d polls (%d without feedback)", polls, misses)
    except KeyboardInterrupt:
        LOG.info("shutdown requested")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
