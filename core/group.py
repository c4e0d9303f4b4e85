"""Transport abstractions: a feedback/command group and the lookup that resolves one.

Concrete transports implement these; MobileIO only talks to the interfaces.
"""
import abc
import logging

LOG = logging.getLogger("mobileio.group")

DEFAULT_TIMEOUT_MS = 500


class Group(abc.ABC):
    """One or more devices addressed as a single feedback/command target."""

    @abc.abstractmethod
    def size(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def request_feedback(self, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        """Block up to timeout_ms for one snapshot per member.

        Returns a list of MobileFeedback, or None when nothing arrived in time.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def send_command(self, command, acknowledge: bool = False,
                     timeout_ms: int = DEFAULT_TIMEOUT_MS) -> bool:
        """Send a command to every member.

        Without acknowledge, True means the command was accepted for
        transmission. With acknowledge, True means every member acknowledged
        within timeout_ms; False does not say whether the command was sent.
        """
        raise NotImplementedError


class Lookup(abc.ABC):
    @abc.abstractmethod
    def get_group_from_names(self, family: str, name: str,
                             timeout_ms: int = DEFAULT_TIMEOUT_MS):
        """Return a Group containing the named device, or None if not found."""
        raise NotImplementedError


_default_lookup = None


def set_default_lookup(lookup):
    """Register the lookup used by MobileIO.create when none is passed."""
    global _default_lookup
    _default_lookup = lookup
    LOG.debug("default lookup set to %r", lookup)


def get_default_lookup():
    return _default_lookup
