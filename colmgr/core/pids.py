"""PID parsing and validation."""

import re

from .exceptions import InvalidArgument
from .vocabulary import FEDORA_URI_PREFIX

PID_MAX_LENGTH = 64
PID_PATTERN = re.compile(r"^[A-Za-z0-9.-]+:(?:[A-Za-z0-9\-.~_]|%[0-9A-F]{2})+$")


def validate_pid(pid: str) -> str:
    """Validate a PID and return it normalized.

    Args:
        pid: Persistent identifier, ``namespace:localname``

    Returns:
        The PID with surrounding whitespace removed

    Raises:
        InvalidArgument: If the PID is empty, too long or malformed
    """
    if not isinstance(pid, str):
        raise InvalidArgument("pid", f"expected a string, got {type(pid).__name__}")

    pid = pid.strip()
    if not pid:
        raise InvalidArgument("pid", "empty identifier")
    if len(pid) > PID_MAX_LENGTH:
        raise InvalidArgument("pid", f"{pid!r} exceeds {PID_MAX_LENGTH} characters")
    if not PID_PATTERN.match(pid):
        raise InvalidArgument("pid", f"{pid!r} is not of the form namespace:localname")
    return pid


def is_valid_pid(pid: str) -> bool:
    """Check whether a value is a well-formed PID."""
    try:
        validate_pid(pid)
    except InvalidArgument:
        return False
    return True


def namespace_of(pid: str) -> str:
    """Get the namespace part of a PID."""
    return validate_pid(pid).split(":", 1)[0]


def to_uri(pid: str) -> str:
    """Convert a PID to its ``info:fedora/`` resource URI."""
    return FEDORA_URI_PREFIX + validate_pid(pid)


def from_uri(value: str) -> str:
    """Strip the ``info:fedora/`` prefix from a resource URI if present."""
    if value.startswith(FEDORA_URI_PREFIX):
        return value[len(FEDORA_URI_PREFIX) :]
    return value
