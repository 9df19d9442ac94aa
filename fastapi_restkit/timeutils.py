"""Time helpers for TTL handling."""

from datetime import datetime
from datetime import timedelta
from datetime import timezone
from typing import Any
from typing import Optional

from fastapi_restkit.exceptions import InvalidTTLError


def ttl_to_seconds(ttl: Any) -> Optional[float]:
    """Normalize a time-to-live into seconds.

    Args:
        ttl: Seconds as an int, a ``timedelta``, or None

    Returns:
        The TTL in seconds, or None when no TTL was given

    Raises:
        InvalidTTLError: If the TTL is negative or of an unsupported type
    """
    if ttl is None:
        return None

    # bool is an int subclass; True would silently mean one second
    if isinstance(ttl, bool):
        msg = f"TTL must be seconds or a timedelta, got {ttl!r}"
        raise InvalidTTLError(msg)

    if isinstance(ttl, timedelta):
        seconds = ttl.total_seconds()
    elif isinstance(ttl, (int, float)):
        seconds = float(ttl)
    else:
        msg = f"TTL must be seconds or a timedelta, got {type(ttl).__name__}"
        raise InvalidTTLError(msg)

    if seconds < 0:
        msg = f"TTL must not be negative, got {seconds}"
        raise InvalidTTLError(msg)

    return seconds


def seconds_until(target: datetime, now: Optional[datetime] = None) -> int:
    """Seconds from ``now`` until ``target``, truncated to zero for past instants.

    Naive datetimes are interpreted in local time, as ``datetime.now()`` does.
    """
    if now is None:
        now = datetime.now(timezone.utc) if target.tzinfo else datetime.now()
    elif (now.tzinfo is None) != (target.tzinfo is None):
        now = now.astimezone() if target.tzinfo else now.astimezone().replace(tzinfo=None)

    return max(0, int((target - now).total_seconds()))


def expires_to_seconds(expires: Any) -> int:
    """Convert an endpoint cache expiry into whole, non-negative seconds.

    Args:
        expires: Seconds, a ``timedelta``, or a target ``datetime``

    Raises:
        InvalidTTLError: If the value cannot be interpreted
    """
    if isinstance(expires, datetime):
        return seconds_until(expires)

    seconds = ttl_to_seconds(expires)
    if seconds is None:
        msg = "Cache expiry must not be None"
        raise InvalidTTLError(msg)

    return int(seconds)
