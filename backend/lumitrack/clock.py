"""Source of "now" for every expiry decision."""
from collections.abc import Callable
from datetime import datetime, timezone

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how the schema stores DateTime columns."""

    return datetime.now(timezone.utc).replace(tzinfo=None)
