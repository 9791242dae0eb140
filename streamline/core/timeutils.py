from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp; all DateTime columns hold UTC without tzinfo."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
