"""Date-time helpers; the store keeps naive UTC timestamps."""

from datetime import date, datetime, timedelta, timezone


def utc_now(now: datetime | None = None) -> datetime:
    """Return the supplied timestamp (or the current time) as naive UTC."""

    current = now.astimezone(timezone.utc) if now and now.tzinfo else now or datetime.now(timezone.utc)
    return current.replace(tzinfo=None)


def utc_today(now: datetime | None = None) -> date:
    """Return the UTC calendar date for the provided timestamp."""

    return utc_now(now).date()


def retention_cutoff(now: datetime | None, days: int) -> datetime:
    """Return the instant before which records fall outside the retention window."""

    return utc_now(now) - timedelta(days=days)
