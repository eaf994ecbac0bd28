"""UTC datetime utilities."""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def age_on(birth: date, today: date) -> int:
    """Full years elapsed between ``birth`` and ``today``."""
    years = today.year - birth.year
    if (today.month, today.day) < (birth.month, birth.day):
        years -= 1
    return years


def minutes_until(moment: datetime, now: datetime | None = None) -> int:
    """Whole minutes (rounded up, min 1) until ``moment``."""
    now = now or utc_now()
    seconds = (moment - now).total_seconds()
    return max(1, -(-int(seconds) // 60))
