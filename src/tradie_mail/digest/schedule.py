from __future__ import annotations

from datetime import datetime, time, timedelta
from typing import Optional

from tradie_mail.models import DigestSettings

WEEKLY_INTERVAL = timedelta(days=7)


def parse_time_of_day(value: str) -> time:
    """Parse "HH:MM"; anything unparseable means 09:00."""
    try:
        hours, minutes = value.strip().split(":", 1)
        return time(hour=int(hours), minute=int(minutes))
    except (ValueError, AttributeError):
        return time(hour=9)


def is_digest_due(settings: DigestSettings, now: datetime, last_sent: Optional[datetime] = None) -> bool:
    """
    Whether a scheduled digest should be produced at ``now``.

    ``now`` and ``last_sent`` are compared in the same timezone as given.
    On-demand digests are never due on a schedule.
    """
    if not settings.enabled or settings.frequency == "on-demand":
        return False

    if not settings.include_weekends and now.weekday() >= 5:
        return False

    if now.time() < parse_time_of_day(settings.time_of_day):
        return False

    if last_sent is None:
        return True

    if settings.frequency == "weekly":
        return now - last_sent >= WEEKLY_INTERVAL

    return last_sent.date() < now.date()
