import logging
from datetime import datetime, time, timedelta, timezone as dt_timezone
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from celery.schedules import crontab
from django.conf import settings

logger = logging.getLogger(__name__)

DAILY_TASK_NAME = 'stocksync.start_scheduled_sync'


def timezone_name_from_offset(offset_hours: float) -> str:
    """
    Map a whole-hour UTC offset to an Etc/GMT zone name.

    Etc/GMT names carry the inverted sign: UTC+2 is 'Etc/GMT-2'. Fractional
    offsets have no Etc zone and are truncated to the hour.
    """
    hours = int(offset_hours)
    if hours == 0:
        return 'Etc/GMT'
    sign = '-' if hours > 0 else '+'
    return f"Etc/GMT{sign}{abs(hours)}"


def resolve_timezone(name: Optional[str] = None, utc_offset_hours: float = 0) -> ZoneInfo:
    """Return the host's local zone, falling back to UTC for unknown names."""
    if not name:
        name = timezone_name_from_offset(utc_offset_hours)
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        logger.warning("Invalid timezone %r, using UTC: %s", name, exc)
        return ZoneInfo('UTC')


def configured_timezone() -> ZoneInfo:
    return resolve_timezone(
        getattr(settings, 'STOCK_SYNC_TIMEZONE', ''),
        getattr(settings, 'STOCK_SYNC_UTC_OFFSET', 0),
    )


def next_local_midnight(now: datetime, tz: ZoneInfo) -> datetime:
    """Next midnight in `tz` strictly after `now`, as an aware UTC datetime."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=dt_timezone.utc)
    local_now = now.astimezone(tz)
    tomorrow = local_now.date() + timedelta(days=1)
    midnight = datetime.combine(tomorrow, time.min, tzinfo=tz)
    return midnight.astimezone(dt_timezone.utc)


def daily_beat_entry(now: Optional[datetime] = None) -> dict:
    """Celery beat entry firing the scheduled stock sync at local midnight."""
    tz = configured_timezone()
    now = now or datetime.now(dt_timezone.utc)
    logger.info(
        "Scheduled daily stock sync at midnight (%s timezone). Next run: %s UTC.",
        tz.key, next_local_midnight(now, tz).strftime('%Y-%m-%d %H:%M:%S'),
    )
    return {
        'task': DAILY_TASK_NAME,
        'schedule': crontab(minute=0, hour=0),
    }
