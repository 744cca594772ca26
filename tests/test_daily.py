from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest
from celery.schedules import crontab

from stocksync.daily import (
    DAILY_TASK_NAME,
    configured_timezone,
    daily_beat_entry,
    next_local_midnight,
    resolve_timezone,
    timezone_name_from_offset,
)


class TestTimezoneResolution:
    def test_named_zone(self):
        assert resolve_timezone('Europe/Prague').key == 'Europe/Prague'

    def test_unknown_name_falls_back_to_utc(self):
        assert resolve_timezone('Mars/Olympus_Mons').key == 'UTC'

    @pytest.mark.parametrize('offset, expected', [
        (0, 'Etc/GMT'),
        (2, 'Etc/GMT-2'),
        (-5, 'Etc/GMT+5'),
        (5.5, 'Etc/GMT-5'),
    ])
    def test_offset_to_etc_zone(self, offset, expected):
        assert timezone_name_from_offset(offset) == expected

    def test_blank_name_uses_offset(self):
        assert resolve_timezone('', 3).key == 'Etc/GMT-3'

    def test_configured_timezone_reads_settings(self, settings):
        settings.STOCK_SYNC_TIMEZONE = 'Asia/Jakarta'

        assert configured_timezone().key == 'Asia/Jakarta'


class TestNextLocalMidnight:
    def test_midnight_in_zone_ahead_of_utc(self):
        now = datetime(2026, 3, 10, 20, 0, tzinfo=timezone.utc)

        midnight = next_local_midnight(now, ZoneInfo('Asia/Jakarta'))

        # 20:00 UTC is already 03:00 on the 11th in Jakarta (UTC+7)
        assert midnight == datetime(2026, 3, 11, 17, 0, tzinfo=timezone.utc)

    def test_midnight_in_zone_behind_utc(self):
        now = datetime(2026, 3, 10, 2, 0, tzinfo=timezone.utc)

        midnight = next_local_midnight(now, ZoneInfo('America/New_York'))

        # 02:00 UTC is 22:00 on the 9th in New York (EDT starts on the 8th)
        assert midnight == datetime(2026, 3, 10, 4, 0, tzinfo=timezone.utc)

    def test_exactly_midnight_moves_to_next_day(self):
        now = datetime(2026, 3, 10, 0, 0, tzinfo=timezone.utc)

        assert next_local_midnight(now, ZoneInfo('UTC')) == datetime(2026, 3, 11, tzinfo=timezone.utc)

    def test_naive_now_is_treated_as_utc(self):
        assert next_local_midnight(datetime(2026, 3, 10, 12), ZoneInfo('UTC')) == datetime(
            2026, 3, 11, tzinfo=timezone.utc,
        )


def test_daily_beat_entry_fires_scheduled_sync_at_midnight():
    entry = daily_beat_entry(now=datetime(2026, 3, 10, 12, tzinfo=timezone.utc))

    assert entry['task'] == DAILY_TASK_NAME
    assert entry['schedule'] == crontab(minute=0, hour=0)
