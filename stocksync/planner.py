from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone


@dataclass(frozen=True)
class ChunkJob:
    chunk_index: int
    item_ids: tuple
    scheduled_at: datetime
    delay_seconds: int = 0
    run_id: str = ''


def chunked(items: list, size: int) -> list:
    """Split `items` into consecutive lists of at most `size` elements."""
    return [items[i:i + size] for i in range(0, len(items), size)]


def plan(item_ids, chunk_size: int, interval_minutes: int, run_id: str = '',
         now: Optional[datetime] = None) -> list:
    """
    Partition item ids into ChunkJobs on a fixed-rate schedule.

    Chunk 0 runs immediately; chunk i runs i * interval_minutes after `now`.
    The schedule does not adapt to how long a chunk takes, so slow chunks can
    overlap the next one.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be >= 1, got {chunk_size}.")
    if interval_minutes < 1:
        raise ValueError(f"interval_minutes must be >= 1, got {interval_minutes}.")

    now = now or timezone.now()
    jobs = []
    for index, chunk in enumerate(chunked(list(item_ids), chunk_size)):
        delay = index * interval_minutes * 60
        jobs.append(ChunkJob(
            chunk_index=index,
            item_ids=tuple(chunk),
            scheduled_at=now + timedelta(seconds=delay),
            delay_seconds=delay,
            run_id=run_id,
        ))
    return jobs
