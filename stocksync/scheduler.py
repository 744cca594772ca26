import logging

from celery import current_app
from celery.utils import uuid

from .models import ScheduledChunk

logger = logging.getLogger(__name__)


class ChunkScheduler:
    """
    Hands chunk jobs to Celery as delayed one-shot tasks.

    Every enqueued job is mirrored by a ScheduledChunk row. The row is the
    source of truth for cancellation: a task that fires after its row was
    deleted does nothing.
    """

    def enqueue(self, jobs) -> list:
        from .tasks import process_sync_chunk

        scheduled = []
        for job in jobs:
            # the row is complete before dispatch; a worker may claim it immediately
            task_id = uuid()
            row = ScheduledChunk.objects.create(
                run_id=job.run_id,
                chunk_index=job.chunk_index,
                item_ids=list(job.item_ids),
                scheduled_at=job.scheduled_at,
                task_id=task_id,
            )
            process_sync_chunk.apply_async(
                kwargs={
                    'run_id': job.run_id,
                    'chunk_index': job.chunk_index,
                    'item_ids': list(job.item_ids),
                },
                countdown=job.delay_seconds,
                task_id=task_id,
            )
            scheduled.append(row)

            logger.debug(
                "Scheduled chunk %d (%d items) for processing at %s.",
                job.chunk_index, len(job.item_ids), job.scheduled_at.strftime('%Y-%m-%d %H:%M:%S'),
            )
        return scheduled

    def pending(self, run_id=None):
        queryset = ScheduledChunk.objects.all()
        if run_id is not None:
            queryset = queryset.filter(run_id=run_id)
        return queryset

    def has_pending(self, run_id=None) -> bool:
        return self.pending(run_id).exists()

    def claim(self, run_id: str, chunk_index: int) -> bool:
        """Remove the job's row before it executes; False if it was cancelled."""
        deleted, _ = ScheduledChunk.objects.filter(run_id=run_id, chunk_index=chunk_index).delete()
        return deleted > 0

    def cancel_all(self, run_id=None) -> int:
        """
        Drop pending chunk jobs, of every run unless `run_id` is given.

        Revocation is best effort; a task already running is not interrupted.
        """
        queryset = self.pending(run_id)
        task_ids = [task_id for task_id in queryset.values_list('task_id', flat=True) if task_id]
        count, _ = queryset.delete()

        if task_ids:
            try:
                current_app.control.revoke(task_ids)
            except Exception as exc:
                logger.warning("Could not revoke %d chunk tasks: %s", len(task_ids), exc)

        logger.debug("Cleared %d pending chunk jobs.", count)
        return count
