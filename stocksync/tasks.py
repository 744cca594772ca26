import logging

from celery import shared_task

from .controller import RunController
from .executor import SyncExecutor
from .scheduler import ChunkScheduler

logger = logging.getLogger(__name__)


@shared_task(bind=True, name='stocksync.start_scheduled_sync')
def start_scheduled_sync_task(self):
    """Daily entry point fired by Celery beat at local midnight."""
    started = RunController().start_scheduled_run()
    return {'started': started}


@shared_task(bind=True, name='stocksync.process_sync_chunk')
def process_sync_chunk(self, run_id, chunk_index, item_ids):
    """
    Process one scheduled chunk of a stock sync run.

    The chunk's ScheduledChunk row is claimed first; if it is gone the run was
    cancelled or reset and the task exits without touching anything. Failures
    are recorded by the executor, never retried here.
    """
    if not ChunkScheduler().claim(run_id, chunk_index):
        logger.info("Chunk %d of run %s was cancelled – skipping.", chunk_index, run_id)
        return None

    result = SyncExecutor().execute_chunk(chunk_index, item_ids, run_id=run_id)
    return result.as_dict()
