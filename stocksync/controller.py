import logging
import uuid

from django.conf import settings

from .catalog import list_syncable_item_ids
from .erp_client import check_configuration
from .executor import SyncExecutor
from .planner import plan
from .run_state import RunStateStore
from .scheduler import ChunkScheduler
from .signals import sync_run_started, sync_run_starting

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10
DEFAULT_CHUNK_INTERVAL_MINUTES = 5


def _positive_int(value, default: int) -> int:
    if value is None:
        return default
    return max(1, int(value))


class RunController:
    """
    Starts, cancels and reports on stock sync runs.

    A run goes idle -> in_progress -> completed; only `cancel` returns an
    in-progress run to idle.
    """

    def __init__(self, chunk_size=None, chunk_interval_minutes=None, state_store=None,
                 scheduler=None, executor=None, item_filters=None):
        self.chunk_size = _positive_int(
            chunk_size, getattr(settings, 'STOCK_SYNC_CHUNK_SIZE', DEFAULT_CHUNK_SIZE),
        )
        self.chunk_interval_minutes = _positive_int(
            chunk_interval_minutes,
            getattr(settings, 'STOCK_SYNC_CHUNK_INTERVAL_MINUTES', DEFAULT_CHUNK_INTERVAL_MINUTES),
        )
        self.state_store = state_store or RunStateStore()
        self.scheduler = scheduler or ChunkScheduler()
        self.executor = executor or SyncExecutor(state_store=self.state_store)
        self.item_filters = item_filters

    def start_scheduled_run(self) -> bool:
        logger.info("Starting scheduled stock sync.")
        return self._start_run(blocking=False)

    def start_manual_run(self, blocking: bool = False) -> bool:
        logger.info("Manually triggering stock sync (blocking=%s).", blocking)
        return self._start_run(blocking=blocking)

    def _start_run(self, blocking: bool) -> bool:
        current = self.state_store.get()
        if current is not None and current.is_in_progress:
            logger.warning("Cannot start sync: run %s is already in progress.", current.run_id)
            return False

        check_configuration()

        item_ids = list_syncable_item_ids(self.item_filters)
        if not item_ids:
            logger.info("No catalog items found for syncing.")
            return True

        run_id = uuid.uuid4().hex
        jobs = plan(item_ids, self.chunk_size, self.chunk_interval_minutes, run_id=run_id)
        sync_run_starting.send(
            sender=self.__class__, run_id=run_id,
            total_items=len(item_ids), total_chunks=len(jobs),
        )
        self.reset()
        self.state_store.init(len(item_ids), len(jobs), run_id)

        logger.info(
            "Found %d items to sync, divided into %d chunks of %d items each.",
            len(item_ids), len(jobs), self.chunk_size,
        )
        sync_run_started.send(
            sender=self.__class__, run_id=run_id,
            total_items=len(item_ids), total_chunks=len(jobs),
        )

        if blocking:
            for job in jobs:
                self.executor.execute_chunk(job.chunk_index, job.item_ids, run_id=run_id)
            logger.info("Processed %d chunks immediately.", len(jobs))
        else:
            self.scheduler.enqueue(jobs)
            logger.info(
                "Scheduled %d chunks for processing with %d minute intervals.",
                len(jobs), self.chunk_interval_minutes,
            )
        return True

    def reset(self):
        """Forget the current run and every chunk job still waiting to fire."""
        self.scheduler.cancel_all()
        self.state_store.reset()
        logger.debug("Cleared sync queue and run state.")

    def cancel(self):
        state = self.state_store.get()
        self.reset()
        if state is not None:
            logger.info("Cancelled sync run %s at chunk %d/%d.", state.run_id, state.current_chunk, state.total_chunks)

    def unschedule_all(self):
        """Cleanup for when the integration is switched off."""
        self.reset()
        logger.info("Unscheduled all stock sync jobs.")

    def get_sync_status(self) -> dict:
        state = self.state_store.get()
        if state is None:
            return {'status': 'idle'}
        status = state.as_dict()
        status['pending_chunks'] = self.scheduler.pending(state.run_id).count()
        return status
