import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from .models import SyncRunState
from .signals import sync_run_completed

logger = logging.getLogger(__name__)


class RunStateStore:
    """
    Durable record of the current/last sync run.

    All writes after `init` go through `apply_chunk_result`, which locks the
    row so chunk workers running in parallel cannot lose increments.
    """

    key = SyncRunState.SINGLETON_KEY

    def get(self) -> Optional[SyncRunState]:
        return SyncRunState.objects.filter(key=self.key).first()

    def init(self, total_items: int, total_chunks: int, run_id: str) -> SyncRunState:
        with transaction.atomic():
            SyncRunState.objects.filter(key=self.key).delete()
            state = SyncRunState.objects.create(
                key=self.key,
                run_id=run_id,
                start_time=timezone.now(),
                total_items=total_items,
                total_chunks=total_chunks,
            )
        logger.info(
            "Initialized sync run %s: %d items in %d chunks.",
            run_id, total_items, total_chunks,
        )
        return state

    def apply_chunk_result(self, chunk_index: int, item_count: int, success_count: int,
                           failure_count: int, run_id: Optional[str] = None) -> Optional[SyncRunState]:
        """
        Fold one chunk's outcome into the run totals.

        Returns the updated state, or None when there is no run to update. When
        `run_id` is given and another run has replaced it, the result is dropped
        and the current state is returned unchanged.
        """
        if success_count < 0 or failure_count < 0 or success_count + failure_count != item_count:
            raise ValueError(
                f"Chunk {chunk_index}: success ({success_count}) + failure ({failure_count}) "
                f"must equal item count ({item_count})."
            )

        with transaction.atomic():
            state = SyncRunState.objects.select_for_update().filter(key=self.key).first()
            if state is None:
                logger.warning("No sync run found; dropping result of chunk %d.", chunk_index)
                return None
            if run_id is not None and state.run_id != run_id:
                logger.warning(
                    "Chunk %d belongs to run %s but the active run is %s; dropping its result.",
                    chunk_index, run_id, state.run_id,
                )
                return state
            if not state.is_in_progress:
                logger.warning(
                    "Sync run %s is %s; dropping result of chunk %d.",
                    state.run_id, state.status, chunk_index,
                )
                return state

            state.current_chunk += 1
            state.processed_items += item_count
            state.successful_updates += success_count
            state.failed_updates += failure_count

            completed = state.current_chunk >= state.total_chunks
            if completed:
                state.status = SyncRunState.STATUS_COMPLETED
                state.end_time = timezone.now()
            state.save()

            if completed:
                transaction.on_commit(lambda: self._announce_completion(state))

        logger.info(
            "Applied chunk %d. Progress: %d/%d chunks (%d%%).",
            chunk_index, state.current_chunk, state.total_chunks,
            round(state.current_chunk / state.total_chunks * 100) if state.total_chunks else 100,
        )
        return state

    def reset(self):
        deleted, _ = SyncRunState.objects.filter(key=self.key).delete()
        if deleted:
            logger.debug("Deleted sync run state.")

    def _announce_completion(self, state: SyncRunState):
        minutes = round((state.end_time - state.start_time).total_seconds() / 60)
        logger.info(
            "Stock sync completed. Total items: %d, Updated: %d, Errors: %d, Duration: %d minutes.",
            state.processed_items, state.successful_updates, state.failed_updates, minutes,
        )
        sync_run_completed.send(sender=self.__class__, state=state)
