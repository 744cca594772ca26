from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from stocksync.models import ScheduledChunk
from stocksync.planner import plan
from stocksync.scheduler import ChunkScheduler

NOW = datetime(2026, 3, 1, 0, 0, tzinfo=timezone.utc)


@pytest.fixture()
def apply_async():
    with patch('stocksync.tasks.process_sync_chunk.apply_async') as mock_apply:
        mock_apply.side_effect = lambda **kwargs: MagicMock(id=kwargs['task_id'])
        yield mock_apply


@pytest.fixture()
def revoke():
    with patch('stocksync.scheduler.current_app.control.revoke') as mock_revoke:
        yield mock_revoke


@pytest.mark.django_db
class TestEnqueue:
    def test_each_job_dispatched_with_its_countdown(self, apply_async):
        jobs = plan(list(range(23)), chunk_size=10, interval_minutes=5, run_id='run-1', now=NOW)

        ChunkScheduler().enqueue(jobs)

        countdowns = [call.kwargs['countdown'] for call in apply_async.call_args_list]
        assert countdowns == [0, 300, 600]
        first_kwargs = apply_async.call_args_list[0].kwargs['kwargs']
        assert first_kwargs == {'run_id': 'run-1', 'chunk_index': 0, 'item_ids': list(range(10))}

    def test_jobs_recorded_with_task_ids(self, apply_async):
        jobs = plan([1, 2, 3], chunk_size=2, interval_minutes=1, run_id='run-1', now=NOW)

        ChunkScheduler().enqueue(jobs)

        rows = list(ScheduledChunk.objects.order_by('chunk_index'))
        assert [row.chunk_index for row in rows] == [0, 1]
        assert [row.item_ids for row in rows] == [[1, 2], [3]]
        dispatched = [call.kwargs['task_id'] for call in apply_async.call_args_list]
        assert [row.task_id for row in rows] == dispatched
        assert all(dispatched)

    def test_chunk_claimed_during_dispatch_does_not_stop_later_chunks(self, apply_async):
        scheduler = ChunkScheduler()

        def run_immediately(**kwargs):
            job = kwargs['kwargs']
            if job['chunk_index'] == 0:
                assert scheduler.claim(job['run_id'], 0) is True
            return MagicMock(id=kwargs['task_id'])

        apply_async.side_effect = run_immediately
        jobs = plan([1, 2, 3], chunk_size=1, interval_minutes=1, run_id='run-1', now=NOW)

        scheduler.enqueue(jobs)

        assert apply_async.call_count == 3
        assert sorted(ScheduledChunk.objects.values_list('chunk_index', flat=True)) == [1, 2]

    def test_has_pending(self, apply_async):
        scheduler = ChunkScheduler()
        assert scheduler.has_pending() is False

        scheduler.enqueue(plan([1], chunk_size=1, interval_minutes=1, run_id='run-1', now=NOW))

        assert scheduler.has_pending() is True
        assert scheduler.has_pending('run-1') is True
        assert scheduler.has_pending('other') is False


@pytest.mark.django_db
class TestCancel:
    def test_cancel_all_removes_every_run(self, apply_async, revoke):
        scheduler = ChunkScheduler()
        scheduler.enqueue(plan([1, 2], chunk_size=1, interval_minutes=1, run_id='run-a', now=NOW))
        scheduler.enqueue(plan([3], chunk_size=1, interval_minutes=1, run_id='run-b', now=NOW))
        task_ids = sorted(ScheduledChunk.objects.values_list('task_id', flat=True))

        removed = scheduler.cancel_all()

        assert removed == 3
        assert not ScheduledChunk.objects.exists()
        revoke.assert_called_once()
        assert sorted(revoke.call_args.args[0]) == task_ids

    def test_cancel_scoped_to_run(self, apply_async, revoke):
        scheduler = ChunkScheduler()
        scheduler.enqueue(plan([1, 2], chunk_size=1, interval_minutes=1, run_id='run-a', now=NOW))
        scheduler.enqueue(plan([3], chunk_size=1, interval_minutes=1, run_id='run-b', now=NOW))

        scheduler.cancel_all(run_id='run-a')

        assert list(ScheduledChunk.objects.values_list('run_id', flat=True)) == ['run-b']

    def test_cancel_with_nothing_pending_does_not_revoke(self, revoke):
        assert ChunkScheduler().cancel_all() == 0
        revoke.assert_not_called()

    def test_revoke_failure_is_tolerated(self, apply_async, revoke):
        revoke.side_effect = ConnectionError('broker down')
        scheduler = ChunkScheduler()
        scheduler.enqueue(plan([1], chunk_size=1, interval_minutes=1, run_id='run-a', now=NOW))

        assert scheduler.cancel_all() == 1
        assert not scheduler.has_pending()


@pytest.mark.django_db
class TestClaim:
    def test_claim_removes_row_once(self, apply_async):
        scheduler = ChunkScheduler()
        scheduler.enqueue(plan([1], chunk_size=1, interval_minutes=1, run_id='run-a', now=NOW))

        assert scheduler.claim('run-a', 0) is True
        assert scheduler.claim('run-a', 0) is False

    def test_claim_of_unknown_job_fails(self):
        assert ChunkScheduler().claim('missing', 0) is False
