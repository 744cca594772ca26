from django.core.management.base import BaseCommand, CommandError

from stocksync.controller import RunController
from stocksync.erp_client import ErpConfigurationError
from stocksync.executor import SyncExecutor
from stocksync.run_state import RunStateStore


class Command(BaseCommand):
    help = "Sync stock quantities from the ERP, processing every chunk immediately."

    def add_arguments(self, parser):
        parser.add_argument('--chunk-size', type=int, default=None,
                            help="Items per chunk (defaults to STOCK_SYNC_CHUNK_SIZE).")
        parser.add_argument('--interval', type=int, default=None,
                            help="Minutes between chunks (only recorded; chunks run back to back).")
        parser.add_argument('--force', action='store_true',
                            help="Terminate a sync already in progress before starting.")

    def handle(self, *args, **options):
        state_store = RunStateStore()
        executor = SyncExecutor(state_store=state_store, log_products=True, echo=self.stdout.write)
        controller = RunController(
            chunk_size=options['chunk_size'],
            chunk_interval_minutes=options['interval'],
            state_store=state_store,
            executor=executor,
        )
        self.stdout.write(
            f"Starting product stock sync: chunk_size={controller.chunk_size}, "
            f"interval={controller.chunk_interval_minutes}"
        )

        current = state_store.get()
        if current is not None and current.is_in_progress:
            if not options['force']:
                raise CommandError("A sync is already in progress. Use --force to terminate it.")
            self.stderr.write("A sync is currently in progress. Terminating previous sync...")
            controller.cancel()

        try:
            started = controller.start_manual_run(blocking=True)
        except ErpConfigurationError as exc:
            raise CommandError(str(exc)) from exc
        if not started:
            raise CommandError("Stock sync could not be started.")

        status = controller.get_sync_status()
        if status['status'] == 'idle':
            self.stdout.write(self.style.SUCCESS("No products to sync."))
            return
        self.stdout.write(self.style.SUCCESS(
            f"Product stock sync finished. Processed: {status['processed_items']}, "
            f"Updated: {status['successful_updates']}, Errors: {status['failed_updates']}"
        ))
