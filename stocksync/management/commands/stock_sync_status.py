from django.core.management.base import BaseCommand

from stocksync.controller import RunController


class Command(BaseCommand):
    help = "Show the state of the current or last stock sync run."

    def add_arguments(self, parser):
        parser.add_argument('--reset', action='store_true',
                            help="Cancel pending chunk jobs and delete the run state.")

    def handle(self, *args, **options):
        controller = RunController()
        if options['reset']:
            controller.cancel()
            self.stdout.write(self.style.SUCCESS("Cleared sync queue and run state."))
            return

        status = controller.get_sync_status()
        if status['status'] == 'idle':
            self.stdout.write("idle")
            return
        for key, value in status.items():
            self.stdout.write(f"{key}: {value if value is not None else '-'}")
