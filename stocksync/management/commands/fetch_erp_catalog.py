from django.core.management.base import BaseCommand, CommandError

from stocksync.erp_client import ErpClient, ErpClientError
from stocksync.transformer import VariantGroup, parse_stock_groups


class Command(BaseCommand):
    help = "Fetch one page of ERP product groups and summarize it."

    def add_arguments(self, parser):
        parser.add_argument('--page', type=int, default=1)
        parser.add_argument('--limit', type=int, default=80)

    def handle(self, *args, **options):
        page, limit = options['page'], options['limit']
        self.stdout.write(f"Fetching product groups: page={page}, limit={limit}")

        try:
            raw_groups = ErpClient().fetch_catalog_page(page, limit)
            groups = parse_stock_groups(raw_groups)
        except ErpClientError as exc:
            raise CommandError(f"Failed to fetch product groups from ERP: {exc}") from exc

        for group in groups:
            if isinstance(group, VariantGroup):
                self.stdout.write(f"{group.external_id} {group.name} ({len(group.variants)} variants)")
            else:
                self.stdout.write(f"{group.external_id} {group.name} (simple)")

        variants = sum(len(g.variants) for g in groups if isinstance(g, VariantGroup))
        self.stdout.write(self.style.SUCCESS(
            f"Fetched {len(groups)} groups, {variants} variants, "
            f"skipped {len(raw_groups) - len(groups)} malformed."
        ))
