import logging
from dataclasses import dataclass, field

from .erp_client import ErpClient, ErpClientError
from .models import CatalogItem
from .run_state import RunStateStore
from .signals import chunk_processed, chunk_starting, stock_updated
from .transformer import build_stock_index, parse_stock_groups

logger = logging.getLogger(__name__)


@dataclass
class ChunkResult:
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    details: list = field(default_factory=list)

    def as_dict(self) -> dict:
        return {'updated': self.updated, 'skipped': self.skipped, 'errors': self.errors}


class SyncExecutor:
    """Processes one chunk: fetch ERP stock, write quantities, record progress."""

    def __init__(self, client_factory=ErpClient, state_store=None, log_products=False, echo=None):
        self._client_factory = client_factory
        self._state_store = state_store or RunStateStore()
        self._log_products = log_products
        self._echo = echo

    def execute_chunk(self, chunk_index: int, item_ids, run_id=None) -> ChunkResult:
        item_ids = list(item_ids)
        result = ChunkResult()
        logger.info("Processing chunk %d with %d items.", chunk_index, len(item_ids))

        state = self._state_store.get()
        if state is None or not state.is_in_progress:
            logger.warning("Sync run not found or not in progress; skipping chunk %d.", chunk_index)
            return result
        if run_id is not None and run_id != state.run_id:
            logger.warning(
                "Chunk %d belongs to run %s but the active run is %s; skipping.",
                chunk_index, run_id, state.run_id,
            )
            return result
        run_id = state.run_id
        chunk_starting.send(sender=self.__class__, chunk_index=chunk_index, item_ids=item_ids, run_id=run_id)

        items = CatalogItem.objects.in_bulk(item_ids)
        if self._log_products:
            for item_id in item_ids:
                item = items.get(item_id)
                self._report(f"Syncing product: ID={item_id}, SKU={item.sku if item else '?'}")

        try:
            client = self._client_factory()
            skus = sorted({item.sku for item in items.values() if item.sku})
            stock_index = build_stock_index(parse_stock_groups(client.fetch_stock(skus)))
        except (ErpClientError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Chunk %d failed: %s", chunk_index, exc)
            result.errors = len(item_ids)
            result.details.append({'error': str(exc)})
        else:
            for item_id in item_ids:
                self._apply_item(item_id, items.get(item_id), stock_index, result)

        self._state_store.apply_chunk_result(
            chunk_index, len(item_ids), len(item_ids) - result.errors, result.errors, run_id=run_id,
        )
        chunk_processed.send(sender=self.__class__, chunk_index=chunk_index, result=result, run_id=run_id)

        logger.info(
            "Completed chunk %d. updated=%d, skipped=%d, errors=%d.",
            chunk_index, result.updated, result.skipped, result.errors,
        )
        return result

    def _apply_item(self, item_id, item, stock_index: dict, result: ChunkResult):
        try:
            if item is None:
                raise CatalogItem.DoesNotExist(f"Catalog item {item_id} no longer exists.")
            if not item.sku:
                raise ValueError(f"Catalog item {item_id} has no SKU.")

            record = stock_index.get(item.sku)
            if record is None:
                logger.debug("SKU %s not in ERP stock data – skipping.", item.sku)
                result.skipped += 1
                result.details.append({'skipped': item.sku, 'item_id': item_id})
                return

            new_quantity = record.quantity
            old_quantity = item.stock_quantity
            item.manage_stock = True
            item.stock_quantity = new_quantity
            item.save(update_fields=['manage_stock', 'stock_quantity', 'updated_at'])
            stock_updated.send(
                sender=self.__class__, item=item,
                old_quantity=old_quantity, new_quantity=new_quantity,
            )

            result.updated += 1
            result.details.append({'updated': item.sku, 'item_id': item_id, 'quantity': new_quantity})
        except Exception as exc:
            result.errors += 1
            result.details.append({'error': str(exc), 'item_id': item_id})
            logger.error("Failed to update stock of item %s: %s", item_id, exc)

    def _report(self, message: str):
        logger.info(message)
        if self._echo is not None:
            self._echo(message)
