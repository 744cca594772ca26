from django.dispatch import Signal

# kwargs: run_id, total_items, total_chunks; sent before the previous run is reset
sync_run_starting = Signal()

# kwargs: run_id, total_items, total_chunks
sync_run_started = Signal()

# kwargs: state (SyncRunState)
sync_run_completed = Signal()

# kwargs: chunk_index, item_ids, run_id
chunk_starting = Signal()

# kwargs: chunk_index, result (ChunkResult), run_id
chunk_processed = Signal()

# kwargs: item (CatalogItem), old_quantity, new_quantity
stock_updated = Signal()
