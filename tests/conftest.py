import pytest

from stocksync.models import CatalogItem

BASE_URL = 'https://erp.example.test/api'


@pytest.fixture(autouse=True)
def erp_settings(settings):
    settings.ERP_API_BASE_URL = BASE_URL
    settings.ERP_API_KEY = 'erp-secret-key'
    settings.STOCK_SYNC_CHUNK_SIZE = 10
    settings.STOCK_SYNC_CHUNK_INTERVAL_MINUTES = 5
    return settings


@pytest.fixture()
def make_items(db):
    """Create `count` published catalog items with SKUs SKU-000, SKU-001, ..."""
    def _make(count, start=0, **fields):
        fields.setdefault('stock_quantity', 0)
        return [
            CatalogItem.objects.create(name=f'Item {i}', sku=f'SKU-{i:03d}', **fields)
            for i in range(start, start + count)
        ]
    return _make


@pytest.fixture()
def stock_payload():
    """Build an ERP stock response with one variant group holding the given SKUs."""
    def _payload(skus, quantity=7):
        return [{
            'uuid': 'GROUP-1',
            'name': 'Group 1',
            'variants': [{'uuid': sku, 'quantity': quantity, 'unit': 'pcs'} for sku in skus],
        }]
    return _payload
