import logging

from .models import CatalogItem

logger = logging.getLogger(__name__)


def syncable_items(filters=None):
    """Published catalog items that carry an external identifier (SKU)."""
    queryset = (
        CatalogItem.objects
        .filter(status=CatalogItem.STATUS_PUBLISH)
        .exclude(sku='')
    )
    if filters:
        queryset = queryset.filter(**filters)
    return queryset.order_by('id')


def list_syncable_item_ids(filters=None) -> list:
    """
    Return ids of catalog items eligible for stock sync, in a stable order.

    `filters` are extra queryset lookups, e.g. {'kind': 'variation'}.
    """
    item_ids = list(syncable_items(filters).values_list('id', flat=True))
    logger.debug("Found %d syncable catalog items.", len(item_ids))
    return item_ids
