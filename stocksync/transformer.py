import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from .erp_client import ErpResponseError

logger = logging.getLogger(__name__)


def parse_quantity(value) -> int:
    """Convert an ERP quantity to a non-negative int, raising ValueError otherwise."""
    if isinstance(value, bool):
        raise ValueError(f"Invalid stock quantity {value!r}.")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"Fractional stock quantity {value!r}.")
        value = int(value)
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Non-numeric stock quantity {value!r}.") from None
    if quantity < 0:
        raise ValueError(f"Negative stock quantity {quantity}.")
    return quantity


@dataclass(frozen=True)
class StockRecord:
    external_id: str
    raw_quantity: object
    unit: str = ''
    group_id: str = ''

    @property
    def quantity(self) -> int:
        return parse_quantity(self.raw_quantity)


@dataclass(frozen=True)
class StockVariant:
    external_id: str
    quantity: object
    unit: str = ''


@dataclass(frozen=True)
class SimpleStock:
    """A remote group without variants; it carries its own quantity."""

    external_id: str
    name: str
    quantity: object
    unit: str = ''

    def records(self) -> list:
        return [StockRecord(self.external_id, self.quantity, self.unit, self.external_id)]


@dataclass(frozen=True)
class VariantGroup:
    external_id: str
    name: str
    variants: list = field(default_factory=list)

    def records(self) -> list:
        return [
            StockRecord(v.external_id, v.quantity, v.unit, self.external_id)
            for v in self.variants
        ]


StockGroup = Union[SimpleStock, VariantGroup]


def _external_id(raw: dict) -> str:
    value = raw.get('uuid')
    if value is None:
        return ''
    return str(value).strip()


def parse_stock_group(raw) -> Optional[StockGroup]:
    """
    Resolve one raw ERP group into SimpleStock or VariantGroup.

    Returns None (and logs a warning) when the group has no usable external id.
    Variants without an external id are dropped individually. A `variants`
    field that is not a list makes the whole payload unusable and raises
    ErpResponseError.
    """
    if not isinstance(raw, dict):
        logger.warning("Ignoring malformed stock group %r.", raw)
        return None

    group_id = _external_id(raw)
    if not group_id:
        logger.warning("Ignoring stock group without uuid (name=%r).", raw.get('name'))
        return None

    name = raw.get('name') or ''
    raw_variants = raw.get('variants')
    if raw_variants is not None and not isinstance(raw_variants, list):
        raise ErpResponseError(
            f"Stock group {group_id} has malformed variants ({type(raw_variants).__name__})."
        )
    if not raw_variants:
        if 'quantity' not in raw:
            return VariantGroup(group_id, name, [])
        return SimpleStock(group_id, name, raw['quantity'], raw.get('unit') or '')

    variants = []
    for raw_variant in raw_variants:
        if not isinstance(raw_variant, dict):
            logger.warning("Ignoring malformed variant %r in group %s.", raw_variant, group_id)
            continue
        variant_id = _external_id(raw_variant)
        if not variant_id:
            logger.warning("Ignoring variant without uuid in group %s.", group_id)
            continue
        variants.append(StockVariant(variant_id, raw_variant.get('quantity'), raw_variant.get('unit') or ''))
    return VariantGroup(group_id, name, variants)


def parse_stock_groups(raw_groups) -> list:
    groups = []
    for raw in raw_groups:
        group = parse_stock_group(raw)
        if group is not None:
            groups.append(group)
    return groups


def build_stock_index(groups) -> dict:
    """Map external id -> StockRecord across all groups (first occurrence wins)."""
    index = {}
    for group in groups:
        for record in group.records():
            if record.external_id in index:
                logger.warning(
                    "Duplicate external id %s in stock data – keeping first occurrence.",
                    record.external_id,
                )
                continue
            index[record.external_id] = record
    return index
