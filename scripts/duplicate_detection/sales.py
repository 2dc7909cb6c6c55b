"""
Exact-match grouping for sale history.

A sale is a closed transaction, so only an identical name, price and date
counts as an accidental double entry. No fuzzy matching happens here.
"""

import logging
from typing import Dict, List

from .records import SaleRecord

log = logging.getLogger(__name__)

KEY_SEPARATOR = "|"


def sale_group_key(sale: SaleRecord) -> str:
    """Normalized name + two-decimal price + raw date. Platform is left out."""
    return KEY_SEPARATOR.join([
        sale.item_name.strip().lower(),
        f"{sale.sale_price:.2f}",
        sale.sale_date or "",
    ])


def group_sales(sales: List[SaleRecord]) -> Dict[str, List[SaleRecord]]:
    """
    Group sales by composite key.

    Returns key -> sales for keys with at least two sales, in order of
    first appearance.
    """
    groups: Dict[str, List[SaleRecord]] = {}
    for sale in sales:
        groups.setdefault(sale_group_key(sale), []).append(sale)

    duplicates = {k: v for k, v in groups.items() if len(v) >= 2}
    log.debug(f"Sales: {len(sales)} records, {len(groups)} keys, {len(duplicates)} duplicate keys")
    return duplicates
