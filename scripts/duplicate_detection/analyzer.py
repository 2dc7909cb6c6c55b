"""
Duplicate Analyzer for Reseller Catalogs

Finds groups of inventory items that are probably the same physical item,
and groups of sales that were probably logged twice.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Collection, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .clustering import cluster_indices
from .config import DEFAULT_SIMILARITY_THRESHOLD
from .pairs import PairEvaluator
from .records import (
    InventoryItemRecord,
    SaleRecord,
    as_inventory_record,
    as_sale_record,
)
from .sales import group_sales

log = logging.getLogger(__name__)

INVENTORY = "inventory"
SALES = "sales"


class ExportLoadError(ValueError):
    """A catalog export could not be read."""


@dataclass
class DetectionOptions:
    """Tunables for one detection pass."""
    similarity_threshold: float = DEFAULT_SIMILARITY_THRESHOLD
    # (id, id) pairs the user already linked; never paired directly again
    linked_pairs: Collection[Tuple[str, str]] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.similarity_threshold, bool):
            raise ValueError("similarity_threshold must be a number")
        try:
            self.similarity_threshold = float(self.similarity_threshold)
        except (TypeError, ValueError):
            raise ValueError(f"similarity_threshold must be a number, got {self.similarity_threshold!r}")
        if not 0 <= self.similarity_threshold <= 100:
            raise ValueError(f"similarity_threshold must be within 0-100, got {self.similarity_threshold}")

    @classmethod
    def coerce(cls, options: Union["DetectionOptions", Mapping, None]) -> "DetectionOptions":
        """Accept options as an instance, a dict (snake or camel case) or None."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        threshold = options.get(
            "similarity_threshold",
            options.get("similarityThreshold", DEFAULT_SIMILARITY_THRESHOLD),
        )
        linked = options.get("linked_pairs", options.get("linkedPairs")) or ()
        return cls(similarity_threshold=threshold, linked_pairs=tuple(tuple(p) for p in linked))


@dataclass
class DuplicateGroup:
    """Two or more records judged to be the same item or the same sale."""
    kind: str  # inventory, sales
    key: str
    records: List[Union[InventoryItemRecord, SaleRecord]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def ids(self) -> List[str]:
        return [r.id for r in self.records]

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "count": self.count,
            "items": [r.to_dict() for r in self.records],
        }


@dataclass
class DuplicateResult:
    """Complete result of one detection pass."""
    inventory_duplicates: List[DuplicateGroup]
    sale_duplicates: List[DuplicateGroup]
    inventory_checked: int = 0
    sales_checked: int = 0

    @property
    def total_inventory_duplicates(self) -> int:
        return sum(g.count for g in self.inventory_duplicates)

    @property
    def total_sale_duplicates(self) -> int:
        return sum(g.count for g in self.sale_duplicates)

    def to_dict(self) -> Dict:
        return {
            "inventoryDuplicates": [g.to_dict() for g in self.inventory_duplicates],
            "saleDuplicates": [g.to_dict() for g in self.sale_duplicates],
        }


def compute_duplicates(
    inventory_items: Optional[Iterable] = None,
    sale_records: Optional[Iterable] = None,
    options: Union[DetectionOptions, Mapping, None] = None,
) -> DuplicateResult:
    """
    Run duplicate detection over one user's inventory and sale history.

    Inventory is compared pairwise (marketplace ids, sizes, title overlap)
    and the resulting pairs are merged transitively into groups. Sales are
    grouped by exact name/price/date. Records may be given as
    InventoryItemRecord/SaleRecord or as raw row dicts. Nothing is mutated.
    """
    opts = DetectionOptions.coerce(options)
    items = [as_inventory_record(item) for item in inventory_items or []]
    sales = [as_sale_record(sale) for sale in sale_records or []]

    evaluator = PairEvaluator(items, threshold=opts.similarity_threshold)
    clusters = cluster_indices(len(items), evaluator.find_edges(opts.linked_pairs))
    inventory_groups = [
        DuplicateGroup(
            kind=INVENTORY,
            key=items[members[0]].id,
            records=[items[i] for i in members],
        )
        for members in clusters
    ]

    sale_groups = [
        DuplicateGroup(kind=SALES, key=key, records=group)
        for key, group in group_sales(sales).items()
    ]

    log.info(
        f"Checked {len(items)} items and {len(sales)} sales: "
        f"{len(inventory_groups)} inventory groups, {len(sale_groups)} sale groups"
    )
    return DuplicateResult(
        inventory_duplicates=inventory_groups,
        sale_duplicates=sale_groups,
        inventory_checked=len(items),
        sales_checked=len(sales),
    )


def load_records(filepath: Union[str, Path]) -> List[Dict]:
    """
    Load rows from a CSV or JSON catalog export.

    JSON may be a list of rows or an object with an "items", "sales" or
    "data" list.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Export not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        try:
            df = pd.read_csv(path, dtype=str, keep_default_na=False, encoding="utf-8-sig")
        except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ExportLoadError(f"Unreadable CSV in {path}: {e}") from e
        return df.to_dict("records")

    if suffix == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ExportLoadError(f"Invalid JSON in {path}: {e}") from e
        if isinstance(data, dict):
            for key in ("items", "sales", "data"):
                if isinstance(data.get(key), list):
                    data = data[key]
                    break
        if not isinstance(data, list):
            raise ExportLoadError(f"Expected a list of rows in {path}")
        return [row for row in data if isinstance(row, dict)]

    raise ExportLoadError(f"Unsupported export type '{path.suffix}' for {path}")


class DuplicateAnalyzer:
    """
    Loads inventory and sales exports and runs duplicate detection on them.
    """

    def __init__(self, options: Optional[DetectionOptions] = None):
        self.options = options or DetectionOptions()
        self.items: List[InventoryItemRecord] = []
        self.sales: List[SaleRecord] = []

    def load_inventory(self, filepath: Union[str, Path]) -> int:
        """Load inventory items. Returns number of items loaded."""
        self.items = [InventoryItemRecord.from_row(row) for row in load_records(filepath)]
        return len(self.items)

    def load_sales(self, filepath: Union[str, Path]) -> int:
        """Load sale records. Returns number of sales loaded."""
        self.sales = [SaleRecord.from_row(row) for row in load_records(filepath)]
        return len(self.sales)

    def analyze(self) -> DuplicateResult:
        return compute_duplicates(self.items, self.sales, self.options)

    def generate_report(self, result: DuplicateResult) -> str:
        """Generate human-readable duplicate report."""
        lines = [
            "# Duplicate Detection Report",
            "",
            "## Overview",
            "",
            f"- **Inventory Items Checked**: {result.inventory_checked:,}",
            f"- **Sales Checked**: {result.sales_checked:,}",
            f"- **Similarity Threshold**: {self.options.similarity_threshold:g}%",
            "",
            "## Inventory Duplicates",
            "",
            f"Found **{len(result.inventory_duplicates)}** groups covering "
            f"**{result.total_inventory_duplicates}** items.",
            "",
        ]

        for i, group in enumerate(result.inventory_duplicates, 1):
            lines.append(f"**{i}. {group.records[0].name or '(untitled)'}** ({group.count} items)")
            for record in group.records:
                size = f", size {record.size}" if record.size else ""
                lines.append(f"   - {record.id}: {record.name} (${record.purchase_price:.2f}{size})")
            lines.append("")

        lines.extend([
            "## Sale Duplicates",
            "",
            f"Found **{len(result.sale_duplicates)}** groups covering "
            f"**{result.total_sale_duplicates}** sales.",
            "",
        ])

        for i, group in enumerate(result.sale_duplicates, 1):
            first = group.records[0]
            lines.append(
                f"**{i}. {first.item_name or '(untitled)'}** "
                f"(${first.sale_price:.2f} on {first.sale_date or 'unknown date'}, {group.count} sales)"
            )
            for record in group.records:
                lines.append(f"   - {record.id}: {record.platform or 'unknown platform'}")
            lines.append("")

        return "\n".join(lines)
