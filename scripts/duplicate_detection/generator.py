"""
Duplicate Report Generator

Writes detection results as CSV and JSON files for review.
"""

import csv
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from .analyzer import DuplicateGroup, DuplicateResult

INVENTORY_COLUMNS = [
    "Group",
    "Group Size",
    "ID",
    "Item Name",
    "Size",
    "Purchase Price",
    "eBay Item ID",
    "Mercari Item ID",
    "Facebook Item ID",
    "Created At",
]

SALE_COLUMNS = [
    "Group",
    "Group Size",
    "ID",
    "Item Name",
    "Sale Price",
    "Sale Date",
    "Platform",
]


@dataclass
class GeneratorConfig:
    """Configuration for report output."""
    output_dir: Path
    json_indent: int = 2


class DuplicateReportGenerator:
    """
    Generates review files from a DuplicateResult.
    """

    def __init__(self, config: GeneratorConfig):
        self.config = config
        self.config.output_dir.mkdir(parents=True, exist_ok=True)

    def generate_inventory_csv(
        self,
        groups: List[DuplicateGroup],
        output_filename: str = "inventory_duplicates.csv",
    ) -> Path:
        """One row per item, tagged with its group number."""
        rows = []
        for number, group in enumerate(groups, 1):
            for record in group.records:
                rows.append({
                    "Group": number,
                    "Group Size": group.count,
                    "ID": record.id,
                    "Item Name": record.name,
                    "Size": record.size or "",
                    "Purchase Price": f"{record.purchase_price:.2f}",
                    "eBay Item ID": record.ebay_item_id or "",
                    "Mercari Item ID": record.mercari_item_id or "",
                    "Facebook Item ID": record.facebook_item_id or "",
                    "Created At": record.created_at or "",
                })

        output_path = self.config.output_dir / output_filename
        self._write_csv(output_path, INVENTORY_COLUMNS, rows)
        return output_path

    def generate_sales_csv(
        self,
        groups: List[DuplicateGroup],
        output_filename: str = "sale_duplicates.csv",
    ) -> Path:
        rows = []
        for number, group in enumerate(groups, 1):
            for record in group.records:
                rows.append({
                    "Group": number,
                    "Group Size": group.count,
                    "ID": record.id,
                    "Item Name": record.item_name,
                    "Sale Price": f"{record.sale_price:.2f}",
                    "Sale Date": record.sale_date,
                    "Platform": record.platform,
                })

        output_path = self.config.output_dir / output_filename
        self._write_csv(output_path, SALE_COLUMNS, rows)
        return output_path

    def generate_json(
        self,
        result: DuplicateResult,
        output_filename: str = "duplicates.json",
    ) -> Path:
        """Full result in the API response shape."""
        output_path = self.config.output_dir / output_filename
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=self.config.json_indent, default=str)
        return output_path

    def generate_all(self, result: DuplicateResult) -> List[Path]:
        return [
            self.generate_inventory_csv(result.inventory_duplicates),
            self.generate_sales_csv(result.sale_duplicates),
            self.generate_json(result),
        ]

    def _write_csv(self, path: Path, columns: List[str], rows: List[Dict]):
        """Write rows to CSV file. Header is written even with no rows."""
        with open(path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=columns, extrasaction='ignore')
            writer.writeheader()
            writer.writerows(rows)
