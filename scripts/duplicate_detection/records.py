"""
Inventory and sale records as the detection engine sees them.

Rows come from the storage layer or from a catalog export. Bad values are
coerced rather than rejected: the engine never raises on a malformed row.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

# Marketplace name -> column holding that marketplace's item id
MARKETPLACE_ID_FIELDS: Dict[str, str] = {
    "ebay": "ebay_item_id",
    "mercari": "mercari_item_id",
    "facebook": "facebook_item_id",
}


def _text(value) -> str:
    """Strings pass through; anything else becomes ''."""
    return value if isinstance(value, str) else ""


def _optional_text(value) -> Optional[str]:
    """Blank or missing -> None. Numbers (e.g. ids read from JSON) become strings."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if value != value:  # NaN
            return None
        value = str(int(value)) if float(value).is_integer() else str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _price(value) -> float:
    """Parse a price; missing or non-numeric -> 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if number != number:  # NaN
        return 0.0
    return number


def _present(value) -> bool:
    return value is not None and not (isinstance(value, str) and not value.strip())


def _quantity(value) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        # inf raises OverflowError
        return 1


def _photos(value) -> List[str]:
    if isinstance(value, (list, tuple)):
        return [p for p in value if isinstance(p, str) and p]
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.startswith("["):
            try:
                return _photos(json.loads(text))
            except ValueError:
                pass
        return [p.strip() for p in text.split(",") if p.strip()]
    return []


@dataclass
class InventoryItemRecord:
    """One inventory item owned by a single user."""
    id: str
    name: str
    purchase_price: float = 0.0
    size: Optional[str] = None  # User-entered size field, not the title-embedded one
    ebay_item_id: Optional[str] = None
    mercari_item_id: Optional[str] = None
    facebook_item_id: Optional[str] = None
    created_at: Optional[str] = None
    photos: List[str] = field(default_factory=list)
    description: Optional[str] = None
    brand: Optional[str] = None
    condition: Optional[str] = None
    quantity: int = 1
    raw: Dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_row(cls, row: Mapping) -> "InventoryItemRecord":
        """Create an InventoryItemRecord from a storage row or export dict."""
        name = row.get("item_name", row.get("name"))
        return cls(
            id=_optional_text(row.get("id")) or "",
            name=_text(name),
            purchase_price=_price(row.get("purchase_price")),
            size=_optional_text(row.get("size")),
            ebay_item_id=_optional_text(row.get("ebay_item_id")),
            mercari_item_id=_optional_text(row.get("mercari_item_id")),
            facebook_item_id=_optional_text(row.get("facebook_item_id")),
            created_at=_optional_text(row.get("created_at")),
            photos=_photos(row.get("photos")),
            description=_optional_text(row.get("description")),
            brand=_optional_text(row.get("brand")),
            condition=_optional_text(row.get("condition")),
            quantity=_quantity(row.get("quantity", 1)),
            raw=dict(row),
        )

    def marketplace_ids(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, attr) for name, attr in MARKETPLACE_ID_FIELDS.items()}

    def to_dict(self) -> Dict:
        data = dict(self.raw)
        data.update({
            "id": self.id,
            "item_name": self.name,
            "purchase_price": self.purchase_price,
            "size": self.size,
            "created_at": self.created_at,
        })
        data.update({attr: getattr(self, attr) for attr in MARKETPLACE_ID_FIELDS.values()})
        return data


@dataclass
class SaleRecord:
    """One entry in a user's sale history."""
    id: str
    item_name: str
    sale_price: float = 0.0
    sale_date: str = ""
    platform: str = ""
    raw: Dict = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_row(cls, row: Mapping) -> "SaleRecord":
        """
        Create a SaleRecord from a storage row or export dict.

        The price comes from selling_price when present, otherwise from the
        legacy sale_price column, otherwise 0.
        """
        if _present(row.get("selling_price")):
            price = row.get("selling_price")
        else:
            price = row.get("sale_price")

        return cls(
            id=_optional_text(row.get("id")) or "",
            item_name=_text(row.get("item_name", row.get("name"))),
            sale_price=_price(price),
            sale_date=_text(row.get("sale_date")),
            platform=_text(row.get("platform")),
            raw=dict(row),
        )

    def to_dict(self) -> Dict:
        data = dict(self.raw)
        data.update({
            "id": self.id,
            "item_name": self.item_name,
            "sale_price": self.sale_price,
            "sale_date": self.sale_date,
            "platform": self.platform,
        })
        return data


def as_inventory_record(item) -> InventoryItemRecord:
    if isinstance(item, InventoryItemRecord):
        return item
    return InventoryItemRecord.from_row(item if isinstance(item, Mapping) else {})


def as_sale_record(sale) -> SaleRecord:
    if isinstance(sale, SaleRecord):
        return sale
    return SaleRecord.from_row(sale if isinstance(sale, Mapping) else {})


def pair_key(id_a, id_b) -> Tuple[str, str]:
    """Order-insensitive key for a pair of record ids.

    Ids are normalized the same way record ids are, so 123 and "123" match.
    """
    id_a = _optional_text(id_a) or ""
    id_b = _optional_text(id_b) or ""
    return (id_a, id_b) if id_a <= id_b else (id_b, id_a)
