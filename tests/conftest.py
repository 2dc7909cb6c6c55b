import pytest

from duplicate_detection.records import InventoryItemRecord, SaleRecord


@pytest.fixture
def make_item():
    counter = {"n": 0}

    def _make(name, **kwargs):
        counter["n"] += 1
        kwargs.setdefault("id", f"item-{counter['n']}")
        return InventoryItemRecord(name=name, **kwargs)

    return _make


@pytest.fixture
def make_sale():
    counter = {"n": 0}

    def _make(item_name, sale_price, sale_date, platform="ebay", **kwargs):
        counter["n"] += 1
        kwargs.setdefault("id", f"sale-{counter['n']}")
        return SaleRecord(
            item_name=item_name,
            sale_price=sale_price,
            sale_date=sale_date,
            platform=platform,
            **kwargs,
        )

    return _make
