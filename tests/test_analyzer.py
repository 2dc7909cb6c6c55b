import json

import pytest

from duplicate_detection.analyzer import (
    DetectionOptions,
    DuplicateAnalyzer,
    ExportLoadError,
    compute_duplicates,
    load_records,
)
from duplicate_detection.records import InventoryItemRecord


def _group_ids(groups):
    return [g.ids for g in groups]


class TestScenarios:
    """End-to-end behaviour of compute_duplicates."""

    def test_different_shoe_sizes_not_grouped(self, make_item):
        items = [make_item("Nike Air Max 90 Size 10"), make_item("Nike Air Max 90 Size 10.5")]
        assert compute_duplicates(items, []).inventory_duplicates == []

    def test_identical_titles_grouped(self, make_item):
        items = [make_item("Jordan 1 Retro M"), make_item("Jordan 1 Retro M")]
        result = compute_duplicates(items, [], {"similarityThreshold": 60})
        assert _group_ids(result.inventory_duplicates) == [[items[0].id, items[1].id]]

    def test_different_letter_sizes_not_grouped(self, make_item):
        items = [make_item("Nike Hoodie M"), make_item("Nike Hoodie L")]
        assert compute_duplicates(items, []).inventory_duplicates == []

    def test_sales_on_different_platforms_grouped(self, make_sale):
        sales = [
            make_sale("Vintage Levi's 501", 45.00, "2024-03-01", platform="ebay"),
            make_sale("Vintage Levi's 501", 45.00, "2024-03-01", platform="mercari"),
        ]
        result = compute_duplicates([], sales)
        assert len(result.sale_duplicates) == 1
        assert result.sale_duplicates[0].records == sales
        assert result.sale_duplicates[0].kind == "sales"

    def test_marketplace_id_overrides_everything(self, make_item):
        items = [
            make_item("Nike Hoodie", size="M", ebay_item_id="2580"),
            make_item("Vintage Pyrex Bowl", size="XL", ebay_item_id="2580"),
        ]
        result = compute_duplicates(items, [])
        assert _group_ids(result.inventory_duplicates) == [[items[0].id, items[1].id]]


class TestGrouping:

    def test_transitive_groups(self, make_item):
        a = make_item("Nike Vintage Windbreaker Jacket Blue")
        b = make_item("Nike Vintage Windbreaker Track Green")
        c = make_item("Nike Vintage Anorak Track Green")
        result = compute_duplicates([a, b, c], [])
        assert _group_ids(result.inventory_duplicates) == [[a.id, b.id, c.id]]

    def test_size_conflict_never_paired_directly(self, make_item):
        items = [make_item("Nike Hoodie M"), make_item("Nike Hoodie L"), make_item("Nike Hoodie XL")]
        assert compute_duplicates(items, []).inventory_duplicates == []

    def test_no_singleton_groups_and_insertion_order(self, make_item):
        x1 = make_item("Coach Tabby Bag Leather")
        y1 = make_item("Pyrex Mixing Bowl Set")
        lone = make_item("Patagonia Fleece XXL")
        x2 = make_item("Coach Tabby Bag Leather")
        y2 = make_item("Pyrex Mixing Bowl Set")
        result = compute_duplicates([x1, y1, lone, x2, y2], [])
        assert _group_ids(result.inventory_duplicates) == [[x1.id, x2.id], [y1.id, y2.id]]
        assert all(g.count >= 2 for g in result.inventory_duplicates)
        assert result.inventory_duplicates[0].key == x1.id

    def test_threshold_option(self, make_item):
        items = [
            make_item("Nike Windbreaker Vintage Jacket Blue"),
            make_item("Nike Windbreaker Vintage Track Green"),
        ]
        assert len(compute_duplicates(items, []).inventory_duplicates) == 1
        assert compute_duplicates(items, [], DetectionOptions(similarity_threshold=70)).inventory_duplicates == []

    def test_linked_pairs_skip_direct_edge(self, make_item):
        a = make_item("Coach Tabby Bag Leather", id="a")
        b = make_item("Coach Tabby Bag Leather", id="b")
        result = compute_duplicates([a, b], [], {"linked_pairs": [("b", "a")]})
        assert result.inventory_duplicates == []

    def test_linked_pairs_still_grouped_transitively(self, make_item):
        a = make_item("Coach Tabby Bag Leather", id="a")
        b = make_item("Coach Tabby Bag Leather", id="b")
        c = make_item("Coach Tabby Bag Leather", id="c")
        result = compute_duplicates([a, b, c], [], DetectionOptions(linked_pairs=[("a", "b")]))
        assert _group_ids(result.inventory_duplicates) == [["a", "b", "c"]]

    @pytest.mark.parametrize("linked", [(1, 2), (1, "2"), ("2", 1.0)])
    def test_linked_pairs_with_numeric_ids(self, linked):
        rows = [
            {"id": 1, "item_name": "Coach Tabby Bag Leather"},
            {"id": 2, "item_name": "Coach Tabby Bag Leather"},
        ]
        result = compute_duplicates(rows, [], {"linked_pairs": [linked]})
        assert result.inventory_duplicates == []


class TestInputHandling:

    def test_raw_rows_accepted(self):
        result = compute_duplicates(
            [
                {"id": "1", "item_name": "Jordan 1 Retro M", "purchase_price": "80"},
                {"id": "2", "item_name": "Jordan 1 Retro M", "purchase_price": None},
            ],
            [
                {"id": "s1", "item_name": "Pyrex Bowl", "selling_price": "20", "sale_date": "2024-01-01"},
                {"id": "s2", "item_name": "Pyrex Bowl", "sale_price": 20, "sale_date": "2024-01-01"},
            ],
        )
        assert _group_ids(result.inventory_duplicates) == [["1", "2"]]
        assert _group_ids(result.sale_duplicates) == [["s1", "s2"]]
        assert result.inventory_checked == 2
        assert result.sales_checked == 2

    def test_malformed_rows_do_not_raise(self):
        result = compute_duplicates(
            [{"id": "1", "item_name": None, "purchase_price": "abc"}, {}, "not a row"],
            [{"sale_price": object()}, None],
        )
        assert result.inventory_checked == 3
        assert result.sales_checked == 2

    @pytest.mark.parametrize("quantity", ["inf", "-inf", float("inf"), float("nan")])
    def test_non_finite_quantity_does_not_raise(self, quantity):
        rows = [
            {"id": "1", "item_name": "Nike Hoodie M", "quantity": quantity},
            {"id": "2", "item_name": "Nike Hoodie M", "quantity": "2"},
        ]
        result = compute_duplicates(rows, [])
        assert _group_ids(result.inventory_duplicates) == [["1", "2"]]
        assert [r.quantity for r in result.inventory_duplicates[0].records] == [1, 2]

    def test_none_inputs(self):
        result = compute_duplicates(None, None)
        assert result.inventory_duplicates == []
        assert result.sale_duplicates == []

    def test_inputs_not_mutated(self, make_item):
        items = [make_item("Jordan 1 Retro M"), make_item("Jordan 1 Retro M")]
        before = [InventoryItemRecord(**{**vars(i)}) for i in items]
        compute_duplicates(items, [])
        assert items == before


class TestDetectionOptions:

    @pytest.mark.parametrize("threshold", [-1, 101, "high", None, True])
    def test_invalid_threshold(self, threshold):
        with pytest.raises(ValueError):
            DetectionOptions(similarity_threshold=threshold)

    def test_coerce(self):
        assert DetectionOptions.coerce(None).similarity_threshold == 60
        assert DetectionOptions.coerce({"similarity_threshold": "75"}).similarity_threshold == 75
        options = DetectionOptions(similarity_threshold=80)
        assert DetectionOptions.coerce(options) is options


class TestResultShape:

    def test_to_dict(self, make_item, make_sale):
        items = [make_item("Jordan 1 Retro M", id="1"), make_item("Jordan 1 Retro M", id="2")]
        sales = [make_sale("Pyrex Bowl", 20, "2024-01-01"), make_sale("Pyrex Bowl", 20, "2024-01-01")]
        data = compute_duplicates(items, sales).to_dict()
        assert set(data) == {"inventoryDuplicates", "saleDuplicates"}
        group = data["inventoryDuplicates"][0]
        assert group["count"] == 2
        assert [i["id"] for i in group["items"]] == ["1", "2"]
        assert group["items"][0]["item_name"] == "Jordan 1 Retro M"
        assert data["saleDuplicates"][0]["key"] == "pyrex bowl|20.00|2024-01-01"
        json.dumps(data)


class TestLoadRecords:

    def test_csv(self, tmp_path):
        path = tmp_path / "inventory.csv"
        path.write_text("id,item_name,purchase_price,ebay_item_id\n1,Nike Hoodie M,25,\n2,Nike Hoodie M,,123\n")
        rows = load_records(path)
        assert rows == [
            {"id": "1", "item_name": "Nike Hoodie M", "purchase_price": "25", "ebay_item_id": ""},
            {"id": "2", "item_name": "Nike Hoodie M", "purchase_price": "", "ebay_item_id": "123"},
        ]

    def test_json_list_and_wrapped(self, tmp_path):
        plain = tmp_path / "sales.json"
        plain.write_text(json.dumps([{"id": "1"}, "junk"]))
        wrapped = tmp_path / "wrapped.json"
        wrapped.write_text(json.dumps({"sales": [{"id": "2"}]}))
        assert load_records(plain) == [{"id": "1"}]
        assert load_records(wrapped) == [{"id": "2"}]

    def test_errors(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_records(tmp_path / "missing.csv")

        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        with pytest.raises(ExportLoadError):
            load_records(bad)

        scalar = tmp_path / "scalar.json"
        scalar.write_text("42")
        with pytest.raises(ExportLoadError):
            load_records(scalar)

        other = tmp_path / "inventory.xlsx"
        other.write_text("")
        with pytest.raises(ExportLoadError):
            load_records(other)

    def test_empty_csv(self, tmp_path):
        empty = tmp_path / "inventory.csv"
        empty.write_text("")
        with pytest.raises(ExportLoadError):
            load_records(empty)

    def test_undecodable_files(self, tmp_path):
        latin = tmp_path / "sales.json"
        latin.write_bytes(b'[{"id": "1", "item_name": "Caf\xe9 Mug"}]')
        with pytest.raises(ExportLoadError):
            load_records(latin)

        binary = tmp_path / "inventory.csv"
        binary.write_bytes(b"id,item_name\n1,Caf\xe9 Mug\n")
        with pytest.raises(ExportLoadError):
            load_records(binary)


class TestDuplicateAnalyzer:

    def test_load_analyze_report(self, tmp_path):
        inventory = tmp_path / "inventory.json"
        inventory.write_text(json.dumps({"items": [
            {"id": "1", "item_name": "Jordan 1 Retro M", "purchase_price": 80, "size": "M"},
            {"id": "2", "item_name": "Jordan 1 Retro M", "purchase_price": "75.5"},
            {"id": "3", "item_name": "Nike Hoodie L"},
        ]}))
        sales = tmp_path / "sales.csv"
        sales.write_text(
            "id,item_name,selling_price,sale_date,platform\n"
            "s1,Vintage Levi's 501,45,2024-03-01,ebay\n"
            "s2,Vintage Levi's 501,45.00,2024-03-01,mercari\n"
        )

        analyzer = DuplicateAnalyzer()
        assert analyzer.load_inventory(inventory) == 3
        assert analyzer.load_sales(sales) == 2

        result = analyzer.analyze()
        assert _group_ids(result.inventory_duplicates) == [["1", "2"]]
        assert _group_ids(result.sale_duplicates) == [["s1", "s2"]]

        report = analyzer.generate_report(result)
        assert "# Duplicate Detection Report" in report
        assert "**1. Jordan 1 Retro M** (2 items)" in report
        assert "- 2: Jordan 1 Retro M ($75.50)" in report
        assert "**1. Vintage Levi's 501** ($45.00 on 2024-03-01, 2 sales)" in report
        assert "- s2: mercari" in report
