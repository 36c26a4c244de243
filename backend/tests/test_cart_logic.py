import pytest

from mealcart.core.errors import CartItemNotFoundError
from mealcart.services.cart_logic import (
    DEFAULT_PRICE,
    calculate_cart_totals,
    change_quantity,
    make_line_item,
    merge_item,
    remove_item,
)


class TestCalculateCartTotals:

    def test_empty_cart_is_all_zero(self):
        assert calculate_cart_totals([]) == {"subtotal": 0.0, "tax": 0.0, "total": 0.0}

    def test_two_units_at_default_price(self):
        totals = calculate_cart_totals([{"idMeal": "1", "price": 14.99, "quantity": 2}])
        assert totals == {"subtotal": 29.98, "tax": 3.0, "total": 32.98}

    def test_several_lines(self):
        items = [
            {"idMeal": "1", "price": 14.99, "quantity": 1},
            {"idMeal": "2", "price": 14.99, "quantity": 3},
        ]
        # 59.96 -> tax 5.996
        assert calculate_cart_totals(items) == {"subtotal": 59.96, "tax": 6.0, "total": 65.96}

    def test_total_uses_raw_tax_not_rounded_parts(self):
        # raw: subtotal 0.044, tax 0.0044, total 0.0484
        # round(subtotal) + round(tax) would give 0.04
        totals = calculate_cart_totals([{"idMeal": "1", "price": 0.044, "quantity": 1}])
        assert totals == {"subtotal": 0.04, "tax": 0.0, "total": 0.05}

    def test_rounds_half_away_from_zero(self):
        # float round() gives 0.12 here
        totals = calculate_cart_totals([{"idMeal": "1", "price": 0.125, "quantity": 1}], tax_rate=0)
        assert totals["subtotal"] == 0.13
        assert totals["total"] == 0.13

    def test_custom_tax_rate(self):
        totals = calculate_cart_totals([{"idMeal": "1", "price": 10, "quantity": 1}], tax_rate=0.2)
        assert totals == {"subtotal": 10.0, "tax": 2.0, "total": 12.0}

    def test_missing_price_or_quantity_counts_as_zero(self):
        items = [{"idMeal": "1", "quantity": 2}, {"idMeal": "2", "price": 5.0}]
        assert calculate_cart_totals(items)["total"] == 0.0


class TestMergeItem:

    def test_new_item_gets_quantity_one_and_default_price(self):
        items, line = merge_item([], {"idMeal": "1", "strMeal": "Soup", "price": 1, "quantity": 9})
        assert line == {"idMeal": "1", "strMeal": "Soup", "quantity": 1, "price": DEFAULT_PRICE}
        assert items == [line]

    def test_duplicate_id_is_noop(self):
        existing = [make_line_item({"idMeal": "1"})]
        existing[0]["quantity"] = 4
        items, line = merge_item(existing, {"idMeal": "1", "strMeal": "Other name"})
        assert line is None
        assert items == existing
        assert len(items) == 1

    def test_appends_in_order(self):
        items, _ = merge_item([make_line_item({"idMeal": "1"})], {"idMeal": "2"})
        assert [it["idMeal"] for it in items] == ["1", "2"]

    def test_input_is_not_mutated(self):
        existing = [make_line_item({"idMeal": "1"})]
        merge_item(existing, {"idMeal": "2"})
        assert len(existing) == 1


class TestChangeQuantity:

    @pytest.fixture
    def items(self):
        first = make_line_item({"idMeal": "1"})
        second = make_line_item({"idMeal": "2"})
        second["quantity"] = 2
        return [first, second]

    def test_increment(self, items):
        new_items, outcome = change_quantity(items, "1", 1)
        assert outcome == "updated"
        assert new_items[0]["quantity"] == 2
        assert items[0]["quantity"] == 1

    def test_large_delta_has_no_upper_bound(self, items):
        new_items, _ = change_quantity(items, "2", 1000)
        assert new_items[1]["quantity"] == 1002

    def test_decrement_to_zero_removes_line(self, items):
        new_items, outcome = change_quantity(items, "1", -1)
        assert outcome == "removed"
        assert [it["idMeal"] for it in new_items] == ["2"]

    def test_decrement_below_zero_removes_line(self, items):
        new_items, outcome = change_quantity(items, "2", -5)
        assert outcome == "removed"
        assert [it["idMeal"] for it in new_items] == ["1"]

    def test_zero_delta_keeps_quantity(self, items):
        new_items, outcome = change_quantity(items, "2", 0)
        assert outcome == "updated"
        assert new_items[1]["quantity"] == 2

    def test_unknown_item_raises_not_found(self, items):
        with pytest.raises(CartItemNotFoundError):
            change_quantity(items, "missing", 1)

    def test_removing_last_line_gives_zero_totals(self):
        new_items, outcome = change_quantity([make_line_item({"idMeal": "1"})], "1", -1)
        assert outcome == "removed"
        assert calculate_cart_totals(new_items) == {"subtotal": 0.0, "tax": 0.0, "total": 0.0}


def test_remove_item_ignores_absent_id():
    items = [make_line_item({"idMeal": "1"})]
    assert remove_item(items, "2") == items
    assert remove_item(items, "1") == []
