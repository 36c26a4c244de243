# mealcart/services/cart_logic.py
"""
Pure cart logic, shared by the Firestore transactions and the tests.

- merge_item: set semantics on idMeal; a new line starts at quantity 1 and DEFAULT_PRICE
- change_quantity: signed delta, a line that would drop to <= 0 is removed
- remove_item: drop any line with the given idMeal (no-op when absent)
- calculate_cart_totals: subtotal / tax / total, rounded half away from zero

None of these functions mutate their inputs.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from mealcart.core.errors import CartItemNotFoundError

DEFAULT_PRICE = 14.99
TAX_RATE = 0.1

_CENTS = Decimal("0.01")

Item = Dict[str, Any]


def find_item(items: Sequence[Mapping[str, Any]], id_meal: str) -> Optional[Mapping[str, Any]]:
    for it in items:
        if it.get("idMeal") == id_meal:
            return it
    return None


def make_line_item(item: Mapping[str, Any], price: float = DEFAULT_PRICE) -> Item:
    """Copy the descriptor and pin quantity/price; client-sent values for those are ignored."""
    line = dict(item)
    line["quantity"] = 1
    line["price"] = price
    return line


def merge_item(items: Sequence[Mapping[str, Any]], item: Mapping[str, Any],
               price: float = DEFAULT_PRICE) -> Tuple[List[Item], Optional[Item]]:
    """
    Return (new_items, appended_line). appended_line is None when a line with the same
    idMeal is already present, in which case new_items equals items.
    """
    current = [dict(it) for it in items]
    if find_item(current, item["idMeal"]) is not None:
        return current, None
    line = make_line_item(item, price)
    current.append(line)
    return current, line


def change_quantity(items: Sequence[Mapping[str, Any]], id_meal: str,
                    delta: int) -> Tuple[List[Item], str]:
    """
    Apply a signed quantity delta to the line with idMeal.
    Returns (new_items, "updated" | "removed"); raises CartItemNotFoundError if there is no such line.
    """
    current = [dict(it) for it in items]
    for idx, it in enumerate(current):
        if it.get("idMeal") != id_meal:
            continue
        new_quantity = int(it.get("quantity", 0) or 0) + delta
        if new_quantity <= 0:
            del current[idx]
            return current, "removed"
        it["quantity"] = new_quantity
        return current, "updated"
    raise CartItemNotFoundError()


def remove_item(items: Sequence[Mapping[str, Any]], id_meal: str) -> List[Item]:
    return [dict(it) for it in items if it.get("idMeal") != id_meal]


def _money(value: Decimal) -> float:
    return float(value.quantize(_CENTS, rounding=ROUND_HALF_UP))


def calculate_cart_totals(items: Sequence[Mapping[str, Any]],
                          tax_rate: float = TAX_RATE) -> Dict[str, float]:
    """
    subtotal = sum(price * quantity)
    tax      = round(subtotal * tax_rate, 2)
    total    = round(subtotal + subtotal * tax_rate, 2)   (raw tax, not the rounded one)

    The three values are rounded independently from the raw amounts.
    """
    subtotal = Decimal("0")
    for it in items:
        price = Decimal(str(it.get("price", 0) or 0))
        subtotal += price * int(it.get("quantity", 0) or 0)
    tax = subtotal * Decimal(str(tax_rate))
    return {
        "subtotal": _money(subtotal),
        "tax": _money(tax),
        "total": _money(subtotal + tax),
    }
