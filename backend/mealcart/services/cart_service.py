# mealcart/services/cart_service.py
"""
CartService: the single entry point the routers talk to.

It validates inputs before touching storage, delegates each operation to one repository call,
computes totals on read and turns Firestore failures into CartStorageError (logged with traceback,
generic message for the caller). It keeps no per-request state and takes no locks.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, Mapping, Tuple

from google.api_core.exceptions import GoogleAPIError

from mealcart.core.errors import CartStorageError, CartValidationError
from mealcart.repositories.carts import CartRepository
from mealcart.services.cart_logic import TAX_RATE, calculate_cart_totals

logger = logging.getLogger("mealcart.carts")

ADD_ITEM_REQUIRED = "userId and item with idMeal are required"


def _is_id(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class CartService:
    def __init__(self, repository: CartRepository, tax_rate: float = TAX_RATE):
        self.repository = repository
        self.tax_rate = tax_rate

    @contextmanager
    def _storage(self, action: str, user_id: str):
        try:
            yield
        except GoogleAPIError as exc:
            logger.exception("Cart %s failed for user %s", action, user_id)
            raise CartStorageError() from exc

    def add_item(self, user_id: str, item: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        if not _is_id(user_id) or not isinstance(item, Mapping) or not _is_id(item.get("idMeal")):
            raise CartValidationError(ADD_ITEM_REQUIRED)
        with self._storage("add", user_id):
            outcome, line = self.repository.add_item(user_id, dict(item))
        logger.info("Cart add for user %s item %s: %s", user_id, item["idMeal"], outcome)
        return outcome, line

    def change_quantity(self, user_id: str, id_meal: str, delta: int) -> str:
        # bool is an int subclass; a JSON true is not a quantity delta
        if not _is_id(user_id) or not _is_id(id_meal) or isinstance(delta, bool) or not isinstance(delta, int):
            raise CartValidationError()
        with self._storage("quantity change", user_id):
            outcome = self.repository.change_quantity(user_id, id_meal, delta)
        logger.info("Cart quantity %+d for user %s item %s: %s", delta, user_id, id_meal, outcome)
        return outcome

    def remove_item(self, user_id: str, id_meal: str) -> bool:
        if not _is_id(user_id) or not _is_id(id_meal):
            raise CartValidationError()
        with self._storage("remove", user_id):
            removed = self.repository.remove_item(user_id, id_meal)
        logger.debug("Cart remove for user %s item %s (present=%s)", user_id, id_meal, removed)
        return removed

    def clear_cart(self, user_id: str) -> None:
        if not _is_id(user_id):
            raise CartValidationError()
        with self._storage("clear", user_id):
            self.repository.delete_cart(user_id)
        logger.info("Cart cleared for user %s", user_id)

    def get_cart(self, user_id: str) -> Dict[str, Any]:
        """Items plus subtotal/tax/total. A missing cart reads as an empty one."""
        if not _is_id(user_id):
            raise CartValidationError()
        with self._storage("read", user_id):
            items = self.repository.get_items(user_id)
        return {"items": items, **calculate_cart_totals(items, self.tax_rate)}
