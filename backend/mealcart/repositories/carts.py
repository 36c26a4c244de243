"""
Firestore persistence for carts.

Layout: `{prefix}carts/{cart_doc_id(userId)}` -> {userId, items: [...], createdAt, updatedAt}

userId is opaque, so it is percent-encoded before it becomes a document id ("/" would otherwise
open a subcollection, and ".", ".." or "__x__" are reserved ids). The raw value stays in the
userId field.

Every mutation that depends on the current items runs in a Firestore transaction, so the
read-check-write (duplicate check on add, quantity arithmetic on adjust) is atomic per cart.
"""
from typing import Any, Dict, List, Mapping, Protocol, Tuple
from urllib.parse import quote

from firebase_admin import firestore
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from mealcart.core.errors import CartItemNotFoundError
from mealcart.services.cart_logic import (
    DEFAULT_PRICE,
    change_quantity,
    find_item,
    make_line_item,
    merge_item,
    remove_item,
)


class CartRepository(Protocol):
    def get_items(self, user_id: str) -> List[Dict[str, Any]]: ...
    def add_item(self, user_id: str, item: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]: ...
    def change_quantity(self, user_id: str, id_meal: str, delta: int) -> str: ...
    def remove_item(self, user_id: str, id_meal: str) -> bool: ...
    def delete_cart(self, user_id: str) -> None: ...


def cart_doc_id(user_id: str) -> str:
    """
    Firestore-safe, injective document id for a userId.
    quote() already escapes "%", so also escaping "." and "_" keeps distinct ids distinct.
    """
    return quote(user_id, safe="").replace(".", "%2E").replace("_", "%5F")


def _items_of(snap) -> List[Dict[str, Any]]:
    data = snap.to_dict() or {}
    return list(data.get("items") or [])


@firestore.transactional
def _add_item_tx(transaction, ref, user_id: str, item: Mapping[str, Any], price: float):
    snap = ref.get(transaction=transaction)
    if not snap.exists:
        line = make_line_item(item, price)
        transaction.set(ref, {
            "userId": user_id,
            "items": [line],
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        })
        return "created", line

    items = _items_of(snap)
    new_items, line = merge_item(items, item, price)
    if line is None:
        # already in the cart: keep the stored line, only touch updatedAt
        transaction.update(ref, {"updatedAt": SERVER_TIMESTAMP})
        return "unchanged", dict(find_item(items, item["idMeal"]))
    transaction.update(ref, {"items": new_items, "updatedAt": SERVER_TIMESTAMP})
    return "added", line


@firestore.transactional
def _change_quantity_tx(transaction, ref, id_meal: str, delta: int) -> str:
    snap = ref.get(transaction=transaction)
    if not snap.exists:
        raise CartItemNotFoundError()
    new_items, outcome = change_quantity(_items_of(snap), id_meal, delta)
    transaction.update(ref, {"items": new_items, "updatedAt": SERVER_TIMESTAMP})
    return outcome


@firestore.transactional
def _remove_item_tx(transaction, ref, id_meal: str) -> bool:
    snap = ref.get(transaction=transaction)
    if not snap.exists:
        return False
    items = _items_of(snap)
    new_items = remove_item(items, id_meal)
    if len(new_items) == len(items):
        return False
    transaction.update(ref, {"items": new_items, "updatedAt": SERVER_TIMESTAMP})
    return True


class FirestoreCartRepository:
    def __init__(self, db, collection: str = "carts", default_price: float = DEFAULT_PRICE):
        self._db = db
        self.collection = collection
        self.default_price = default_price

    def _ref(self, user_id: str):
        return self._db.collection(self.collection).document(cart_doc_id(user_id))

    def get_items(self, user_id: str) -> List[Dict[str, Any]]:
        snap = self._ref(user_id).get()
        if not snap.exists:
            return []
        return _items_of(snap)

    def add_item(self, user_id: str, item: Mapping[str, Any]) -> Tuple[str, Dict[str, Any]]:
        """Returns (outcome, line) with outcome in created / added / unchanged."""
        return _add_item_tx(self._db.transaction(), self._ref(user_id), user_id, item, self.default_price)

    def change_quantity(self, user_id: str, id_meal: str, delta: int) -> str:
        return _change_quantity_tx(self._db.transaction(), self._ref(user_id), id_meal, delta)

    def remove_item(self, user_id: str, id_meal: str) -> bool:
        """True when a line was actually removed."""
        return _remove_item_tx(self._db.transaction(), self._ref(user_id), id_meal)

    def delete_cart(self, user_id: str) -> None:
        # Firestore delete is a no-op for missing documents
        self._ref(user_id).delete()
