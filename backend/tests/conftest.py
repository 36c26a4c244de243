"""
Shared fixtures for the cart tests.

The Firestore repository is replaced by an in-memory double that applies the same cart_logic
functions, so the service, the HTTP layer and the rules are exercised without a Firestore project.
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from mealcart.core.errors import CartItemNotFoundError
from mealcart.main import create_app
from mealcart.services.cart_logic import (
    DEFAULT_PRICE,
    change_quantity,
    find_item,
    make_line_item,
    merge_item,
    remove_item,
)
from mealcart.services.cart_service import CartService


class InMemoryCartRepository:
    def __init__(self, default_price: float = DEFAULT_PRICE):
        self.default_price = default_price
        self.carts = {}
        self.fail_with = None

    def _check(self):
        if self.fail_with is not None:
            raise self.fail_with

    def get_items(self, user_id):
        self._check()
        cart = self.carts.get(user_id)
        return [dict(it) for it in cart["items"]] if cart else []

    def add_item(self, user_id, item):
        self._check()
        now = datetime.now(timezone.utc)
        cart = self.carts.get(user_id)
        if cart is None:
            line = make_line_item(item, self.default_price)
            self.carts[user_id] = {"userId": user_id, "items": [line], "createdAt": now, "updatedAt": now}
            return "created", line
        cart["updatedAt"] = now
        new_items, line = merge_item(cart["items"], item, self.default_price)
        if line is None:
            return "unchanged", dict(find_item(cart["items"], item["idMeal"]))
        cart["items"] = new_items
        return "added", line

    def change_quantity(self, user_id, id_meal, delta):
        self._check()
        cart = self.carts.get(user_id)
        if cart is None:
            raise CartItemNotFoundError()
        cart["items"], outcome = change_quantity(cart["items"], id_meal, delta)
        cart["updatedAt"] = datetime.now(timezone.utc)
        return outcome

    def remove_item(self, user_id, id_meal):
        self._check()
        cart = self.carts.get(user_id)
        if cart is None:
            return False
        before = len(cart["items"])
        cart["items"] = remove_item(cart["items"], id_meal)
        return len(cart["items"]) != before

    def delete_cart(self, user_id):
        self._check()
        self.carts.pop(user_id, None)


@pytest.fixture
def repository():
    return InMemoryCartRepository()


@pytest.fixture
def cart_service(repository):
    return CartService(repository, tax_rate=0.1)


@pytest.fixture
def test_client(cart_service):
    return TestClient(create_app(cart_service=cart_service))


@pytest.fixture
def meal():
    return {
        "idMeal": "52772",
        "strMeal": "Teriyaki Chicken Casserole",
        "strMealThumb": "https://www.themealdb.com/images/media/meals/wvpsxx1468256321.jpg",
    }
