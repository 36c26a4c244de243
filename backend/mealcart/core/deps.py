# mealcart/core/deps.py
from fastapi import Request

from mealcart.services.cart_service import CartService


def get_cart_service(request: Request) -> CartService:
    """The CartService built once at startup (see mealcart.main)."""
    return request.app.state.cart_service
