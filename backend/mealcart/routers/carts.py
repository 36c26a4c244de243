"""
mealcart/routers/carts.py
Cart endpoints keyed by userId: add a meal, change its quantity, remove it, clear the cart,
and read the cart with subtotal / tax / total.

Behavior
- POST adds a meal once (set semantics on idMeal) at the server's default price; re-adding is a no-op.
- PATCH applies a signed `change` to the quantity; a line that would reach 0 or less is removed.
- DELETE of a line or of the whole cart always succeeds, even if there was nothing to delete.
- GET computes totals on the fly; a missing cart reads as an empty one.

Errors are raised as CartError subclasses and rendered by the handlers in mealcart.main
as {"success": false, "error": ...}.
"""
from fastapi import APIRouter, Depends

from mealcart.core.deps import get_cart_service
from mealcart.schemas.cart import (
    AddItemBody,
    AddItemData,
    AddItemResponse,
    CartResponse,
    CartView,
    ErrorResponse,
    MessageResponse,
    QuantityChangeBody,
)
from mealcart.services.cart_service import CartService

router = APIRouter(
    prefix="/cart",
    tags=["Cart"],
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)

_ADD_MESSAGES = {
    "created": "Cart created and item added",
    "added": "Item added to cart",
    "unchanged": "Item already in cart",
}
_ADJUST_MESSAGES = {
    "updated": "Item quantity updated",
    "removed": "Item removed from cart",
}


def _add_to_cart_impl(payload: AddItemBody, service: CartService) -> AddItemResponse:
    outcome, line = service.add_item(payload.userId, payload.item.model_dump())
    return AddItemResponse(
        message=_ADD_MESSAGES[outcome],
        data=AddItemData(status=outcome, userId=payload.userId, item=line),
    )


@router.post("", response_model=AddItemResponse)
def add_to_cart_no_slash(payload: AddItemBody, service: CartService = Depends(get_cart_service)):
    """Add a meal to the user's cart, creating the cart if needed."""
    return _add_to_cart_impl(payload, service)


@router.post("/", response_model=AddItemResponse, include_in_schema=False)
def add_to_cart_with_slash(payload: AddItemBody, service: CartService = Depends(get_cart_service)):
    return _add_to_cart_impl(payload, service)


@router.patch("/{user_id}/{item_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
def change_item_quantity(
    user_id: str,
    item_id: str,
    payload: QuantityChangeBody,
    service: CartService = Depends(get_cart_service),
):
    """Apply `change` (e.g. +1 / -1) to the quantity of one line."""
    outcome = service.change_quantity(user_id, item_id, payload.change)
    return MessageResponse(message=_ADJUST_MESSAGES[outcome])


@router.delete("/{user_id}/{item_id}", response_model=MessageResponse)
def remove_cart_item(user_id: str, item_id: str, service: CartService = Depends(get_cart_service)):
    service.remove_item(user_id, item_id)
    return MessageResponse(message="Item removed from cart")


@router.get("/{user_id}", response_model=CartResponse)
def get_cart(user_id: str, service: CartService = Depends(get_cart_service)):
    """Cart items plus subtotal, tax and total."""
    return CartResponse(cart=CartView(**service.get_cart(user_id)))


@router.delete("/{user_id}", response_model=MessageResponse)
def clear_cart(user_id: str, service: CartService = Depends(get_cart_service)):
    service.clear_cart(user_id)
    return MessageResponse(message="Cart cleared successfully")
