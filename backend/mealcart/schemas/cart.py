"""
mealcart/schemas/cart.py - Pydantic models for the cart API.
"""
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


def _int_to_str(v: Any) -> Any:
    # numeric ids arrive as JSON numbers from some clients; they address the same cart as "123"
    if isinstance(v, int) and not isinstance(v, bool):
        return str(v)
    return v


class CartItemIn(BaseModel):
    """Meal descriptor sent by the client. Everything besides idMeal is passed through verbatim."""
    model_config = ConfigDict(extra="allow")

    idMeal: str = Field(..., min_length=1, description="External meal id (cart de-duplication key).")

    @field_validator("idMeal", mode="before")
    @classmethod
    def _id_meal_to_str(cls, v: Any) -> Any:
        return _int_to_str(v)

    @field_validator("idMeal")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("idMeal cannot be blank")
        return v


class AddItemBody(BaseModel):
    userId: str = Field(..., min_length=1, description="Cart owner id.")
    item: CartItemIn

    @field_validator("userId", mode="before")
    @classmethod
    def _user_id_to_str(cls, v: Any) -> Any:
        return _int_to_str(v)

    @field_validator("userId")
    @classmethod
    def _user_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("userId cannot be blank")
        return v


class QuantityChangeBody(BaseModel):
    change: StrictInt = Field(..., description="Signed quantity delta, usually +1 or -1.")


class LineItem(BaseModel):
    """A stored cart line: the client's descriptor plus server-side quantity and price."""
    model_config = ConfigDict(extra="allow")

    idMeal: str
    quantity: int = Field(..., ge=1)
    price: float


class CartView(BaseModel):
    items: List[LineItem] = Field(default_factory=list)
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0


AddOutcome = Literal["created", "added", "unchanged"]


class AddItemData(BaseModel):
    status: AddOutcome
    userId: str
    item: Dict[str, Any]


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class AddItemResponse(MessageResponse):
    data: AddItemData


class CartResponse(BaseModel):
    success: bool = True
    cart: CartView


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
