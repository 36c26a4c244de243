# mealcart/core/errors.py
"""
Cart error taxonomy. Each error carries the HTTP status it maps to and a message that is safe
to return to the caller; `mealcart.main` registers one handler that renders all of them.
"""


class CartError(Exception):
    status_code = 500
    message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class CartValidationError(CartError):
    """Missing or malformed input, rejected before any storage access."""
    status_code = 400
    message = "Invalid request data"


class CartItemNotFoundError(CartError):
    status_code = 404
    message = "Item not found"


class CartStorageError(CartError):
    """Any Firestore failure. The public message never carries driver details."""
    status_code = 500
    message = "Internal Server Error"

    def __init__(self):
        super().__init__()
