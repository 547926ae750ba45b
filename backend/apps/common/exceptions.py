from __future__ import annotations

from typing import Any, Dict, Optional


class CartError(Exception):
    """
    Base error for the cart engine.

    Args:
        code: Machine readable error code.
        message: Human readable explanation of the error.
        details: Optional structured details (dish id, HTTP status, ...).
    """

    default_code = "CART_ERROR"

    def __init__(
        self,
        message: str = "Cart operation failed",
        *,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.code = code or self.default_code
        self.message = message
        self.details = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class StorageFault(CartError):
    """The local guest store could not be read or written."""

    default_code = "STORAGE_FAULT"


class DishNotFound(CartError):
    default_code = "NOT_FOUND"

    def __init__(self, dish_id: Any, message: Optional[str] = None):
        super().__init__(
            message or f"Dish {dish_id} not found",
            details={"dishId": dish_id},
        )
        self.dish_id = dish_id


class NetworkFault(CartError):
    """Transient read/write failure talking to the remote API."""

    default_code = "NETWORK_ERROR"

    def __init__(
        self,
        message: str = "Remote request failed",
        *,
        status: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        merged = dict(details or {})
        if status is not None:
            merged["status"] = status
        super().__init__(message, details=merged)
        self.status = status


class ValidationFault(CartError):
    default_code = "VALIDATION_ERROR"
