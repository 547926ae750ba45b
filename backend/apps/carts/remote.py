from __future__ import annotations

from typing import Any, Optional

from apps.common import get_logger
from apps.common.exceptions import DishNotFound, NetworkFault, ValidationFault
from apps.common.http import APIResponse, BaseClient, unwrap_envelope

from .dtos import CartResponse
from .mappers import CartItemMapper
from .serializers import (
    CartCountSerializer,
    CartLineWriteSerializer,
    RemoteCartItemSerializer,
    RemoteCartSerializer,
)

logger = get_logger(__name__).bind(component="carts", layer="remote")


class RemoteCartClient(BaseClient):
    """Client for the authenticated user's server-side cart (``/cart``)."""

    prefix = "cart"

    def __init__(self, *args, origin: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.origin = origin
        self.logger = logger.bind(client="RemoteCartClient")

    def _path(self, suffix: str = "") -> str:
        return f"{self.prefix}/{suffix}" if suffix else self.prefix

    def _raise_for(self, response: APIResponse, method: str, path: str, dish_id=None):
        if response.status == 404 and dish_id is not None:
            raise DishNotFound(dish_id)
        raise NetworkFault(
            f"{method} {path} failed",
            status=response.status or None,
            details={"error": response.error},
        )

    def _call(self, method: str, path: str, *, dish_id=None, **kwargs) -> Any:
        response = self._request(method, path, **kwargs)
        if not response.ok:
            self._raise_for(response, method, path, dish_id)
        return unwrap_envelope(response.data)

    @staticmethod
    def _write_body(dish_id: int, quantity: int):
        serializer = CartLineWriteSerializer(data={"dishId": dish_id, "quantity": quantity})
        if not serializer.is_valid():
            raise ValidationFault(
                "Invalid cart line", details={"errors": dict(serializer.errors)}
            )
        return dict(serializer.validated_data)

    def get_cart(self) -> CartResponse:
        payload = self._call("GET", self._path())
        serializer = RemoteCartSerializer(data=payload if isinstance(payload, dict) else {})
        if not isinstance(payload, dict) or not serializer.is_valid():
            raise NetworkFault("Malformed cart payload", details={"payload": payload})
        items = []
        for raw in serializer.validated_data["items"]:
            item_serializer = RemoteCartItemSerializer(data=raw)
            if not item_serializer.is_valid():
                self.logger.warning(
                    "Skipping malformed cart line", errors=dict(item_serializer.errors)
                )
                continue
            items.append(CartItemMapper.from_remote(item_serializer.validated_data, origin=self.origin))
        response = CartResponse.from_items(items)
        reported = serializer.validated_data.get("totalPrice")
        if reported is not None and reported != response.total_price:
            self.logger.info(
                "Server total differs from line subtotals",
                reported=str(reported),
                computed=str(response.total_price),
            )
        return response

    def add_item(self, dish_id: int, quantity: int) -> None:
        body = self._write_body(dish_id, quantity)
        self._call("POST", self._path("add"), dish_id=dish_id, json=body)
        self.logger.info("Added to server cart", dish_id=dish_id, quantity=quantity)

    def update_item(self, dish_id: int, quantity: int) -> None:
        body = self._write_body(dish_id, quantity)
        self._call(
            "PUT",
            self._path(f"update/{dish_id}"),
            dish_id=dish_id,
            json={"quantity": body["quantity"]},
        )
        self.logger.info("Updated server cart line", dish_id=dish_id, quantity=quantity)

    def remove_item(self, dish_id: int) -> None:
        self._call("DELETE", self._path(f"remove/{dish_id}"), dish_id=dish_id)
        self.logger.info("Removed server cart line", dish_id=dish_id)

    def clear_cart(self) -> None:
        self._call("DELETE", self._path("clear"))
        self.logger.info("Cleared server cart")

    def get_count(self) -> int:
        payload = self._call("GET", self._path("count"))
        serializer = CartCountSerializer(data=payload if isinstance(payload, dict) else {})
        if not serializer.is_valid():
            raise NetworkFault("Malformed count payload", details={"payload": payload})
        return serializer.validated_data["count"]
