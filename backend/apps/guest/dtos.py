from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional


def _to_int(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    try:
        return int(raw)
    except (ValueError, TypeError):
        return None


def _to_decimal(raw: Any) -> Optional[Decimal]:
    if raw is None or raw == "" or isinstance(raw, bool):
        return None
    try:
        return Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None


@dataclass(frozen=True)
class CartLine:
    """One guest-local (dish, quantity) pairing plus optional cached display fields."""

    dish_id: int
    quantity: int
    name: Optional[str] = None
    image: Optional[str] = None
    price: Optional[Decimal] = None
    cached_at: Optional[int] = None
    restaurant_id: Optional[int] = None
    restaurant_name: Optional[str] = None

    @property
    def has_display_fields(self) -> bool:
        return bool(self.name) and bool(self.image) and self.price is not None

    def with_quantity(self, quantity: int) -> "CartLine":
        return replace(self, quantity=quantity)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"dishId": self.dish_id, "quantity": self.quantity}
        optional = {
            "name": self.name,
            "image": self.image,
            "price": str(self.price) if self.price is not None else None,
            "cachedAt": self.cached_at,
            "restaurantId": self.restaurant_id,
            "restaurantName": self.restaurant_name,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @staticmethod
    def from_raw(raw: Any) -> Optional["CartLine"]:
        """Parse one stored entry; ``None`` when it cannot be a valid line."""
        if not isinstance(raw, dict):
            return None
        dish_id = _to_int(raw.get("dishId"))
        quantity = _to_int(raw.get("quantity"))
        if not dish_id or quantity is None or quantity <= 0:
            return None
        # Older entries used dishName/dishImage.
        return CartLine(
            dish_id=dish_id,
            quantity=quantity,
            name=raw.get("name") or raw.get("dishName") or None,
            image=raw.get("image") or raw.get("dishImage") or None,
            price=_to_decimal(raw.get("price")),
            cached_at=_to_int(raw.get("cachedAt")),
            restaurant_id=_to_int(raw.get("restaurantId")),
            restaurant_name=raw.get("restaurantName") or None,
        )


@dataclass(frozen=True)
class SyncPair:
    dish_id: int
    quantity: int

    def to_payload(self) -> Dict[str, int]:
        return {"dishId": self.dish_id, "quantity": self.quantity}
