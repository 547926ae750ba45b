from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

UNKNOWN_RESTAURANT_ID = -1
UNKNOWN_RESTAURANT_NAME = "Unknown"


@dataclass(frozen=True)
class EnrichedCartItem:
    dish_id: int
    name: str
    image: str
    unit_price: Decimal
    quantity: int
    restaurant_id: int = UNKNOWN_RESTAURANT_ID
    restaurant_name: str = UNKNOWN_RESTAURANT_NAME
    line_id: Optional[int] = None

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.line_id,
            "dishId": self.dish_id,
            "dishName": self.name,
            "dishImage": self.image,
            "price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
            "restaurantId": self.restaurant_id,
            "restaurantName": self.restaurant_name,
        }


@dataclass(frozen=True)
class CartResponse:
    items: Tuple[EnrichedCartItem, ...] = ()
    total_items: int = 0
    total_price: Decimal = Decimal("0")

    @classmethod
    def from_items(cls, items: Iterable[EnrichedCartItem]) -> "CartResponse":
        items = tuple(items)
        return cls(
            items=items,
            total_items=sum(i.quantity for i in items),
            total_price=sum((i.subtotal for i in items), Decimal("0")),
        )

    @classmethod
    def empty(cls) -> "CartResponse":
        return cls()

    @property
    def dish_ids(self) -> List[int]:
        return [i.dish_id for i in self.items]

    def item(self, dish_id: int) -> Optional[EnrichedCartItem]:
        return next((i for i in self.items if i.dish_id == dish_id), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "items": [i.to_dict() for i in self.items],
            "totalItems": self.total_items,
            "totalPrice": self.total_price,
        }


@dataclass(frozen=True)
class RestaurantGroup:
    restaurant_id: int
    restaurant_name: str
    items: Tuple[EnrichedCartItem, ...]

    @property
    def dish_ids(self) -> List[int]:
        return [i.dish_id for i in self.items]

    @property
    def total_items(self) -> int:
        return sum(i.quantity for i in self.items)

    @property
    def total_price(self) -> Decimal:
        return sum((i.subtotal for i in self.items), Decimal("0"))


@dataclass(frozen=True)
class SelectionSummary:
    count: int
    price: Decimal


class CheckoutStatus(str, Enum):
    PROCEED = "proceed"
    LOGIN_REQUIRED = "login_required"
    NOTHING_SELECTED = "nothing_selected"


@dataclass(frozen=True)
class SelectedItem:
    dish_id: int
    quantity: int
    restaurant_id: int


@dataclass(frozen=True)
class CheckoutDecision:
    status: CheckoutStatus
    items: Tuple[SelectedItem, ...] = ()
    message: Optional[str] = None

    @property
    def can_proceed(self) -> bool:
        return self.status is CheckoutStatus.PROCEED


@dataclass
class SyncReport:
    attempted: int = 0
    succeeded: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def partial_failure(self) -> bool:
        return bool(self.failed)
