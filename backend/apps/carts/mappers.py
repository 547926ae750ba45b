from decimal import Decimal
from typing import Any, Dict, Optional

from apps.catalog.dtos import DishSnapshot
from apps.catalog.images import absolute_image_url
from apps.guest.dtos import CartLine

from .dtos import UNKNOWN_RESTAURANT_ID, UNKNOWN_RESTAURANT_NAME, EnrichedCartItem


def _unit_price(data: Dict[str, Any]) -> Decimal:
    if data.get("discountPrice"):
        return data["discountPrice"]
    if data.get("price") is not None:
        return data["price"]
    # Some cart payloads only carry the line subtotal.
    subtotal = data.get("subtotal")
    if subtotal is not None and data["quantity"]:
        return subtotal / data["quantity"]
    return Decimal("0")


class CartItemMapper:
    @staticmethod
    def from_remote(data: Dict[str, Any], *, origin: Optional[str] = None) -> EnrichedCartItem:
        return EnrichedCartItem(
            line_id=data.get("id"),
            dish_id=data["dishId"],
            name=data.get("dishName") or data.get("name") or "",
            image=absolute_image_url(data.get("dishImage"), origin),
            unit_price=_unit_price(data),
            quantity=data["quantity"],
            restaurant_id=data.get("restaurantId") or UNKNOWN_RESTAURANT_ID,
            restaurant_name=data.get("restaurantName") or UNKNOWN_RESTAURANT_NAME,
        )

    @staticmethod
    def from_guest(line: CartLine, snapshot: DishSnapshot) -> EnrichedCartItem:
        """Snapshot fields win; the line's cached identity fills merchant gaps."""
        restaurant_id = snapshot.restaurant_id or line.restaurant_id
        restaurant_name = snapshot.restaurant_name
        if not restaurant_name and line.restaurant_id == restaurant_id:
            restaurant_name = line.restaurant_name
        return EnrichedCartItem(
            dish_id=line.dish_id,
            name=snapshot.name,
            image=snapshot.image,
            unit_price=snapshot.unit_price,
            quantity=line.quantity,
            restaurant_id=restaurant_id or UNKNOWN_RESTAURANT_ID,
            restaurant_name=restaurant_name or UNKNOWN_RESTAURANT_NAME,
        )
