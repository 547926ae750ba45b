from typing import Any, Dict, Optional, Tuple

from .dtos import DishSnapshot
from .images import resolve_dish_image


def _merchant_identity(data: Dict[str, Any]) -> Tuple[Optional[int], Optional[str]]:
    restaurant_id = data.get("merchantId") or data.get("restaurantId")
    restaurant_name = data.get("merchantName") or data.get("restaurantName")
    for key in ("merchant", "restaurant"):
        nested = data.get(key) or {}
        restaurant_id = restaurant_id or nested.get("id")
        restaurant_name = restaurant_name or nested.get("name")
    return restaurant_id, (restaurant_name or None)


class DishSnapshotMapper:
    @staticmethod
    def from_validated(
        data: Dict[str, Any], *, origin: Optional[str] = None
    ) -> DishSnapshot:
        restaurant_id, restaurant_name = _merchant_identity(data)
        price = data.get("price")
        discount = data.get("discountPrice")
        return DishSnapshot(
            id=data["id"],
            name=data.get("name") or data.get("dishName"),
            price=price if price is not None else discount,
            discount_price=discount if discount else None,
            image=resolve_dish_image(data, origin),
            restaurant_id=restaurant_id,
            restaurant_name=restaurant_name,
            description=data.get("description"),
            preparation_time=data.get("preparationTime"),
        )

    @staticmethod
    def to_cache_info(snapshot: DishSnapshot) -> Dict[str, Any]:
        """Display fields in the shape the guest store caches."""
        return {
            "id": snapshot.id,
            "name": snapshot.name,
            "image": snapshot.image,
            "price": snapshot.unit_price,
            "restaurantId": snapshot.restaurant_id,
            "restaurantName": snapshot.restaurant_name,
        }
