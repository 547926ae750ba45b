from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class DishSnapshot:
    id: int
    name: str
    price: Decimal
    image: str
    discount_price: Optional[Decimal] = None
    restaurant_id: Optional[int] = None
    restaurant_name: Optional[str] = None
    description: Optional[str] = None
    preparation_time: Optional[int] = None

    @property
    def unit_price(self) -> Decimal:
        if self.discount_price:
            return self.discount_price
        return self.price
