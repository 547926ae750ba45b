from __future__ import annotations

from dataclasses import replace
from typing import FrozenSet, Iterable, Optional

from django.utils.translation import gettext_lazy as _

from apps.catalog.mappers import DishSnapshotMapper
from apps.catalog.protocols import DishLookupProtocol
from apps.common import get_logger

from .dtos import UNKNOWN_RESTAURANT_ID, UNKNOWN_RESTAURANT_NAME, CartResponse, EnrichedCartItem
from .protocols import GuestStoreProtocol

logger = get_logger(__name__).bind(component="carts", layer="refresh")

PLACEHOLDER_RESTAURANT_NAMES = frozenset(
    {UNKNOWN_RESTAURANT_NAME, "Updating...", "Loading...", "Đang cập nhật..."}
)
FAILURE_LABEL = _("Dish details unavailable")


class RestaurantIdentityRefresher:
    """
    Repairs missing or placeholder merchant identity on cart items.

    Runs over an already-built CartResponse. Resolved identities are written
    back into the guest cache for guests; authenticated carts are left to the
    server.
    """

    def __init__(
        self,
        dishes: DishLookupProtocol,
        store: GuestStoreProtocol,
        *,
        placeholders: Optional[Iterable[str]] = None,
        failure_label=FAILURE_LABEL,
    ):
        self.dishes = dishes
        self.store = store
        self.placeholders: FrozenSet[str] = frozenset(
            placeholders if placeholders is not None else PLACEHOLDER_RESTAURANT_NAMES
        )
        self.failure_label = failure_label
        self.logger = logger.bind(service="RestaurantIdentityRefresher")

    def needs_refresh(self, item: EnrichedCartItem) -> bool:
        if item.restaurant_id is None or item.restaurant_id == UNKNOWN_RESTAURANT_ID:
            return True
        return not item.restaurant_name or item.restaurant_name in self.placeholders

    def refresh(self, response: CartResponse, *, authenticated: bool) -> CartResponse:
        flagged = [item.dish_id for item in response.items if self.needs_refresh(item)]
        if not flagged:
            return response
        self.logger.info("Refreshing restaurant identity", dish_ids=flagged)
        snapshots = self.dishes.get_snapshots(flagged)
        items = []
        resolved = []
        for item in response.items:
            if item.dish_id not in flagged:
                items.append(item)
                continue
            snapshot = snapshots.get(item.dish_id)
            if snapshot is None or not snapshot.restaurant_id:
                self.logger.warning("Restaurant identity unresolved", dish_id=item.dish_id)
                items.append(replace(item, name=str(self.failure_label)))
                continue
            items.append(
                replace(
                    item,
                    restaurant_id=snapshot.restaurant_id,
                    restaurant_name=snapshot.restaurant_name or item.restaurant_name,
                    name=snapshot.name,
                    unit_price=snapshot.unit_price,
                    image=snapshot.image,
                )
            )
            resolved.append(snapshot)
        if resolved and not authenticated:
            self.store.update_cache(
                (DishSnapshotMapper.to_cache_info(s) for s in resolved), notify=False
            )
        return CartResponse.from_items(items)
