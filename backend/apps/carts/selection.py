from __future__ import annotations

import threading
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from django.utils.translation import gettext_lazy as _

from apps.common import get_logger
from apps.common.session import Session

from .dtos import (
    CartResponse,
    CheckoutDecision,
    CheckoutStatus,
    EnrichedCartItem,
    RestaurantGroup,
    SelectedItem,
    SelectionSummary,
)

logger = get_logger(__name__).bind(component="carts", layer="selection")

LOGIN_REQUIRED = _("Please log in to check out.")
NOTHING_SELECTED = _("Select at least one dish to check out.")


def group_by_restaurant(items: Iterable[EnrichedCartItem]) -> List[RestaurantGroup]:
    """Partition by restaurant id, groups ordered by first appearance."""
    buckets: Dict[int, List[EnrichedCartItem]] = {}
    names: Dict[int, str] = {}
    for item in items:
        buckets.setdefault(item.restaurant_id, []).append(item)
        names.setdefault(item.restaurant_id, item.restaurant_name)
    return [
        RestaurantGroup(restaurant_id=rid, restaurant_name=names[rid], items=tuple(members))
        for rid, members in buckets.items()
    ]


class CartSelection:
    """
    The set of dish ids chosen for checkout.

    Always a subset of the current cart's dish ids. Group and "all" checkbox
    states are computed from the set, never stored.
    """

    def __init__(self, items: Optional[Iterable[EnrichedCartItem]] = None):
        self._items: List[EnrichedCartItem] = list(items or [])
        self._selected: Set[int] = set()
        self._lock = threading.RLock()

    def sync(self, response: Optional[CartResponse]) -> None:
        """Track a fresh cart read and prune ids that left the cart."""
        with self._lock:
            self._items = list(response.items) if response else []
            present = {i.dish_id for i in self._items}
            dropped = self._selected - present
            if dropped:
                logger.debug("Pruning selection", dish_ids=sorted(dropped))
            self._selected &= present

    @property
    def selected_ids(self) -> frozenset:
        with self._lock:
            return frozenset(self._selected)

    def is_selected(self, dish_id: int) -> bool:
        return dish_id in self._selected

    def groups(self) -> List[RestaurantGroup]:
        return group_by_restaurant(self._items)

    def _group(self, restaurant_id: int) -> Optional[RestaurantGroup]:
        return next((g for g in self.groups() if g.restaurant_id == restaurant_id), None)

    def is_group_selected(self, restaurant_id: int) -> bool:
        group = self._group(restaurant_id)
        if group is None or not group.items:
            return False
        with self._lock:
            return all(d in self._selected for d in group.dish_ids)

    def is_all_selected(self) -> bool:
        with self._lock:
            return bool(self._items) and all(i.dish_id in self._selected for i in self._items)

    def toggle_item(self, dish_id: int, selected: Optional[bool] = None) -> bool:
        with self._lock:
            if all(i.dish_id != dish_id for i in self._items):
                return False
            if selected is None:
                selected = dish_id not in self._selected
            if selected:
                self._selected.add(dish_id)
            else:
                self._selected.discard(dish_id)
            return selected

    def toggle_group(self, restaurant_id: int, selected: Optional[bool] = None) -> bool:
        group = self._group(restaurant_id)
        if group is None:
            return False
        if selected is None:
            selected = not self.is_group_selected(restaurant_id)
        with self._lock:
            if selected:
                self._selected.update(group.dish_ids)
            else:
                self._selected.difference_update(group.dish_ids)
        return selected

    def toggle_all(self, selected: Optional[bool] = None) -> bool:
        if selected is None:
            selected = not self.is_all_selected()
        with self._lock:
            self._selected = {i.dish_id for i in self._items} if selected else set()
        return selected

    def discard(self, dish_id: int) -> None:
        with self._lock:
            self._selected.discard(dish_id)

    def selected_items(self) -> List[EnrichedCartItem]:
        with self._lock:
            return [i for i in self._items if i.dish_id in self._selected]

    def summary(self) -> SelectionSummary:
        items = self.selected_items()
        return SelectionSummary(
            count=sum(i.quantity for i in items),
            price=sum((i.subtotal for i in items), Decimal("0")),
        )

    def checkout(self, session: Session) -> CheckoutDecision:
        if not session.is_authenticated:
            return CheckoutDecision(CheckoutStatus.LOGIN_REQUIRED, message=str(LOGIN_REQUIRED))
        items = self.selected_items()
        if not items:
            return CheckoutDecision(CheckoutStatus.NOTHING_SELECTED, message=str(NOTHING_SELECTED))
        return CheckoutDecision(
            CheckoutStatus.PROCEED,
            items=tuple(SelectedItem(i.dish_id, i.quantity, i.restaurant_id) for i in items),
        )
