from __future__ import annotations

from typing import Any, Mapping, Optional

from django.utils.translation import gettext_lazy as _

from apps.common import get_logger
from apps.common.exceptions import CartError, DishNotFound
from apps.common.notices import Notifier
from apps.common.session import Session
from apps.common.signals import notify_cart_changed

from .dtos import CheckoutDecision, CheckoutStatus
from .protocols import GuestStoreProtocol, RemoteCartProtocol
from .quantities import clamp_quantity
from .selection import CartSelection

logger = get_logger(__name__).bind(component="carts", layer="service")

ADDED = _("Added to your cart.")
ADD_FAILED = _("Could not add the dish to your cart.")
DISH_UNAVAILABLE = _("This dish is no longer available.")
CLEAR_FAILED = _("Could not empty your cart.")


class CartService:
    """Entry points the storefront calls outside a single cart row."""

    def __init__(
        self,
        session: Session,
        store: GuestStoreProtocol,
        remote: RemoteCartProtocol,
        notifier: Notifier,
    ):
        self.session = session
        self.store = store
        self.remote = remote
        self.notifier = notifier
        self.logger = logger.bind(service="CartService")

    def add_to_cart(
        self, dish_id: int, quantity: int = 1, info: Optional[Mapping[str, Any]] = None
    ) -> bool:
        quantity = clamp_quantity(quantity)
        if not self.session.is_authenticated:
            # Missing display info is fine; the next read enriches it.
            self.store.add_item(dish_id, quantity, info)
            self.notifier.success(ADDED)
            return True
        try:
            self.remote.add_item(dish_id, quantity)
        except DishNotFound:
            self.logger.info("Add blocked, dish gone", dish_id=dish_id)
            self.notifier.error(DISH_UNAVAILABLE)
            return False
        except CartError as exc:
            self.logger.warning("Add to cart failed", dish_id=dish_id, code=exc.code)
            self.notifier.error(ADD_FAILED)
            return False
        self.notifier.success(ADDED)
        notify_cart_changed(sender=self.__class__)
        return True

    def get_count(self) -> int:
        """Badge counter; a failed server read shows 0 instead of raising."""
        if not self.session.is_authenticated:
            return self.store.get_total_count()
        try:
            return self.remote.get_count()
        except CartError as exc:
            self.logger.warning("Cart count unavailable", code=exc.code)
            return 0

    def clear(self) -> bool:
        if not self.session.is_authenticated:
            self.store.clear_cart()
            return True
        try:
            self.remote.clear_cart()
        except CartError as exc:
            self.logger.warning("Clearing server cart failed", code=exc.code)
            self.notifier.error(CLEAR_FAILED)
            return False
        notify_cart_changed(sender=self.__class__)
        return True

    def checkout(self, selection: CartSelection) -> CheckoutDecision:
        decision = selection.checkout(self.session)
        if decision.status is CheckoutStatus.LOGIN_REQUIRED:
            self.notifier.error(decision.message)
        elif decision.status is CheckoutStatus.NOTHING_SELECTED:
            self.notifier.info(decision.message)
        else:
            self.logger.info("Checkout ready", lines=len(decision.items))
        return decision
