from __future__ import annotations

import threading
from typing import Callable, List, Optional

from apps.catalog.mappers import DishSnapshotMapper
from apps.catalog.protocols import DishLookupProtocol
from apps.common import get_logger
from apps.common.exceptions import CartError
from apps.common.session import Session
from apps.common.signals import cart_changed

from .dtos import CartResponse
from .mappers import CartItemMapper
from .protocols import GuestStoreProtocol, RemoteCartProtocol

logger = get_logger(__name__).bind(component="carts", layer="read_model")

Listener = Callable[["CartReadModel"], None]


class CartReadModel:
    """
    One cart view for both auth modes, rebuilt on every ``cart_changed``.

    ``data``/``is_loading``/``error`` mirror what a view renders. Rebuilds are
    whole re-fetches; when two overlap, only the most recently started one is
    applied.
    """

    def __init__(
        self,
        session: Session,
        remote: RemoteCartProtocol,
        dishes: DishLookupProtocol,
        store: GuestStoreProtocol,
        refresher=None,
    ):
        self.session = session
        self.remote = remote
        self.dishes = dishes
        self.store = store
        self.refresher = refresher
        self.data: Optional[CartResponse] = None
        self.is_loading = False
        self.error: Optional[CartError] = None
        self.logger = logger.bind(model="CartReadModel")
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._generation = 0
        self._uid = f"cart-read-model-{id(self)}"

    def start(self) -> None:
        cart_changed.connect(self._on_cart_changed, weak=False, dispatch_uid=self._uid)

    def stop(self) -> None:
        cart_changed.disconnect(dispatch_uid=self._uid)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _on_cart_changed(self, sender=None, **kwargs) -> None:
        self.refetch()

    def refetch(self) -> Optional[CartResponse]:
        with self._lock:
            self._generation += 1
            generation = self._generation
            self.is_loading = True
        authenticated = self.session.is_authenticated
        try:
            response = self._build_remote() if authenticated else self._build_guest()
            if self.refresher is not None:
                response = self.refresher.refresh(response, authenticated=authenticated)
        except CartError as exc:
            self.logger.warning("Cart read failed", code=exc.code, error=exc.message)
            with self._lock:
                if generation == self._generation:
                    self.error = exc
                    self.is_loading = False
            self._publish()
            return self.data
        with self._lock:
            if generation != self._generation:
                self.logger.debug("Discarding superseded cart read", generation=generation)
                return self.data
            self.data = response
            self.error = None
            self.is_loading = False
        self._publish()
        return response

    def _publish(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _build_remote(self) -> CartResponse:
        response = self.remote.get_cart()
        self.logger.debug("Server cart loaded", items=len(response.items))
        return response

    def _build_guest(self) -> CartResponse:
        lines = self.store.get_cart()
        if not lines:
            return CartResponse.empty()
        snapshots = self.dishes.get_snapshots(line.dish_id for line in lines)
        items = []
        for line in lines:
            snapshot = snapshots.get(line.dish_id)
            if snapshot is None:
                self.logger.info("Dropping unresolvable guest line", dish_id=line.dish_id)
                continue
            items.append(CartItemMapper.from_guest(line, snapshot))
        needing = {line.dish_id for line in self.store.get_items_needing_refresh()}
        batch = [
            DishSnapshotMapper.to_cache_info(snapshot)
            for dish_id, snapshot in snapshots.items()
            if snapshot is not None and dish_id in needing
        ]
        if batch:
            self.store.update_cache(batch, notify=False)
        return CartResponse.from_items(items)
