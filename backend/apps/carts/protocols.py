from __future__ import annotations

from typing import Any, Callable, Iterable, List, Mapping, Optional, Protocol

from apps.guest.dtos import CartLine, SyncPair

from .dtos import CartResponse


class RemoteCartProtocol(Protocol):
    def get_cart(self) -> CartResponse:
        ...

    def add_item(self, dish_id: int, quantity: int) -> None:
        ...

    def update_item(self, dish_id: int, quantity: int) -> None:
        ...

    def remove_item(self, dish_id: int) -> None:
        ...

    def clear_cart(self) -> None:
        ...

    def get_count(self) -> int:
        ...


class GuestStoreProtocol(Protocol):
    def get_cart(self) -> List[CartLine]:
        ...

    def add_item(self, dish_id: int, quantity: int, info: Optional[Mapping[str, Any]] = None) -> CartLine:
        ...

    def update_item(self, dish_id: int, quantity: int) -> None:
        ...

    def remove_item(self, dish_id: int) -> None:
        ...

    def clear_cart(self) -> None:
        ...

    def get_total_count(self) -> int:
        ...

    def get_items_needing_refresh(self) -> List[CartLine]:
        ...

    def update_cache(self, batch: Iterable[Mapping[str, Any]], *, notify: bool = True) -> int:
        ...

    def prepare_for_sync(self) -> List[SyncPair]:
        ...


class CartWriterProtocol(Protocol):
    def update(self, dish_id: int, quantity: int) -> None:
        ...

    def remove(self, dish_id: int) -> None:
        ...


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class SchedulerProtocol(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...
