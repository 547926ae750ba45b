from __future__ import annotations

from apps.common.session import Session
from apps.common.signals import notify_cart_changed

from .protocols import GuestStoreProtocol, RemoteCartProtocol


class GuestCartWriter:
    """Writes go to the guest store, which persists and announces them itself."""

    def __init__(self, store: GuestStoreProtocol):
        self.store = store

    def update(self, dish_id: int, quantity: int) -> None:
        self.store.update_item(dish_id, quantity)

    def remove(self, dish_id: int) -> None:
        self.store.remove_item(dish_id)


class RemoteCartWriter:
    def __init__(self, remote: RemoteCartProtocol):
        self.remote = remote

    def update(self, dish_id: int, quantity: int) -> None:
        self.remote.update_item(dish_id, quantity)
        notify_cart_changed(sender=self.__class__)

    def remove(self, dish_id: int) -> None:
        self.remote.remove_item(dish_id)
        notify_cart_changed(sender=self.__class__)


class SessionCartWriter:
    """Routes each write to the server cart or the guest store by current auth state."""

    def __init__(self, session: Session, guest: GuestCartWriter, remote: RemoteCartWriter):
        self.session = session
        self.guest = guest
        self.remote = remote

    def _target(self):
        return self.remote if self.session.is_authenticated else self.guest

    def update(self, dish_id: int, quantity: int) -> None:
        self._target().update(dish_id, quantity)

    def remove(self, dish_id: int) -> None:
        self._target().remove(dish_id)
