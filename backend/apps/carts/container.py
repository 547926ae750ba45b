from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from apps.catalog.client import DishClient
from apps.catalog.container import build_dish_client
from apps.common.notices import LoggingNotifier, Notifier
from apps.common.session import Session
from apps.common.signals import session_authenticated, session_ended
from apps.guest.container import build_guest_store
from apps.guest.store import GuestCartStore

from .mutations import MutationCoordinator
from .read_model import CartReadModel
from .refresh import RestaurantIdentityRefresher
from .remote import RemoteCartClient
from .selection import CartSelection
from .services import CartService
from .sync import GuestCartSync
from .writers import GuestCartWriter, RemoteCartWriter, SessionCartWriter


@dataclass
class CartEngine:
    session: Session
    store: GuestCartStore
    dishes: DishClient
    remote: RemoteCartClient
    read_model: CartReadModel
    refresher: RestaurantIdentityRefresher
    coordinator: MutationCoordinator
    selection: CartSelection
    sync: GuestCartSync
    service: CartService

    @property
    def _uid(self) -> str:
        return f"cart-engine-sync-{id(self)}"

    def start(self) -> None:
        self.read_model.start()
        session_authenticated.connect(self._on_login, weak=False, dispatch_uid=self._uid)
        session_ended.connect(self._on_logout, weak=False, dispatch_uid=self._uid)

    def stop(self) -> None:
        self.read_model.stop()
        session_authenticated.disconnect(dispatch_uid=self._uid)
        session_ended.disconnect(dispatch_uid=self._uid)

    def _on_login(self, sender=None, session=None, **kwargs) -> None:
        if session is not self.session:
            return
        self.sync.run()
        # An empty guest cart syncs nothing and sends no cart_changed.
        self.read_model.refetch()

    def _on_logout(self, sender=None, session=None, **kwargs) -> None:
        if session is not self.session:
            return
        self.read_model.refetch()

    def _on_read(self, model: CartReadModel) -> None:
        self.selection.sync(model.data)
        self.coordinator.sync_from(model.data)


def build_cart_engine(
    session: Optional[Session] = None,
    *,
    notifier: Optional[Notifier] = None,
    store: Optional[GuestCartStore] = None,
    dishes: Optional[DishClient] = None,
    remote: Optional[RemoteCartClient] = None,
    scheduler=None,
) -> CartEngine:
    session = session or Session()
    notifier = notifier or LoggingNotifier()
    store = store or build_guest_store()
    dishes = dishes or build_dish_client(session)
    remote = remote or RemoteCartClient(session=session)
    refresher = RestaurantIdentityRefresher(dishes, store)
    read_model = CartReadModel(session, remote, dishes, store, refresher=refresher)
    selection = CartSelection()
    writer = SessionCartWriter(session, GuestCartWriter(store), RemoteCartWriter(remote))
    coordinator = MutationCoordinator(
        writer,
        refetch=read_model.refetch,
        notifier=notifier,
        scheduler=scheduler,
        on_removed=selection.discard,
    )
    engine = CartEngine(
        session=session,
        store=store,
        dishes=dishes,
        remote=remote,
        read_model=read_model,
        refresher=refresher,
        coordinator=coordinator,
        selection=selection,
        sync=GuestCartSync(store, remote),
        service=CartService(session, store, remote, notifier),
    )
    read_model.subscribe(engine._on_read)
    return engine
