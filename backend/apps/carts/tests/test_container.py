import unittest
from datetime import timedelta
from decimal import Decimal

from apps.carts.container import build_cart_engine
from apps.common.notices import RecordingNotifier
from apps.common.session import Session
from apps.guest.store import GuestCartStore

from .fakes import (
    FakeRemote,
    ManualScheduler,
    MemoryStorage,
    StubDishes,
    make_item,
    make_snapshot,
)


class CartEngineTests(unittest.TestCase):
    def setUp(self):
        self.session = Session()
        self.store = GuestCartStore(MemoryStorage(), cache_ttl=timedelta(hours=24))
        self.remote = FakeRemote()
        self.scheduler = ManualScheduler()
        self.notifier = RecordingNotifier()
        self.engine = build_cart_engine(
            self.session,
            notifier=self.notifier,
            store=self.store,
            dishes=StubDishes({
                1: make_snapshot(1, price="10.00"),
                2: make_snapshot(2, price="5.00", restaurant_id=2, restaurant_name="Com Tam"),
            }),
            remote=self.remote,
            scheduler=self.scheduler,
        )
        self.engine.start()
        self.addCleanup(self.engine.stop)

    def test_guest_add_flows_into_view_selection_and_coordinator(self):
        self.engine.service.add_to_cart(1, 2)
        self.engine.service.add_to_cart(2, 1)

        data = self.engine.read_model.data
        self.assertEqual(data.total_price, Decimal("25.00"))
        self.assertEqual(self.engine.coordinator.line(2).quantity, 1)
        self.engine.selection.toggle_group(2)
        self.assertEqual(self.engine.selection.selected_ids, frozenset({2}))

    def test_debounced_edit_reaches_guest_store(self):
        self.engine.service.add_to_cart(1, 1)
        self.engine.coordinator.increment(1)
        self.engine.coordinator.increment(1)
        self.assertEqual(self.store.get_total_count(), 1)

        self.scheduler.fire_all()

        self.assertEqual(self.store.get_total_count(), 3)
        self.assertEqual(self.engine.read_model.data.total_items, 3)

    def test_removal_drops_selection(self):
        self.engine.service.add_to_cart(1, 1)
        self.engine.service.add_to_cart(2, 1)
        self.engine.selection.toggle_all()
        self.engine.coordinator.request_removal(2)
        self.engine.coordinator.confirm_removal(2)
        self.assertEqual(self.engine.selection.selected_ids, frozenset({1}))
        self.assertEqual(self.engine.read_model.data.dish_ids, [1])

    def test_login_migrates_guest_cart(self):
        self.engine.service.add_to_cart(1, 2)
        self.engine.service.add_to_cart(2, 1)

        self.session.login("tok")

        self.assertEqual(sorted(c for c in self.remote.calls if c[0] == "add"), [
            ("add", 1, 2),
            ("add", 2, 1),
        ])
        self.assertEqual(self.store.get_cart(), [])
        self.assertEqual(sorted(self.engine.read_model.data.dish_ids), [1, 2])
        self.assertEqual(self.engine.service.get_count(), 3)

    def test_login_with_empty_guest_cart_loads_server_cart(self):
        self.remote.items = {3: make_item(3, 2)}

        self.session.login("tok")

        self.assertIn(("get_cart",), self.remote.calls)
        self.assertEqual(self.engine.read_model.data.dish_ids, [3])
        self.assertEqual(self.engine.read_model.data.total_items, 2)
        self.assertEqual(self.engine.coordinator.line(3).quantity, 2)

    def test_logout_switches_view_back_to_guest_cart(self):
        self.remote.items = {3: make_item(3, 2)}
        self.session.login("tok")
        self.engine.selection.toggle_all()

        self.session.logout()

        self.assertEqual(self.engine.read_model.data.total_items, 0)
        self.assertIsNone(self.engine.coordinator.line(3))
        self.assertEqual(self.engine.selection.selected_ids, frozenset())

    def test_other_sessions_do_not_trigger_sync(self):
        self.engine.service.add_to_cart(1, 2)
        Session().login("someone-else")
        self.assertEqual(self.remote.calls, [])
        self.assertEqual(self.store.get_total_count(), 2)

    def test_stopped_engine_ignores_login(self):
        self.engine.service.add_to_cart(1, 2)
        self.engine.stop()
        self.session.login("tok")
        self.assertEqual(self.remote.calls, [])


class DefaultWiringTests(unittest.TestCase):
    def test_defaults_share_one_session(self):
        session = Session("tok")
        engine = build_cart_engine(session)
        self.assertIs(engine.dishes.auth, session)
        self.assertIs(engine.remote.auth, session)
        self.assertIs(engine.read_model.session, session)
        self.assertEqual(engine.dishes.base_url, engine.remote.base_url)
