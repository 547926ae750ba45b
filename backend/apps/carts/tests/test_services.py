import unittest
from datetime import timedelta

from apps.carts.services import ADD_FAILED, ADDED, DISH_UNAVAILABLE, CartService
from apps.carts.selection import CartSelection
from apps.common.notices import RecordingNotifier
from apps.common.session import Session
from apps.common.signals import cart_changed
from apps.guest.store import GuestCartStore

from .fakes import FakeRemote, MemoryStorage, make_item


class CartServiceTestCase(unittest.TestCase):
    token = None

    def setUp(self):
        self.session = Session(self.token)
        self.store = GuestCartStore(MemoryStorage(), cache_ttl=timedelta(hours=24))
        self.remote = FakeRemote()
        self.notifier = RecordingNotifier()
        self.service = CartService(self.session, self.store, self.remote, self.notifier)
        self.signals = []
        cart_changed.connect(
            lambda sender, **kw: self.signals.append(sender),
            weak=False,
            dispatch_uid="cart-service-tests",
        )
        self.addCleanup(cart_changed.disconnect, dispatch_uid="cart-service-tests")


class GuestServiceTests(CartServiceTestCase):
    def test_add_goes_to_guest_store(self):
        self.assertTrue(self.service.add_to_cart(7, 2, {"name": "Pho"}))
        self.assertEqual(self.store.get_cart()[0].name, "Pho")
        self.assertEqual(self.remote.calls, [])
        self.assertEqual(self.notifier.of_kind("success"), [str(ADDED)])

    def test_add_clamps_quantity(self):
        self.service.add_to_cart(7, 0)
        self.assertEqual(self.service.get_count(), 1)

    def test_clear(self):
        self.service.add_to_cart(7, 2)
        self.assertTrue(self.service.clear())
        self.assertEqual(self.service.get_count(), 0)

    def test_checkout_requires_login(self):
        selection = CartSelection()
        decision = self.service.checkout(selection)
        self.assertFalse(decision.can_proceed)
        self.assertEqual(len(self.notifier.of_kind("error")), 1)


class AuthenticatedServiceTests(CartServiceTestCase):
    token = "token"

    def test_add_goes_to_server_and_announces_change(self):
        self.assertTrue(self.service.add_to_cart(7, 2))
        self.assertEqual(self.remote.calls, [("add", 7, 2)])
        self.assertEqual(self.store.get_cart(), [])
        self.assertEqual(self.signals, [CartService])

    def test_add_of_vanished_dish(self):
        self.remote.missing_dishes = {7}
        self.assertFalse(self.service.add_to_cart(7))
        self.assertEqual(self.notifier.of_kind("error"), [str(DISH_UNAVAILABLE)])
        self.assertEqual(self.signals, [])

    def test_add_network_failure(self):
        self.remote.failing_dishes = {7}
        self.assertFalse(self.service.add_to_cart(7))
        self.assertEqual(self.notifier.of_kind("error"), [str(ADD_FAILED)])

    def test_count_from_server(self):
        self.remote.items = {1: make_item(1, 2), 2: make_item(2, 3)}
        self.assertEqual(self.service.get_count(), 5)

    def test_count_failure_shows_zero(self):
        self.remote.fail_get = True
        self.assertEqual(self.service.get_count(), 0)

    def test_checkout_with_nothing_selected(self):
        self.service.checkout(CartSelection())
        self.assertEqual(len(self.notifier.of_kind("info")), 1)
