import unittest
from datetime import timedelta

from apps.carts.writers import GuestCartWriter, RemoteCartWriter, SessionCartWriter
from apps.common.exceptions import NetworkFault
from apps.common.session import Session
from apps.common.signals import cart_changed
from apps.guest.store import GuestCartStore

from .fakes import FakeRemote, MemoryStorage, make_item


class SessionCartWriterTests(unittest.TestCase):
    def setUp(self):
        self.session = Session()
        self.store = GuestCartStore(MemoryStorage(), cache_ttl=timedelta(hours=24))
        self.store.add_item(7, 1)
        self.remote = FakeRemote([make_item(7, 1)])
        self.writer = SessionCartWriter(
            self.session, GuestCartWriter(self.store), RemoteCartWriter(self.remote)
        )
        self.senders = []
        cart_changed.connect(
            lambda sender, **kw: self.senders.append(sender),
            weak=False,
            dispatch_uid="writer-tests",
        )
        self.addCleanup(cart_changed.disconnect, dispatch_uid="writer-tests")

    def test_guest_writes_hit_the_store(self):
        self.writer.update(7, 4)
        self.assertEqual(self.store.get_total_count(), 4)
        self.writer.remove(7)
        self.assertEqual(self.store.get_cart(), [])
        self.assertEqual(self.remote.calls, [])

    def test_authenticated_writes_hit_the_server(self):
        self.session.login("tok")
        self.writer.update(7, 4)
        self.writer.remove(7)
        self.assertEqual(self.remote.calls, [("update", 7, 4), ("remove", 7)])
        self.assertEqual(self.store.get_total_count(), 1)
        self.assertEqual(self.senders, [RemoteCartWriter, RemoteCartWriter])

    def test_failed_server_write_announces_nothing(self):
        self.session.login("tok")
        self.remote.failing_dishes = {7}
        with self.assertRaises(NetworkFault):
            self.writer.update(7, 4)
        self.assertEqual(self.senders, [])
