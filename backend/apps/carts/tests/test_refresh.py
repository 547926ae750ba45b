import unittest
from decimal import Decimal

from apps.carts.dtos import UNKNOWN_RESTAURANT_ID, UNKNOWN_RESTAURANT_NAME, CartResponse
from apps.carts.refresh import FAILURE_LABEL, RestaurantIdentityRefresher

from .fakes import StubDishes, make_item, make_snapshot


class RecordingStore:
    def __init__(self):
        self.batches = []
        self.notified = []

    def update_cache(self, batch, notify=True):
        self.batches.append(list(batch))
        self.notified.append(notify)
        return len(self.batches[-1])


def unknown(dish_id, quantity=1, **extra):
    return make_item(
        dish_id,
        quantity,
        restaurant_id=UNKNOWN_RESTAURANT_ID,
        restaurant_name=UNKNOWN_RESTAURANT_NAME,
        **extra,
    )


class RestaurantIdentityRefresherTests(unittest.TestCase):
    def setUp(self):
        self.dishes = StubDishes({
            7: make_snapshot(7, price="12.00", restaurant_id=3, restaurant_name="Pho 24"),
            8: make_snapshot(8, restaurant_id=None, restaurant_name=None),
        })
        self.store = RecordingStore()
        self.refresher = RestaurantIdentityRefresher(self.dishes, self.store)

    def test_needs_refresh(self):
        self.assertTrue(self.refresher.needs_refresh(unknown(1)))
        self.assertTrue(self.refresher.needs_refresh(make_item(1, restaurant_name="Updating...")))
        self.assertTrue(self.refresher.needs_refresh(make_item(1, restaurant_name="")))
        self.assertFalse(self.refresher.needs_refresh(make_item(1)))

    def test_complete_cart_returned_untouched(self):
        response = CartResponse.from_items([make_item(1), make_item(2)])
        self.assertIs(self.refresher.refresh(response, authenticated=False), response)
        self.assertEqual(self.dishes.requested, [])

    def test_resolved_identity_replaces_placeholder(self):
        response = CartResponse.from_items([make_item(1, 2), unknown(7, 2, price="9.00")])
        refreshed = self.refresher.refresh(response, authenticated=False)

        item = refreshed.item(7)
        self.assertEqual((item.restaurant_id, item.restaurant_name), (3, "Pho 24"))
        self.assertEqual(item.unit_price, Decimal("12.00"))
        self.assertEqual(refreshed.total_price, Decimal("44.00"))
        self.assertEqual(refreshed.total_items, 4)
        self.assertEqual(self.dishes.requested, [7])

    def test_guest_cache_written_back(self):
        response = CartResponse.from_items([unknown(7)])
        self.refresher.refresh(response, authenticated=False)
        self.assertEqual(len(self.store.batches), 1)
        self.assertEqual(self.store.batches[0][0]["restaurantId"], 3)
        self.assertEqual(self.store.notified, [False])

    def test_authenticated_cart_not_written_back(self):
        response = CartResponse.from_items([unknown(7)])
        self.refresher.refresh(response, authenticated=True)
        self.assertEqual(self.store.batches, [])

    def test_unresolvable_lines_are_labelled(self):
        response = CartResponse.from_items([unknown(8), unknown(404)])
        refreshed = self.refresher.refresh(response, authenticated=False)
        self.assertEqual([i.name for i in refreshed.items], [str(FAILURE_LABEL)] * 2)
        self.assertIs(type(refreshed.item(8).name), str)
        self.assertEqual(refreshed.item(8).restaurant_id, UNKNOWN_RESTAURANT_ID)
        self.assertEqual(self.store.batches, [])

    def test_custom_placeholders(self):
        refresher = RestaurantIdentityRefresher(
            self.dishes, self.store, placeholders=["TBD"], failure_label="n/a"
        )
        self.assertTrue(refresher.needs_refresh(make_item(1, restaurant_name="TBD")))
        self.assertFalse(refresher.needs_refresh(make_item(1, restaurant_name="Updating...")))
