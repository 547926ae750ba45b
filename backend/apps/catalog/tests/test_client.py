import threading
import unittest
from decimal import Decimal

from apps.catalog.client import DishClient


class StubResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = ""

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


class StubHttp:
    """Answers by URL; unknown URLs are 404s."""

    def __init__(self, routes):
        self.headers = {}
        self.routes = routes
        self.calls = []
        self._lock = threading.Lock()

    def request(self, method, url, **kwargs):
        with self._lock:
            self.calls.append(url)
        return self.routes.get(url, StubResponse(404, {"message": "Not found"}))


def dish(dish_id, **extra):
    payload = {"id": dish_id, "name": f"Dish {dish_id}", "price": "10.00", "merchantId": 1}
    payload.update(extra)
    return payload


def build_client(routes):
    http = StubHttp(routes)
    client = DishClient(
        "http://api.test", http=http, origin="http://backend.test", max_workers=4
    )
    return client, http


class DishClientTests(unittest.TestCase):
    def test_enveloped_payload(self):
        client, _ = build_client({
            "http://api.test/dishes/7": StubResponse(
                200, {"data": dish(7, imageUrl="/uploads/7.jpg", discountPrice="8.00")}
            ),
        })
        snapshot = client.get_snapshot(7)
        self.assertEqual(snapshot.id, 7)
        self.assertEqual(snapshot.unit_price, Decimal("8.00"))
        self.assertEqual(snapshot.image, "http://backend.test/uploads/7.jpg")

    def test_bare_payload(self):
        client, _ = build_client({"http://api.test/dishes/7": StubResponse(200, dish(7))})
        self.assertEqual(client.get_snapshot(7).name, "Dish 7")

    def test_not_found_is_none(self):
        client, _ = build_client({})
        self.assertIsNone(client.get_snapshot(404))

    def test_server_error_is_none(self):
        client, _ = build_client({"http://api.test/dishes/7": StubResponse(500, {"message": "x"})})
        self.assertIsNone(client.get_snapshot(7))

    def test_malformed_payload_is_none(self):
        client, _ = build_client({
            "http://api.test/dishes/7": StubResponse(200, {"id": 7, "name": "No price"}),
            "http://api.test/dishes/8": StubResponse(200, ["not", "an", "object"]),
        })
        self.assertIsNone(client.get_snapshot(7))
        self.assertIsNone(client.get_snapshot(8))

    def test_get_snapshots_dedupes_and_keeps_missing(self):
        client, http = build_client({
            "http://api.test/dishes/1": StubResponse(200, dish(1)),
            "http://api.test/dishes/2": StubResponse(200, dish(2)),
        })
        result = client.get_snapshots([1, 2, 1, 3])
        self.assertEqual(list(result), [1, 2, 3])
        self.assertIsNone(result[3])
        self.assertEqual(result[2].name, "Dish 2")
        self.assertEqual(sorted(http.calls), [
            "http://api.test/dishes/1",
            "http://api.test/dishes/2",
            "http://api.test/dishes/3",
        ])

    def test_get_snapshots_empty(self):
        client, http = build_client({})
        self.assertEqual(client.get_snapshots([]), {})
        self.assertEqual(http.calls, [])
