from __future__ import annotations

import json
import threading
from dataclasses import replace
from datetime import timedelta
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from django.conf import settings
from django.utils import timezone

from apps.common import get_logger
from apps.common.exceptions import StorageFault
from apps.common.signals import notify_cart_changed

from .dtos import CartLine, SyncPair, _to_decimal, _to_int
from .protocols import KeyValueStorageProtocol

logger = get_logger(__name__).bind(component="guest", layer="store")


def _now_ms() -> int:
    return int(timezone.now().timestamp() * 1000)


def _info_fields(info: Mapping[str, Any]) -> Dict[str, Any]:
    """Truthy display fields of an ``info`` mapping, keyed like CartLine attributes."""
    fields = {
        "name": info.get("name") or info.get("dishName"),
        "image": info.get("image") or info.get("dishImage"),
        "price": _to_decimal(info.get("price")),
        "restaurant_id": _to_int(info.get("restaurantId")),
        "restaurant_name": info.get("restaurantName"),
    }
    return {k: v for k, v in fields.items() if v}


class GuestCartStore:
    """
    Durable CRUD over the unauthenticated visitor's cart lines.

    Every mutator replaces the whole list, persists it, then sends
    ``cart_changed``. Storage faults never escape: reads degrade to the last
    in-memory copy (empty at first), writes keep the new list in memory.
    """

    def __init__(
        self,
        storage: KeyValueStorageProtocol,
        *,
        cache_ttl: Optional[timedelta] = None,
        clock: Optional[Callable[[], int]] = None,
    ):
        self.storage = storage
        self.cache_ttl = cache_ttl or timedelta(hours=settings.FOODCART_CACHE_TTL_HOURS)
        self.clock = clock or _now_ms
        self.logger = logger.bind(store="GuestCartStore")
        self._lock = threading.RLock()
        self._fallback: Optional[List[CartLine]] = None

    # -- reads -------------------------------------------------------------

    def _read_raw(self) -> List[Any]:
        if self._fallback is not None:
            return [line.to_dict() for line in self._fallback]
        try:
            document = self.storage.read()
        except StorageFault as exc:
            self.logger.warning("Guest cart unreadable, using empty cart", error=str(exc))
            self._fallback = []
            return []
        if not document:
            return []
        try:
            raw = json.loads(document)
        except (TypeError, ValueError):
            self.logger.warning("Guest cart is not valid JSON, ignoring it")
            return []
        if not isinstance(raw, list):
            self.logger.warning("Guest cart is not a list, ignoring it", kind=type(raw).__name__)
            return []
        return raw

    def get_cart(self) -> List[CartLine]:
        with self._lock:
            raw = self._read_raw()
        lines: List[CartLine] = []
        seen = set()
        for entry in raw:
            line = CartLine.from_raw(entry)
            if line is None:
                self.logger.warning("Skipping invalid guest cart entry", entry=entry)
                continue
            if line.dish_id in seen:
                continue
            seen.add(line.dish_id)
            lines.append(line)
        return lines

    def get_total_count(self) -> int:
        return sum(line.quantity for line in self.get_cart())

    def has_invalid_items(self) -> bool:
        with self._lock:
            raw = self._read_raw()
        return any(CartLine.from_raw(entry) is None for entry in raw)

    def _cache_cutoff(self) -> int:
        return self.clock() - int(self.cache_ttl.total_seconds() * 1000)

    def get_items_needing_refresh(self) -> List[CartLine]:
        """Lines with no cache, incomplete display fields, or a cache older than the TTL."""
        cutoff = self._cache_cutoff()
        return [
            line
            for line in self.get_cart()
            if line.cached_at is None
            or not line.has_display_fields
            or line.cached_at < cutoff
        ]

    def prepare_for_sync(self) -> List[SyncPair]:
        return [SyncPair(line.dish_id, line.quantity) for line in self.get_cart()]

    # -- writes ------------------------------------------------------------

    def _persist(self, lines: List[CartLine]) -> None:
        document = json.dumps([line.to_dict() for line in lines])
        try:
            self.storage.write(document)
        except StorageFault as exc:
            self.logger.warning("Guest cart write failed, keeping it in memory", error=str(exc))
            self._fallback = list(lines)
        else:
            self._fallback = None

    def _changed(self, reason: str, **context: Any) -> None:
        self.logger.debug("Guest cart saved", reason=reason, **context)
        notify_cart_changed(sender=self.__class__)

    def add_item(self, dish_id: int, quantity: int, info: Optional[Mapping[str, Any]] = None) -> CartLine:
        """Merge ``quantity`` into an existing line or insert a new one."""
        dish_id = int(dish_id)
        quantity = int(quantity)
        fields = _info_fields(info) if info else {}
        with self._lock:
            lines = self.get_cart()
            index = next((i for i, line in enumerate(lines) if line.dish_id == dish_id), None)
            if index is not None:
                current = lines[index]
                updated = current.with_quantity(max(1, current.quantity + quantity))
                if info:
                    updated = replace(updated, **fields, cached_at=self.clock())
                lines[index] = updated
            else:
                updated = CartLine(
                    dish_id=dish_id,
                    quantity=max(1, quantity),
                    cached_at=self.clock() if info else None,
                    **fields,
                )
                lines.append(updated)
            self._persist(lines)
        self._changed("add", dish_id=dish_id)
        return updated

    def update_item(self, dish_id: int, quantity: int) -> None:
        dish_id = int(dish_id)
        quantity = int(quantity)
        if quantity <= 0:
            self.remove_item(dish_id)
            return
        with self._lock:
            lines = [
                line.with_quantity(quantity) if line.dish_id == dish_id else line
                for line in self.get_cart()
            ]
            self._persist(lines)
        self._changed("update", dish_id=dish_id, quantity=quantity)

    def remove_item(self, dish_id: int) -> None:
        dish_id = int(dish_id)
        with self._lock:
            lines = [line for line in self.get_cart() if line.dish_id != dish_id]
            self._persist(lines)
        self._changed("remove", dish_id=dish_id)

    def clear_cart(self) -> None:
        with self._lock:
            try:
                self.storage.delete()
            except StorageFault as exc:
                self.logger.warning("Guest cart clear failed, emptying in memory", error=str(exc))
                self._fallback = []
            else:
                self._fallback = None
        self.logger.info("Guest cart cleared")
        notify_cart_changed(sender=self.__class__)

    def update_cache(self, batch: Iterable[Mapping[str, Any]], *, notify: bool = True) -> int:
        """
        Overwrite cached display fields from ``batch`` (mappings carrying ``id``).

        Lines whose fields already match and whose cache is fresh are left
        alone; nothing is persisted unless at least one line changed. Returns
        the number of lines rewritten.

        With ``notify=False`` changes are persisted without sending
        ``cart_changed``.
        """
        infos = {}
        for info in batch:
            key = _to_int(info.get("id") or info.get("dishId"))
            if key:
                infos[key] = info
        if not infos:
            return 0
        with self._lock:
            cutoff = self._cache_cutoff()
            lines = self.get_cart()
            changed = 0
            for i, line in enumerate(lines):
                info = infos.get(line.dish_id)
                if info is None:
                    continue
                fields = _info_fields(info)
                differs = any(getattr(line, k) != v for k, v in fields.items())
                expired = line.cached_at is None or line.cached_at < cutoff
                if not differs and not expired:
                    continue
                lines[i] = replace(line, **fields, cached_at=self.clock())
                changed += 1
            if changed:
                self._persist(lines)
        if changed and notify:
            self._changed("cache", changed=changed)
        return changed
