from __future__ import annotations

from typing import Optional

from django.conf import settings
from django.core.cache import cache as default_cache

from apps.common.exceptions import StorageFault


class CacheStorage:
    """
    A single JSON document under one well-known key of a Django cache.

    Any backend failure surfaces as StorageFault; callers decide how to degrade.
    """

    def __init__(self, cache=None, key: Optional[str] = None):
        self.cache = cache if cache is not None else default_cache
        self.key = key or settings.FOODCART_GUEST_CART_KEY

    def read(self) -> Optional[str]:
        try:
            return self.cache.get(self.key)
        except Exception as exc:
            raise StorageFault("Guest cart could not be read", details={"key": self.key}) from exc

    def write(self, value: str) -> None:
        try:
            self.cache.set(self.key, value, timeout=None)
        except Exception as exc:
            raise StorageFault("Guest cart could not be written", details={"key": self.key}) from exc

    def delete(self) -> None:
        try:
            self.cache.delete(self.key)
        except Exception as exc:
            raise StorageFault("Guest cart could not be cleared", details={"key": self.key}) from exc
