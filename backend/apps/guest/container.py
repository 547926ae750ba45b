from __future__ import annotations

from .storage import CacheStorage
from .store import GuestCartStore


def build_guest_store(*, key=None, cache=None) -> GuestCartStore:
    return GuestCartStore(storage=CacheStorage(cache=cache, key=key))
