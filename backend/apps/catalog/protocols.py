from __future__ import annotations

from typing import Dict, Iterable, Optional, Protocol

from .dtos import DishSnapshot


class DishLookupProtocol(Protocol):
    def get_snapshot(self, dish_id: int) -> Optional[DishSnapshot]:
        ...

    def get_snapshots(self, dish_ids: Iterable[int]) -> Dict[int, Optional[DishSnapshot]]:
        ...
