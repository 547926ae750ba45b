from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Iterable, Optional

from django.conf import settings

from apps.common import get_logger
from apps.common.http import BaseClient, unwrap_envelope

from .dtos import DishSnapshot
from .mappers import DishSnapshotMapper
from .serializers import DishDetailSerializer

logger = get_logger(__name__).bind(component="catalog", layer="client")


class DishClient(BaseClient):
    """
    Fetches authoritative dish snapshots from ``GET dishes/{id}``.

    Lookups never raise: a missing or malformed dish yields ``None`` so one bad
    line cannot fail a whole cart read.
    """

    path_template = "dishes/{dish_id}"

    def __init__(self, *args, origin: Optional[str] = None, max_workers: Optional[int] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.origin = origin
        self.max_workers = max_workers or settings.FOODCART_MAX_WORKERS
        self.logger = logger.bind(client="DishClient")

    def get_snapshot(self, dish_id: int) -> Optional[DishSnapshot]:
        response = self._request("GET", self.path_template.format(dish_id=dish_id))
        if not response.ok:
            if response.status == 404:
                self.logger.info("Dish not found", dish_id=dish_id)
            else:
                self.logger.warning(
                    "Dish lookup failed", dish_id=dish_id, status=response.status
                )
            return None
        payload = unwrap_envelope(response.data)
        if not isinstance(payload, dict):
            self.logger.warning("Dish payload is not an object", dish_id=dish_id)
            return None
        serializer = DishDetailSerializer(data=payload)
        if not serializer.is_valid():
            self.logger.warning(
                "Malformed dish payload", dish_id=dish_id, errors=dict(serializer.errors)
            )
            return None
        snapshot = DishSnapshotMapper.from_validated(
            serializer.validated_data, origin=self.origin
        )
        self.logger.debug("Dish snapshot fetched", dish_id=dish_id)
        return snapshot

    def get_snapshots(self, dish_ids: Iterable[int]) -> Dict[int, Optional[DishSnapshot]]:
        """Concurrent ``get_snapshot`` over distinct ids; order of the input is kept."""
        ids = list(dict.fromkeys(dish_ids))
        if not ids:
            return {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(ids))) as pool:
            results = list(pool.map(self.get_snapshot, ids))
        return dict(zip(ids, results))
