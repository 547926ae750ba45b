from __future__ import annotations

from typing import Optional

from apps.common.session import Session

from .client import DishClient


def build_dish_client(session: Optional[Session] = None) -> DishClient:
    return DishClient(session=session)
