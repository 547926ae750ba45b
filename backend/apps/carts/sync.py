from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from django.conf import settings

from apps.common import get_logger
from apps.guest.dtos import SyncPair

from .dtos import SyncReport
from .protocols import GuestStoreProtocol, RemoteCartProtocol
from .quantities import clamp_quantity

logger = get_logger(__name__).bind(component="carts", layer="sync")


class GuestCartSync:
    """
    One-shot migration of guest lines into the server cart at login.

    Best effort: every line gets one add call, all calls run concurrently,
    and the guest store is cleared once they have all settled, whatever
    their outcome. Failures are logged and reported, not retried.
    """

    def __init__(
        self,
        store: GuestStoreProtocol,
        remote: RemoteCartProtocol,
        *,
        max_workers: Optional[int] = None,
    ):
        self.store = store
        self.remote = remote
        self.max_workers = max_workers or settings.FOODCART_MAX_WORKERS
        self.logger = logger.bind(service="GuestCartSync")

    def _push(self, pair: SyncPair) -> None:
        # Guest lines have no ceiling; the server cart does.
        self.remote.add_item(pair.dish_id, clamp_quantity(pair.quantity))

    def run(self) -> SyncReport:
        pairs = self.store.prepare_for_sync()
        if not pairs:
            self.logger.debug("Nothing to sync")
            return SyncReport()
        report = SyncReport(attempted=len(pairs))
        self.logger.info("Syncing guest cart", lines=len(pairs))
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(pairs))) as pool:
            futures = [(pair, pool.submit(self._push, pair)) for pair in pairs]
            for pair, future in futures:
                exc = future.exception()
                if exc is None:
                    report.succeeded.append(pair.dish_id)
                else:
                    self.logger.warning(
                        "Guest line not synced", dish_id=pair.dish_id, error=str(exc)
                    )
                    report.failed.append(pair.dish_id)
        self.store.clear_cart()
        if report.partial_failure:
            self.logger.warning(
                "Guest cart synced with failures",
                succeeded=len(report.succeeded),
                failed=report.failed,
            )
        else:
            self.logger.info("Guest cart synced", succeeded=len(report.succeeded))
        return report
