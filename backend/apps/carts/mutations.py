"""
Per-line quantity editing with debounce, optimistic display and rollback.

Each tracked line moves through::

    IDLE -> PENDING (optimistic quantity shown, timer armed)
         -> IN_FLIGHT (write dispatched)
         -> IDLE on success, REVERTED on failure (last confirmed quantity restored)

Every dispatched write carries a per-line sequence number. A response whose
sequence is older than the newest dispatched write for that line is dropped,
so a slow early response cannot clobber a newer intent.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from django.conf import settings
from django.utils.translation import gettext_lazy as _

from apps.common import get_logger
from apps.common.exceptions import CartError
from apps.common.notices import Notifier

from .dtos import CartResponse
from .protocols import CartWriterProtocol, SchedulerProtocol, TimerHandle
from .quantities import MIN_QUANTITY, clamp_quantity, max_quantity, parse_quantity

logger = get_logger(__name__).bind(component="carts", layer="mutations")

UPDATE_FAILED = _("Could not update the quantity. Please try again.")
UPDATED = _("Quantity updated.")
REMOVE_FAILED = _("Could not remove the item.")
REMOVED = _("Item removed from your cart.")


class LineState(str, Enum):
    IDLE = "idle"
    PENDING = "pending_debounce"
    IN_FLIGHT = "in_flight"
    REVERTED = "reverted"


class ThreadingScheduler:
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


@dataclass
class _Line:
    dish_id: int
    quantity: int
    confirmed: int
    state: LineState = LineState.IDLE
    timer: Optional[TimerHandle] = None
    armed: int = 0
    dispatched_seq: int = 0
    applied_seq: int = 0
    confirming: bool = False
    deleting: bool = False
    error: Optional[CartError] = None


@dataclass(frozen=True)
class LineView:
    dish_id: int
    quantity: int
    state: LineState
    can_increment: bool
    can_decrement: bool
    confirming: bool
    deleting: bool
    error: Optional[CartError] = field(default=None, compare=False)


class MutationCoordinator:
    def __init__(
        self,
        writer: CartWriterProtocol,
        *,
        refetch: Callable[[], Any],
        notifier: Notifier,
        scheduler: Optional[SchedulerProtocol] = None,
        debounce_seconds: Optional[float] = None,
        on_removed: Optional[Callable[[int], None]] = None,
    ):
        self.writer = writer
        self.refetch = refetch
        self.notifier = notifier
        self.scheduler = scheduler or ThreadingScheduler()
        self.debounce_seconds = (
            debounce_seconds
            if debounce_seconds is not None
            else settings.FOODCART_DEBOUNCE_MS / 1000.0
        )
        self.on_removed = on_removed
        self.logger = logger.bind(service="MutationCoordinator")
        self._lines: Dict[int, _Line] = {}
        self._lock = threading.RLock()

    # -- tracking ----------------------------------------------------------

    def sync_from(self, response: Optional[CartResponse]) -> None:
        """Adopt authoritative quantities from a fresh cart read."""
        if response is None:
            return
        with self._lock:
            present = set()
            for item in response.items:
                present.add(item.dish_id)
                line = self._lines.get(item.dish_id)
                if line is None:
                    self._lines[item.dish_id] = _Line(item.dish_id, item.quantity, item.quantity)
                    continue
                line.confirmed = item.quantity
                if line.state in (LineState.IDLE, LineState.REVERTED):
                    line.quantity = item.quantity
            for dish_id in list(self._lines):
                line = self._lines[dish_id]
                settled = line.state in (LineState.IDLE, LineState.REVERTED)
                if dish_id not in present and settled and not line.deleting:
                    del self._lines[dish_id]

    def line(self, dish_id: int) -> Optional[LineView]:
        with self._lock:
            line = self._lines.get(dish_id)
            return self._view(line) if line else None

    def lines(self) -> List[LineView]:
        with self._lock:
            return [self._view(line) for line in self._lines.values()]

    @staticmethod
    def _view(line: _Line) -> LineView:
        busy = line.confirming or line.deleting
        return LineView(
            dish_id=line.dish_id,
            quantity=line.quantity,
            state=line.state,
            can_increment=not busy and line.quantity < max_quantity(),
            can_decrement=not busy and line.quantity > MIN_QUANTITY,
            confirming=line.confirming,
            deleting=line.deleting,
            error=line.error,
        )

    # -- quantity edits ----------------------------------------------------

    def increment(self, dish_id: int) -> Optional[LineView]:
        return self._step(dish_id, +1)

    def decrement(self, dish_id: int) -> Optional[LineView]:
        return self._step(dish_id, -1)

    def _step(self, dish_id: int, delta: int) -> Optional[LineView]:
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None:
                self.logger.debug("Ignoring edit on untracked line", dish_id=dish_id)
                return None
            if line.confirming or line.deleting:
                return self._view(line)
            target = clamp_quantity(line.quantity + delta)
            if target == line.quantity:
                return self._view(line)
            line.quantity = target
            line.state = LineState.PENDING
            line.error = None
            self._arm(line)
            return self._view(line)

    def _arm(self, line: _Line) -> None:
        if line.timer is not None:
            line.timer.cancel()
        line.armed += 1
        dish_id, token = line.dish_id, line.armed
        line.timer = self.scheduler.call_later(
            self.debounce_seconds, lambda: self.flush(dish_id, token=token)
        )

    def flush(self, dish_id: int, token: Optional[int] = None) -> None:
        """Send the latest intent for ``dish_id``; the debounce timer calls this."""
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None or (token is not None and token != line.armed):
                return
            line.timer = None
            if line.deleting:
                return
            if line.quantity == line.confirmed and line.dispatched_seq == line.applied_seq:
                line.state = LineState.IDLE
                return
            seq, quantity = self._begin_write(line)
        self._dispatch(dish_id, seq, quantity)

    def set_quantity(self, dish_id: int, raw: Any) -> Optional[LineView]:
        """Commit typed input (blur/Enter): clamp, then write at once if it changed."""
        value = parse_quantity(raw)
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None or line.confirming or line.deleting:
                return self._view(line) if line else None
            if value is None:
                return self._view(line)
            if line.timer is not None:
                line.timer.cancel()
                line.timer = None
                line.armed += 1
            line.quantity = clamp_quantity(value)
            line.error = None
            if line.quantity == line.confirmed and line.dispatched_seq == line.applied_seq:
                line.state = LineState.IDLE
                return self._view(line)
            seq, quantity = self._begin_write(line)
        self._dispatch(dish_id, seq, quantity)
        return self.line(dish_id)

    def _begin_write(self, line: _Line):
        line.dispatched_seq += 1
        line.state = LineState.IN_FLIGHT
        return line.dispatched_seq, line.quantity

    def _dispatch(self, dish_id: int, seq: int, quantity: int) -> None:
        self.logger.debug("Dispatching quantity write", dish_id=dish_id, seq=seq, quantity=quantity)
        try:
            self.writer.update(dish_id, quantity)
        except CartError as exc:
            self._on_write_failed(dish_id, seq, exc)
            return
        if self._on_write_succeeded(dish_id, seq, quantity):
            self.notifier.success(UPDATED)
            self.refetch()

    def _on_write_succeeded(self, dish_id: int, seq: int, quantity: int) -> bool:
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None:
                return True
            if seq < line.applied_seq:
                self.logger.info("Dropping stale write response", dish_id=dish_id, seq=seq)
                return False
            line.applied_seq = seq
            line.confirmed = quantity
            if seq == line.dispatched_seq and line.timer is None:
                line.state = LineState.IDLE
            return True

    def _on_write_failed(self, dish_id: int, seq: int, exc: CartError) -> None:
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None:
                return
            line.applied_seq = max(line.applied_seq, seq)
            if seq < line.dispatched_seq or line.timer is not None:
                # A newer intent is queued or on the wire; let it decide.
                self.logger.info("Write failed but was superseded", dish_id=dish_id, seq=seq)
                return
            line.quantity = line.confirmed
            line.state = LineState.REVERTED
            line.error = exc
        self.logger.warning("Quantity write failed, reverted", dish_id=dish_id, code=exc.code)
        self.notifier.error(UPDATE_FAILED)

    # -- removal -----------------------------------------------------------

    def request_removal(self, dish_id: int) -> bool:
        """Open the confirmation; ``False`` when one is already open or a delete is running."""
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None or line.confirming or line.deleting:
                return False
            line.confirming = True
            return True

    def cancel_removal(self, dish_id: int) -> None:
        with self._lock:
            line = self._lines.get(dish_id)
            if line is not None and not line.deleting:
                line.confirming = False

    def confirm_removal(self, dish_id: int) -> bool:
        with self._lock:
            line = self._lines.get(dish_id)
            if line is None or not line.confirming or line.deleting:
                return False
            line.deleting = True
            if line.timer is not None:
                line.timer.cancel()
                line.timer = None
                line.armed += 1
        try:
            self.writer.remove(dish_id)
        except CartError as exc:
            with self._lock:
                line = self._lines.get(dish_id)
                if line is not None:
                    line.deleting = False
                    line.confirming = False
                    line.error = exc
            self.logger.warning("Removal failed", dish_id=dish_id, code=exc.code)
            self.notifier.error(REMOVE_FAILED)
            return False
        with self._lock:
            self._lines.pop(dish_id, None)
        if self.on_removed is not None:
            self.on_removed(dish_id)
        self.logger.info("Line removed", dish_id=dish_id)
        self.notifier.success(REMOVED)
        self.refetch()
        return True
