from __future__ import annotations

from typing import Protocol

from .logger import get_logger

logger = get_logger(__name__).bind(component="common", layer="notice")


class Notifier(Protocol):
    def success(self, message: str) -> None:
        ...

    def error(self, message: str) -> None:
        ...

    def info(self, message: str) -> None:
        ...


class LoggingNotifier:
    """Default transient-notification sink; a UI layer swaps in a toast implementation."""

    def success(self, message: str) -> None:
        logger.info("Notice", kind="success", text=str(message))

    def error(self, message: str) -> None:
        logger.warning("Notice", kind="error", text=str(message))

    def info(self, message: str) -> None:
        logger.info("Notice", kind="info", text=str(message))


class RecordingNotifier:
    """Keeps notices in memory; used by headless clients and tests."""

    def __init__(self):
        self.messages = []

    def success(self, message: str) -> None:
        self.messages.append(("success", str(message)))

    def error(self, message: str) -> None:
        self.messages.append(("error", str(message)))

    def info(self, message: str) -> None:
        self.messages.append(("info", str(message)))

    def of_kind(self, kind: str):
        return [text for k, text in self.messages if k == kind]
