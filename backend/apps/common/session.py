from __future__ import annotations

import threading
from typing import Optional

from .logger import get_logger
from .signals import session_authenticated, session_ended

logger = get_logger(__name__).bind(component="common", layer="session")


class Session:
    """
    Holds the bearer token of the current visitor.

    Issuing tokens is someone else's job; this only answers "is the visitor
    authenticated" and announces the guest-to-user transition.
    """

    def __init__(self, token: Optional[str] = None):
        self._token = token
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def login(self, token: str) -> None:
        with self._lock:
            was_guest = not self._token
            self._token = token
        logger.info("Session authenticated", token=token, was_guest=was_guest)
        if was_guest:
            session_authenticated.send(sender=self.__class__, session=self)

    def logout(self) -> None:
        with self._lock:
            was_authenticated = bool(self._token)
            self._token = None
        logger.info("Session cleared", was_authenticated=was_authenticated)
        if was_authenticated:
            session_ended.send(sender=self.__class__, session=self)

    def auth_headers(self):
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}
