from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from .logger import get_logger

logger = get_logger(__name__).bind(component="common", layer="http")


@dataclass
class APIResponse:
    ok: bool
    status: int
    data: Any
    error: Optional[str] = None


def unwrap_envelope(payload: Any) -> Any:
    """Some endpoints answer ``{"data": {...}}``, others the bare object."""
    if isinstance(payload, dict) and isinstance(payload.get("data"), (dict, list)):
        return payload["data"]
    return payload


class BaseClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session=None,
        http: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = (base_url or settings.FOODCART_API_BASE_URL).rstrip("/")
        self.auth = session
        self.http = http or requests.Session()
        self.http.headers.update({"Accept": "application/json"})
        self.timeout = timeout if timeout is not None else settings.FOODCART_HTTP_TIMEOUT

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> Dict[str, str]:
        if self.auth is None:
            return {}
        return self.auth.auth_headers()

    def _request(self, method: str, path: str, **kwargs) -> APIResponse:
        url = self._url(path)
        try:
            resp = self.http.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
        except requests.RequestException as exc:
            logger.warning("Network error", method=method, url=url, error=str(exc))
            return APIResponse(False, 0, None, error=str(exc))
        try:
            data = resp.json()
        except ValueError:
            data = resp.text or None
        if resp.status_code >= 400:
            logger.info("HTTP error", method=method, url=url, status=resp.status_code)
            return APIResponse(False, resp.status_code, data, error=str(data))
        return APIResponse(True, resp.status_code, data)

