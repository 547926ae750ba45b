import logging
from typing import Any, Dict, Optional

REDACTED = "***"
_SENSITIVE_KEYS = frozenset({"token", "authorization", "access_token"})


class AppLogger:
    """Stdlib logger wrapper carrying bound key/value context (component, dish_id, ...)."""

    def __init__(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None,
        _logger: Optional[logging.Logger] = None,
    ):
        self._logger = _logger or logging.getLogger(name)
        self._name = name
        self._context = context or {}

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self._context)

    def bind(self, **extra: Any) -> "AppLogger":
        """Return a new logger with ``extra`` merged over the current context."""
        return AppLogger(self._name, {**self._context, **extra}, _logger=self._logger)

    def debug(self, message: str, **context: Any) -> None:
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, **context: Any) -> None:
        self._log(logging.INFO, message, context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(logging.WARNING, message, context)

    def error(self, message: str, **context: Any) -> None:
        self._log(logging.ERROR, message, context)

    def exception(self, message: str, **context: Any) -> None:
        """Log at error level along with the active exception's traceback."""
        self._log(logging.ERROR, message, context, exc_info=True)

    def _log(
        self, level: int, message: str, context: Dict[str, Any], exc_info: bool = False
    ) -> None:
        if not self._logger.isEnabledFor(level):
            return
        payload = {**self._context, **context}
        self._logger.log(level, render(message, payload), exc_info=exc_info)


def render(message: str, context: Dict[str, Any]) -> str:
    if not context:
        return message
    parts = []
    for key, value in context.items():
        if key.lower() in _SENSITIVE_KEYS and value:
            value = REDACTED
        parts.append(f"{key}={_stringify(value)}")
    return f"{message} | {' '.join(parts)}"


def _stringify(value: Any) -> str:
    if isinstance(value, (str, int, float, bool)) or value is None:
        return str(value)
    return repr(value)


def get_logger(name: str) -> AppLogger:
    return AppLogger(name)
