from typing import Any, Optional

from django.conf import settings

MIN_QUANTITY = 1


def max_quantity() -> int:
    return settings.FOODCART_MAX_QUANTITY


def clamp_quantity(value: int) -> int:
    """Out-of-range quantities are clamped, never reported."""
    return max(MIN_QUANTITY, min(max_quantity(), int(value)))


def parse_quantity(raw: Any) -> Optional[int]:
    """Typed input to int; blank counts as 0 (clamps to 1), garbage is ``None``."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if text == "":
        return 0
    try:
        return int(text)
    except ValueError:
        return None
