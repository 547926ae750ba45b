"""
Image normalization for dish payloads.

The catalog has served three layouts over time::

    {"images": [{"imageUrl": "/uploads/a.jpg"}, ...]}   # array of objects
    {"imageUrl": "/uploads/a.jpg"}                       # single field
    {"imagesUrls": "[\"/uploads/a.jpg\",\"/uploads/b.jpg\"]"}  # raw delimited string

``classify_image_source`` turns a payload into one of the tagged variants
below; nothing downstream looks at the raw layout again.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple, Union

from django.conf import settings

_ABSOLUTE_URL = re.compile(r"^(?:[a-zA-Z][a-zA-Z0-9+.\-]*:|//)")
_RAW_STRIP = re.compile(r'[\[\]"]')


@dataclass(frozen=True)
class ImageList:
    urls: Tuple[str, ...]


@dataclass(frozen=True)
class SingleImage:
    url: str


@dataclass(frozen=True)
class RawImageString:
    raw: str


@dataclass(frozen=True)
class NoImage:
    pass


ImageSource = Union[ImageList, SingleImage, RawImageString, NoImage]


def _image_entry_url(entry: Any) -> Optional[str]:
    if isinstance(entry, str):
        return entry.strip() or None
    if isinstance(entry, Mapping):
        for key in ("imageUrl", "url", "image"):
            value = entry.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None


def classify_image_source(payload: Mapping[str, Any]) -> ImageSource:
    images = payload.get("images")
    if isinstance(images, (list, tuple)) and images:
        urls = tuple(u for u in (_image_entry_url(e) for e in images) if u)
        if urls:
            return ImageList(urls)
    single = payload.get("imageUrl") or payload.get("image")
    if isinstance(single, str) and single.strip():
        return SingleImage(single.strip())
    raw = payload.get("imagesUrls")
    if isinstance(raw, str) and raw.strip():
        return RawImageString(raw)
    return NoImage()


def first_image_path(source: ImageSource) -> Optional[str]:
    if isinstance(source, ImageList):
        return source.urls[0]
    if isinstance(source, SingleImage):
        return source.url
    if isinstance(source, RawImageString):
        cleaned = _RAW_STRIP.sub("", source.raw).strip()
        first = cleaned.split(",")[0].strip() if cleaned else ""
        return first or None
    return None


def absolute_image_url(path: Optional[str], origin: Optional[str] = None) -> str:
    """Prefix relative paths with the backend origin; absolute URLs pass through."""
    origin = (origin if origin is not None else settings.FOODCART_BACKEND_ORIGIN).rstrip("/")
    if not path or not str(path).strip():
        path = settings.FOODCART_PLACEHOLDER_IMAGE
    path = str(path).strip()
    if _ABSOLUTE_URL.match(path):
        return path
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{origin}{path}"


def resolve_dish_image(payload: Mapping[str, Any], origin: Optional[str] = None) -> str:
    return absolute_image_url(first_image_path(classify_image_source(payload)), origin)
