from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStorageProtocol(Protocol):
    def read(self) -> Optional[str]:
        ...

    def write(self, value: str) -> None:
        ...

    def delete(self) -> None:
        ...
