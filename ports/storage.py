from __future__ import annotations

from typing import List, Optional, Protocol, Tuple


class BackingStorePort(Protocol):
    """Raw key/value persistence for one or more quota domains.

    Values are already-serialized envelopes; sizes are accounted by the
    caller and stored alongside so usage can be summed without decoding.
    """

    def read(self, domain: str, namespace: str, key: str) -> Optional[str]:
        ...

    def write(self, domain: str, namespace: str, key: str, value: str, size_bytes: int) -> None:
        ...

    def remove(self, domain: str, namespace: str, key: str) -> bool:
        ...

    def items(self, domain: str, namespace: str) -> List[Tuple[str, str]]:
        ...

    def record_size(self, domain: str, namespace: str, key: str) -> int:
        ...

    def usage(self, domain: str) -> int:
        ...

    def clear(self, domain: Optional[str] = None) -> int:
        ...
