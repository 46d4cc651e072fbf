"""Capability interface the session layer consumes from a key-value store."""

from __future__ import annotations

from typing import Protocol


class StoreClient(Protocol):
    """Connected handle to one store endpoint.

    ``get_by_prefix`` returns keys in store order (lexicographic for etcd).
    """

    def probe(self, endpoint: str, timeout: float) -> None: ...

    def get_by_prefix(
        self,
        prefix: str,
        keys_only: bool = True,
        timeout: float | None = None,
    ) -> list[str]: ...

    def get_value(self, key: str, timeout: float | None = None) -> bytes: ...

    def close(self) -> None: ...


class StoreClientFactory(Protocol):
    def __call__(
        self,
        endpoint: str,
        username: str,
        password: str,
        timeout: float,
    ) -> StoreClient: ...


__all__ = [
    "StoreClient",
    "StoreClientFactory",
]
