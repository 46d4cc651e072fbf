"""Store-client capability and its etcd implementation."""

from __future__ import annotations

from .etcd_gateway import EtcdGatewayClient, connect_etcd, prefix_range_end
from .protocol import StoreClient, StoreClientFactory

__all__ = [
    "StoreClient",
    "StoreClientFactory",
    "EtcdGatewayClient",
    "connect_etcd",
    "prefix_range_end",
]
