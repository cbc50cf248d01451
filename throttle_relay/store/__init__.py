"""Store client adapters."""

from throttle_relay.store.client import (
    DynamoDBStoreClient,
    StoreClient,
    StoreError,
    StoreErrorKind,
)

__all__ = [
    "DynamoDBStoreClient",
    "StoreClient",
    "StoreError",
    "StoreErrorKind",
]
