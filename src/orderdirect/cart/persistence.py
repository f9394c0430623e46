"""Durable storage for a customer's cart.

The adapter writes the whole cart under one namespaced key after every
mutation and reads it back once when a cart session starts. Storage is
best-effort: a failed or unparsable read yields an empty cart, and a failed
write is dropped because the next mutation rewrites the full cart anyway.
"""

import json
import logging
from abc import ABC, abstractmethod

from botocore.exceptions import BotoCoreError, ClientError
from mypy_boto3_dynamodb.service_resource import DynamoDBServiceResource, Table

from orderdirect.cart.snapshot import CartSnapshotError, cart_to_snapshot
from orderdirect.cart.state_machine import load_cart
from orderdirect.models.cart_models import Cart, EmptyCart

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "orderdirect:cart"


class KeyValueStore(ABC):
    """Synchronous string key-value storage owned by a single client session."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None when the key is absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key if present."""


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for tests and local development."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class DynamoDBKeyValueStore(KeyValueStore):
    """Key-value store backed by a DynamoDB table.

    Items are keyed by (session_id, storage_key) so each client session gets
    its own namespace in a shared table.
    """

    def __init__(
        self, dynamodb_resource: DynamoDBServiceResource, table_name: str, session_id: str
    ) -> None:
        """Initialize store.

        Args:
            dynamodb_resource: Boto3 DynamoDB resource
            table_name: Name of the cart sessions table
            session_id: Client session the keys belong to
        """
        self.table_name = table_name
        self.session_id = session_id
        self.table: Table = dynamodb_resource.Table(table_name)

    def get(self, key: str) -> str | None:
        response = self.table.get_item(Key={"session_id": self.session_id, "storage_key": key})
        if "Item" not in response:
            return None
        return str(response["Item"]["value"])

    def set(self, key: str, value: str) -> None:
        self.table.put_item(
            Item={"session_id": self.session_id, "storage_key": key, "value": value}
        )

    def remove(self, key: str) -> None:
        self.table.delete_item(Key={"session_id": self.session_id, "storage_key": key})


class CartPersistenceAdapter:
    """Reads and writes the cart snapshot to a key-value store."""

    def __init__(self, store: KeyValueStore, key: str = CART_STORAGE_KEY) -> None:
        """Initialize adapter.

        Args:
            store: Storage for this client session
            key: Key the snapshot is stored under
        """
        self.store = store
        self.key = key

    def load(self) -> Cart:
        """Read the persisted cart.

        Returns:
            The stored cart, or an empty cart if nothing usable is stored
        """
        try:
            raw = self.store.get(self.key)
        except (BotoCoreError, ClientError) as e:
            logger.warning(f"Cart storage unavailable, starting with empty cart: {e}")
            return EmptyCart()

        if raw is None:
            return EmptyCart()

        try:
            return load_cart(json.loads(raw))
        except (json.JSONDecodeError, CartSnapshotError) as e:
            logger.warning(f"Discarding unreadable cart snapshot: {e}")
            return EmptyCart()

    def save(self, cart: Cart) -> bool:
        """Write the full cart snapshot, replacing the previous one.

        Returns:
            bool: True if the write succeeded, False if it was dropped
        """
        try:
            self.store.set(self.key, json.dumps(cart_to_snapshot(cart)))
            return True

        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to persist cart: {e}")
            return False
