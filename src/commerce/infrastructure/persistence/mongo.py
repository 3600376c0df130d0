"""MongoDB connection plus the small codec helpers every repository shares.

A ``MongoConnection`` is built once by the composition root and owned by
the application lifespan: ``connect()`` on startup, ``close()`` on
shutdown.  Repositories resolve their collection through it on each call,
so they can be constructed before the connection is opened.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any

from bson import Decimal128, ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from commerce.domain.model.paging import PageRequest, SortOrder
from commerce.infrastructure.config import DatabaseConfig

logger = logging.getLogger(__name__)


class MongoConnection:

    def __init__(
        self,
        config: DatabaseConfig,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ) -> None:
        self._config = config
        self._client_factory = client_factory
        self._client: MongoClient | None = None
        self._database: Database | None = None

    @property
    def is_connected(self) -> bool:
        return self._database is not None

    def connect(self) -> None:
        if self._client is not None:
            logger.info("MongoDB already connected")
            return
        client = self._client_factory(
            self._config.uri,
            maxPoolSize=self._config.max_pool_size,
            serverSelectionTimeoutMS=self._config.server_selection_timeout_ms,
            socketTimeoutMS=self._config.socket_timeout_ms,
            retryWrites=True,
            retryReads=True,
            tz_aware=True,
        )
        try:
            client.admin.command("ping")
        except Exception:
            client.close()
            logger.error(f"Failed to connect to MongoDB database {self._config.name!r}")
            raise
        self._client = client
        self._database = client[self._config.name]
        logger.info(f"MongoDB connected successfully: database={self._config.name}")

    def collection(self, name: str) -> Collection:
        if self._database is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._database[name]

    def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            self._client.admin.command("ping")
        except Exception as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False
        return True

    def close(self) -> None:
        if self._client is None:
            return
        self._client.close()
        self._client = None
        self._database = None
        logger.info("MongoDB connection closed")


# --- Codec helpers ------------------------------------------------------------


def object_id(value: str) -> ObjectId | None:
    """Parse a client-supplied id; None when it is not a valid ObjectId."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def to_decimal128(value: Decimal) -> Decimal128:
    return Decimal128(value)


def to_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal128):
        return value.to_decimal()
    return Decimal(str(value))


def as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def sort_spec(paging: PageRequest) -> list[tuple[str, int]]:
    direction = ASCENDING if paging.sort_order == SortOrder.ASC else DESCENDING
    spec = [(paging.sort_by, direction)]
    if paging.sort_by != "_id":
        spec.append(("_id", direction))
    return spec


def find_page(
    collection: Collection,
    filter_: dict[str, Any],
    paging: PageRequest,
) -> tuple[list[dict[str, Any]], int]:
    cursor = (
        collection.find(filter_)
        .sort(sort_spec(paging))
        .skip(paging.skip)
        .limit(paging.limit)
    )
    return list(cursor), collection.count_documents(filter_)


def count_by(collection: Collection, match: dict[str, Any], field: str) -> dict[str, int]:
    pipeline = [
        {"$match": match},
        {"$group": {"_id": f"${field}", "count": {"$sum": 1}}},
    ]
    return {row["_id"]: row["count"] for row in collection.aggregate(pipeline)}
