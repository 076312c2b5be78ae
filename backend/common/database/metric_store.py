"""
Metric store access for the Meta and Spotify snapshot collections.

Daily metric snapshots live in MongoDB, one collection per platform. Both
collections carry a `$jsonSchema` validator so that a malformed write is
rejected by the server itself, and a compound `(campaignId, date)` index for
the per-campaign range queries the services run.

Collections:
    - metaAdMetrics: required campaignId, adId, date, impressions, clicks, spend
    - spotifyMetrics: required campaignId, trackId, date, streams

Indexes:
    - {campaignId: 1, date: -1} on both collections
    - {adId: 1} on metaAdMetrics, {trackId: 1} on spotifyMetrics

Example:
    ```python
    from common.database.metric_store import get_metric_database, init_metric_collections

    database = get_metric_database("meta-service")
    await init_metric_collections(database)
    repo = MetricRepository(database[META_AD_METRICS])
    await repo.insert(metric.to_document())
    ```
"""

from datetime import date, timedelta
from typing import Any

from loguru import logger
from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import ConnectionFailure, PyMongoError, WriteError

from common.config import get_settings
from common.exceptions import (
    handle_database_error,
    handle_external_service_error,
    handle_validation_error,
)
from common.models.metrics import day_start

META_AD_METRICS = "metaAdMetrics"
SPOTIFY_METRICS = "spotifyMetrics"

# Counters arrive as int32 or int64 depending on their size
_COUNTER = {"bsonType": ["int", "long"], "minimum": 0}

META_AD_METRICS_SCHEMA: dict[str, Any] = {
    "bsonType": "object",
    "required": ["campaignId", "adId", "date", "impressions", "clicks", "spend"],
    "properties": {
        "campaignId": {"bsonType": "string"},
        "adId": {"bsonType": "string"},
        "date": {"bsonType": "date"},
        "impressions": _COUNTER,
        "clicks": _COUNTER,
        "spend": {"bsonType": ["double", "int", "long"], "minimum": 0},
        "conversions": _COUNTER,
    },
}

SPOTIFY_METRICS_SCHEMA: dict[str, Any] = {
    "bsonType": "object",
    "required": ["campaignId", "trackId", "date", "streams"],
    "properties": {
        "campaignId": {"bsonType": "string"},
        "trackId": {"bsonType": "string"},
        "date": {"bsonType": "date"},
        "streams": _COUNTER,
        "listeners": _COUNTER,
        "saves": _COUNTER,
    },
}

COLLECTION_SCHEMAS: dict[str, dict[str, Any]] = {
    META_AD_METRICS: META_AD_METRICS_SCHEMA,
    SPOTIFY_METRICS: SPOTIFY_METRICS_SCHEMA,
}

COLLECTION_INDEXES: dict[str, list[list[tuple[str, int]]]] = {
    META_AD_METRICS: [
        [("campaignId", ASCENDING), ("date", DESCENDING)],
        [("adId", ASCENDING)],
    ],
    SPOTIFY_METRICS: [
        [("campaignId", ASCENDING), ("date", DESCENDING)],
        [("trackId", ASCENDING)],
    ],
}

_clients: dict[str, AsyncMongoClient] = {}


def get_mongo_client(service_name: str | None = None) -> AsyncMongoClient:
    """Get the cached MongoDB client for a service."""
    cache_key = service_name or "default"
    if cache_key not in _clients:
        settings = get_settings(service_name)
        _clients[cache_key] = AsyncMongoClient(
            settings.MONGODB_URI, appname=service_name or "songtrackpro"
        )
        logger.info(f"Created MongoDB client for {cache_key}")
    return _clients[cache_key]


def get_metric_database(service_name: str | None = None) -> AsyncDatabase:
    """Get the metric store database named by MONGODB_DATABASE."""
    settings = get_settings(service_name)
    return get_mongo_client(service_name)[settings.MONGODB_DATABASE]


async def close_mongo_clients() -> None:
    """Close every cached MongoDB client."""
    for cache_key, client in list(_clients.items()):
        await client.close()
        logger.info(f"Closed MongoDB client for {cache_key}")
    _clients.clear()


async def init_metric_collections(database: AsyncDatabase) -> None:
    """
    Create the metric collections with their validators and indexes.

    Safe to run repeatedly: existing collections get their validator replaced
    through `collMod`, and index creation is idempotent.
    """
    existing = set(await database.list_collection_names())

    for name, schema in COLLECTION_SCHEMAS.items():
        validator = {"$jsonSchema": schema}
        if name in existing:
            await database.command("collMod", name, validator=validator)
            logger.info(f"Updated validator on {name}")
        else:
            await database.create_collection(name, validator=validator)
            logger.info(f"Created collection {name}")

        for keys in COLLECTION_INDEXES[name]:
            index_name = await database[name].create_index(keys)
            logger.debug(f"Ensured index {index_name} on {name}")

    logger.info("Metric store initialization complete")


class MetricRepository:
    """
    Append-only access to one metric collection.

    Example:
        ```python
        repo = MetricRepository(database[SPOTIFY_METRICS])
        documents = await repo.find_range("campaign-1", date(2024, 6, 1), None)
        ```
    """

    def __init__(self, collection: AsyncCollection) -> None:
        self.collection = collection

    async def insert(self, document: dict[str, Any]) -> dict[str, Any]:
        """
        Insert one snapshot document.

        Returns:
            The stored document including its `_id`.

        Raises:
            HTTPException: 422 when the collection validator rejects the
                document, 503 when the server cannot be reached, 500 for any
                other database failure.
        """
        stored = dict(document)
        try:
            result = await self.collection.insert_one(stored)
        except WriteError as e:
            raise handle_validation_error(f"inserting into {self.collection.name}", e) from e
        except ConnectionFailure as e:
            raise handle_external_service_error(
                f"inserting into {self.collection.name}", "the metric store", e
            ) from e
        except PyMongoError as e:
            raise handle_database_error(f"inserting into {self.collection.name}", e) from e

        stored["_id"] = result.inserted_id
        return stored

    async def find_range(
        self,
        campaign_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[dict[str, Any]]:
        """
        Return a campaign's snapshots ordered by date descending.

        Both bounds are inclusive days.
        """
        query: dict[str, Any] = {"campaignId": campaign_id}
        date_filter: dict[str, Any] = {}
        if start_date is not None:
            date_filter["$gte"] = day_start(start_date)
        if end_date is not None:
            date_filter["$lt"] = day_start(end_date + timedelta(days=1))
        if date_filter:
            query["date"] = date_filter

        try:
            cursor = self.collection.find(query).sort("date", DESCENDING)
            return await cursor.to_list(length=None)
        except ConnectionFailure as e:
            raise handle_external_service_error(
                f"reading {self.collection.name}", "the metric store", e
            ) from e
        except PyMongoError as e:
            raise handle_database_error(f"reading {self.collection.name}", e) from e
