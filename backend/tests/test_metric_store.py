"""
Tests for metric documents, collection setup and the metric repository.
"""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from bson import ObjectId
from fastapi import HTTPException
from pydantic import ValidationError
from pymongo.errors import ServerSelectionTimeoutError, WriteError
import pytest

from common.database.metric_store import (
    COLLECTION_INDEXES,
    META_AD_METRICS,
    META_AD_METRICS_SCHEMA,
    SPOTIFY_METRICS,
    SPOTIFY_METRICS_SCHEMA,
    MetricRepository,
    init_metric_collections,
)
from common.models import MetaAdMetricIn, MetaAdMetricOut, SpotifyMetricIn, from_document


@pytest.fixture
def mock_collection():
    """Return a mock async collection."""
    collection = MagicMock()
    collection.name = META_AD_METRICS
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.to_list = AsyncMock(return_value=[])
    collection.find.return_value = cursor
    return collection


class TestMetricDocuments:
    """Tests for the metric document models."""

    def test_meta_document_is_camel_case_with_datetime(self):
        """Test that a Meta snapshot is stored with camelCase keys and a UTC midnight date."""
        metric = MetaAdMetricIn(
            campaign_id="c-1", ad_id="ad-1", date=date(2024, 6, 1),
            impressions=1000, clicks=40, spend=12.5,
        )

        document = metric.to_document()

        assert document == {
            "campaignId": "c-1",
            "adId": "ad-1",
            "date": datetime(2024, 6, 1, tzinfo=timezone.utc),
            "impressions": 1000,
            "clicks": 40,
            "spend": 12.5,
        }

    def test_missing_spend_is_rejected(self):
        """Test that a Meta snapshot without spend does not validate."""
        with pytest.raises(ValidationError):
            MetaAdMetricIn.model_validate(
                {"campaignId": "c-1", "adId": "ad-1", "date": "2024-06-01", "impressions": 1, "clicks": 0}
            )

    def test_negative_counters_are_rejected(self):
        """Test that counters cannot be negative."""
        with pytest.raises(ValidationError):
            SpotifyMetricIn(campaign_id="c-1", track_id="t-1", date=date(2024, 6, 1), streams=-1)

    def test_from_document_builds_response(self):
        """Test that a stored document maps back onto the response model."""
        object_id = ObjectId()
        document = {
            "_id": object_id, "campaignId": "c-1", "adId": "ad-1",
            "date": datetime(2024, 6, 1), "impressions": 10, "clicks": 1, "spend": 2.0,
        }

        metric = from_document(MetaAdMetricOut, document)

        assert metric.id == str(object_id)
        assert metric.date == date(2024, 6, 1)
        assert metric.model_dump(by_alias=True)["adId"] == "ad-1"


class TestCollectionSchemas:
    """Tests for the $jsonSchema validators and indexes."""

    def test_required_fields(self):
        """Test the required fields of both collections."""
        assert set(META_AD_METRICS_SCHEMA["required"]) == {
            "campaignId", "adId", "date", "impressions", "clicks", "spend",
        }
        assert set(SPOTIFY_METRICS_SCHEMA["required"]) == {"campaignId", "trackId", "date", "streams"}

    def test_indexes(self):
        """Test the compound and foreign key indexes."""
        assert COLLECTION_INDEXES[META_AD_METRICS] == [[("campaignId", 1), ("date", -1)], [("adId", 1)]]
        assert COLLECTION_INDEXES[SPOTIFY_METRICS] == [[("campaignId", 1), ("date", -1)], [("trackId", 1)]]

    @pytest.mark.asyncio
    async def test_init_creates_missing_and_updates_existing(self):
        """Test that existing collections get collMod and missing ones are created."""
        collection = MagicMock()
        collection.create_index = AsyncMock(return_value="idx")
        database = MagicMock()
        database.__getitem__.return_value = collection
        database.list_collection_names = AsyncMock(return_value=[META_AD_METRICS])
        database.command = AsyncMock()
        database.create_collection = AsyncMock()

        await init_metric_collections(database)

        database.command.assert_awaited_once_with(
            "collMod", META_AD_METRICS, validator={"$jsonSchema": META_AD_METRICS_SCHEMA}
        )
        database.create_collection.assert_awaited_once_with(
            SPOTIFY_METRICS, validator={"$jsonSchema": SPOTIFY_METRICS_SCHEMA}
        )
        assert collection.create_index.await_count == 4


class TestMetricRepository:
    """Tests for MetricRepository."""

    @pytest.mark.asyncio
    async def test_insert_returns_document_with_id(self, mock_collection):
        """Test that insert returns the stored document and its id."""
        repo = MetricRepository(mock_collection)

        stored = await repo.insert({"campaignId": "c-1"})

        assert stored["campaignId"] == "c-1"
        assert isinstance(stored["_id"], ObjectId)

    @pytest.mark.asyncio
    async def test_validator_rejection_becomes_422(self, mock_collection):
        """Test that a document rejected by the server validator is a 422."""
        mock_collection.insert_one.side_effect = WriteError("Document failed validation", code=121)
        repo = MetricRepository(mock_collection)

        with pytest.raises(HTTPException) as exc_info:
            await repo.insert({"campaignId": "c-1", "adId": "ad-1"})

        assert exc_info.value.status_code == 422

    @pytest.mark.asyncio
    async def test_unreachable_server_becomes_503(self, mock_collection):
        """Test that a connection failure is reported as a 503."""
        mock_collection.insert_one.side_effect = ServerSelectionTimeoutError("no servers")
        repo = MetricRepository(mock_collection)

        with pytest.raises(HTTPException) as exc_info:
            await repo.insert({"campaignId": "c-1"})

        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_find_range_uses_inclusive_day_bounds(self, mock_collection):
        """Test that the date filter covers the whole end day."""
        repo = MetricRepository(mock_collection)

        await repo.find_range("c-1", date(2024, 6, 1), date(2024, 6, 30))

        mock_collection.find.assert_called_once_with(
            {
                "campaignId": "c-1",
                "date": {
                    "$gte": datetime(2024, 6, 1, tzinfo=timezone.utc),
                    "$lt": datetime(2024, 7, 1, tzinfo=timezone.utc),
                },
            }
        )
        mock_collection.find.return_value.sort.assert_called_once_with("date", -1)

    @pytest.mark.asyncio
    async def test_find_range_without_bounds(self, mock_collection):
        """Test that an open range only filters by campaign."""
        repo = MetricRepository(mock_collection)

        await repo.find_range("c-1")

        mock_collection.find.assert_called_once_with({"campaignId": "c-1"})
