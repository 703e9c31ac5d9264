"""
MongoDB-backed track catalog used by the radio service.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient
from moodradio.api.catalog import TrackCatalog
from moodradio.errors import CatalogError
from moodradio.models.track import Track

logger = logging.getLogger(__name__)

MOOD_TAGS_FIELD = "criminalMetadata.moodTags"

def _document_id(track_id: str) -> Any:
    return ObjectId(track_id) if ObjectId.is_valid(track_id) else track_id

class MongoTrackCatalog(TrackCatalog):
    """Track catalog stored in a MongoDB collection."""

    def __init__(self, mongo_url: Optional[str] = None, db_name: str = "moodradio",
                 collection_name: str = "tracks", collection=None):
        """
        Initialize catalog.

        Args:
            mongo_url: MongoDB connection URL
            db_name: Database name
            collection_name: Tracks collection name
            collection: Pre-built collection (skips connecting)
        """
        self.mongo_url = mongo_url
        self.db_name = db_name
        self.collection_name = collection_name
        self.client: Optional[AsyncIOMotorClient] = None
        self.collection = collection

    async def connect(self):
        """Connect to MongoDB unless a collection was injected."""
        if self.collection is not None:
            return
        if not self.mongo_url:
            raise CatalogError("MONGO_URL is not configured")
        self.client = AsyncIOMotorClient(self.mongo_url)
        self.collection = self.client[self.db_name][self.collection_name]
        logger.info(f"Connected to MongoDB catalog {self.db_name}.{self.collection_name}")

    async def close(self):
        """Close the MongoDB connection."""
        if self.client is not None:
            self.client.close()
            self.client = None
            logger.info("Closed MongoDB connection")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def query_by_tags(
        self,
        tags: Iterable[str],
        visibility: str = "public",
        moderation_status: str = "approved"
    ) -> List[Track]:
        query: Dict[str, Any] = {
            MOOD_TAGS_FIELD: {"$in": list(tags)},
            "visibility": visibility,
            "moderationStatus": moderation_status
        }
        documents = await self.collection.find(query).to_list(length=None)
        return [Track.from_document(doc) for doc in documents]

    async def increment_play_count(self, track_id: str) -> None:
        result = await self.collection.update_one(
            {"_id": _document_id(track_id)},
            {"$inc": {"stats.plays": 1, "analytics.uniqueListeners": 1}}
        )
        if result.matched_count == 0:
            raise CatalogError(f"Track not found: {track_id}")

    async def find_by_ids(self, track_ids: Iterable[str]) -> List[Track]:
        """Fetch tracks by id, ignoring unknown ids."""
        ids = [_document_id(track_id) for track_id in track_ids]
        if not ids:
            return []
        documents = await self.collection.find({"_id": {"$in": ids}}).to_list(length=None)
        return [Track.from_document(doc) for doc in documents]
