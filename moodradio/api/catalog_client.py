"""
HTTP client for the music backend: mood radio retrieval and play-count telemetry.
"""

import logging
from typing import Dict, Any, Iterable, List, Optional
from moodradio.api.base_client import BaseAPIClient, APIError
from moodradio.api.catalog import TrackCatalog
from moodradio.errors import ErrorCode, UnknownMoodError
from moodradio.models.mood import MoodDefinition
from moodradio.models.playlist import MoodPlaylist
from moodradio.models.track import Track
from moodradio.utils.cache_manager import CacheManager

logger = logging.getLogger(__name__)

def _parse_track(data: Dict[str, Any]) -> Track:
    """Accept both the nested storage shape and the flat API shape."""
    if "audioFile" in data or "_id" in data:
        return Track.from_document(data)
    return Track.from_dict(data)

class CatalogClient(BaseAPIClient, TrackCatalog):
    """REST client for the catalog and mood endpoints."""

    def __init__(
        self,
        base_url: str,
        access_token: Optional[str] = None,
        timeout: int = 30,
        max_retries: int = 3,
        cache_manager: Optional[CacheManager] = None,
        moods_ttl: int = 86400
    ):
        """
        Initialize catalog client.

        Args:
            base_url: API root, e.g. http://localhost:5000/api
            access_token: Optional bearer token of the signed-in user
            timeout: Request timeout in seconds
            max_retries: Attempts for transient transport failures
            cache_manager: Optional cache manager for mood definitions
            moods_ttl: Cache TTL for the mood list
        """
        super().__init__(
            base_url=base_url,
            access_token=access_token,
            timeout=timeout,
            max_retries=max_retries,
            cache_manager=cache_manager
        )
        self.moods_ttl = moods_ttl

    async def query_by_tags(
        self,
        tags: Iterable[str],
        visibility: str = "public",
        moderation_status: str = "approved"
    ) -> List[Track]:
        response = await self._make_request(
            "GET",
            "/tracks",
            params={
                "moodTags": ",".join(tags),
                "visibility": visibility,
                "moderationStatus": moderation_status
            }
        )
        items = response.get("data", {}).get("tracks", [])
        return [_parse_track(item) for item in items]

    async def increment_play_count(self, track_id: str) -> None:
        await self._make_request("POST", f"/tracks/{track_id}/play")
        logger.debug(f"Registered play for track {track_id}")

    async def get_moods(self) -> List[MoodDefinition]:
        """Fetch the mood categories (cached)."""
        cache_key = self.cache_manager.key("moods") if self.cache_manager else "moods"
        response = await self._cached_request(cache_key, "GET", "/moods", ttl=self.moods_ttl)
        return [
            MoodDefinition(
                id=mood["id"],
                name=mood["name"],
                icon=mood.get("icon", ""),
                tags=tuple(mood.get("tags") or ())
            )
            for mood in response.get("data", {}).get("moods", [])
        ]

    async def get_mood_radio(self, mood_id: str, limit: int = 50, shuffle: bool = True) -> MoodPlaylist:
        """
        Request a generated mood playlist from the server.

        Raises:
            UnknownMoodError: If the server does not know the mood
        """
        try:
            response = await self._make_request(
                "GET",
                f"/moods/{mood_id}/radio",
                params={"limit": limit, "shuffle": "true" if shuffle else "false"}
            )
        except APIError as e:
            if e.body.get("code") == ErrorCode.UNKNOWN_MOOD.value:
                raise UnknownMoodError(mood_id)
            raise

        playlist = MoodPlaylist.from_dict(response["data"]["playlist"])
        logger.info(f"Fetched '{playlist.name}' with {playlist.track_count} tracks")
        return playlist

    async def find_by_ids(self, track_ids: Iterable[str]) -> List[Track]:
        ids = list(track_ids)
        if not ids:
            return []
        response = await self._make_request("GET", "/tracks", params={"ids": ",".join(ids)})
        return [_parse_track(item) for item in response.get("data", {}).get("tracks", [])]
