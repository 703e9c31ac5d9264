"""
Mood radio generation service.
Selects, orders and annotates catalog tracks for a mood category.
"""

import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Callable, Sequence
from moodradio.api.catalog import TrackCatalog
from moodradio.models.mood import MoodDefinition, get_mood, list_moods
from moodradio.models.playlist import MoodPlaylist, PlaylistStats
from moodradio.models.track import Track, popularity_score
from moodradio.utils.cache_manager import CacheManager
from moodradio.utils.validators import RadioRequestValidator
from config.settings import Settings, RadioConfig

logger = logging.getLogger(__name__)

GENERAL_RECOMMENDATIONS = [
    {"mood": "mystery", "reason": "Popular today", "weight": 0.9},
    {"mood": "energy", "reason": "Energy boost", "weight": 0.8},
    {"mood": "aggression", "reason": "Trending this week", "weight": 0.7}
]

class MoodPlaylistGenerator:
    """Stateless service producing mood radio playlists from the catalog."""

    def __init__(
        self,
        catalog: TrackCatalog,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        cache_manager: Optional[CacheManager] = None
    ):
        """
        Initialize the generator.

        Args:
            catalog: Track catalog to query
            settings: Application settings (radio defaults, cache TTLs)
            rng: Random source used for shuffling
            clock: Returns the generation timestamp (UTC)
            cache_manager: Optional cache for mood statistics
        """
        self.catalog = catalog
        self.settings = settings
        self.radio: RadioConfig = settings.radio if settings else RadioConfig()
        self.stats_ttl = settings.cache.stats_ttl if settings else 300
        self.rng = rng or random.Random()
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.cache_manager = cache_manager

    async def generate(self, mood_id: str, limit: Optional[int] = None, shuffle: Optional[bool] = None) -> MoodPlaylist:
        """
        Generate a radio playlist for a mood.

        Args:
            mood_id: Mood identifier (case-insensitive)
            limit: Maximum number of tracks (defaults to the configured limit)
            shuffle: Randomize selection when there are more candidates than `limit`

        Returns:
            Immutable MoodPlaylist

        Raises:
            UnknownMoodError: If the mood is not defined (no query is made)
            ValidationError: If limit is not a positive integer
        """
        mood = get_mood(mood_id)
        limit = RadioRequestValidator.validate_limit(
            self.radio.default_limit if limit is None else limit
        )
        shuffle = RadioRequestValidator.validate_shuffle(shuffle, self.radio.default_shuffle)

        candidates = await self.catalog.query_by_tags(mood.tags)
        logger.info(f"Generating {mood.id} radio: {len(candidates)} candidates, limit={limit}, shuffle={shuffle}")

        tracks = self._select_tracks(candidates, limit, shuffle)
        generated_at = self.clock()

        playlist = MoodPlaylist(
            id=f"{mood.id}_radio_{int(generated_at.timestamp() * 1000)}",
            name=f"{mood.name} Radio",
            description=f'Playlist in the "{mood.name}" mood, music for dark streets',
            mood=mood,
            tracks=tuple(tracks),
            stats=PlaylistStats.from_tracks(tracks),
            generated_at=generated_at
        )

        logger.info(f"Generated playlist '{playlist.name}' with {playlist.track_count} tracks")
        return playlist

    def _select_tracks(self, candidates: Sequence[Track], limit: int, shuffle: bool) -> List[Track]:
        """Shuffle or rank candidates, then truncate to limit."""
        if shuffle and len(candidates) > limit:
            ordered = list(candidates)
            self.rng.shuffle(ordered)
        else:
            ordered = sorted(candidates, key=popularity_score, reverse=True)
        return ordered[:limit]

    def list_moods(self) -> List[Dict[str, Any]]:
        """Get all mood categories."""
        return [mood.to_dict() for mood in list_moods()]

    async def mood_stats(self, mood_id: str) -> Dict[str, Any]:
        """
        Catalog statistics for a mood: track count, top tracks and genre distribution.
        Cached for the configured stats TTL when a cache manager is present.
        """
        mood = get_mood(mood_id)

        if self.cache_manager:
            return await self.cache_manager.get_or_set(
                self.cache_manager.key("mood_stats", mood.id),
                lambda: self._compute_mood_stats(mood),
                ttl=self.stats_ttl
            )
        return await self._compute_mood_stats(mood)

    async def _compute_mood_stats(self, mood: MoodDefinition) -> Dict[str, Any]:
        tracks = await self.catalog.query_by_tags(mood.tags)
        top_n = self.radio.stats_top_n

        top_tracks = sorted(tracks, key=lambda t: (t.plays, t.likes), reverse=True)[:top_n]
        genres = Counter(track.genre for track in tracks)

        return {
            "mood": {"id": mood.id, "name": mood.name, "icon": mood.icon},
            "stats": {
                "totalTracks": len(tracks),
                "topTracks": [track.to_dict() for track in top_tracks],
                "genreDistribution": [
                    {"genre": genre, "count": count}
                    for genre, count in genres.most_common(top_n)
                ]
            }
        }

    async def discover(self, mood_id: str, limit: Optional[int] = None) -> Dict[str, Any]:
        """Lesser-known tracks in a mood, newest first then most liked."""
        mood = get_mood(mood_id)
        limit = RadioRequestValidator.validate_limit(
            self.radio.discover_limit if limit is None else limit
        )

        tracks = await self.catalog.query_by_tags(mood.tags)
        fresh = [track for track in tracks if track.plays < self.radio.discover_max_plays]

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        def recency(track: Track) -> datetime:
            created = track.created_at
            if created is None:
                return epoch
            return created if created.tzinfo else created.replace(tzinfo=timezone.utc)

        fresh.sort(key=lambda t: (recency(t), t.likes), reverse=True)

        return {
            "mood": {"id": mood.id, "name": mood.name, "icon": mood.icon},
            "tracks": [track.to_dict() for track in fresh[:limit]],
            "message": "New tracks in this mood"
        }

    def recommend_moods(self, liked_tracks: Optional[Sequence[Track]] = None, top_n: int = 3) -> List[Dict[str, Any]]:
        """
        Rank moods for a listener from the mood tags of the tracks they liked.
        Without listening data the general recommendations are returned.
        """
        if liked_tracks is None:
            return [dict(item) for item in GENERAL_RECOMMENDATIONS]

        tag_frequency = Counter(tag for track in liked_tracks for tag in track.mood_tags)
        liked_count = len(liked_tracks)

        recommendations = []
        for mood in list_moods():
            weight = 0.0
            reason = "New for you"
            for tag in mood.tags:
                if tag_frequency[tag]:
                    weight += tag_frequency[tag] / liked_count
                    reason = "Based on your preferences"

            weight += self.rng.random() * 0.3
            recommendations.append({
                "mood": mood.id,
                "reason": reason,
                "weight": round(weight, 2)
            })

        recommendations.sort(key=lambda item: item["weight"], reverse=True)
        return recommendations[:top_n]
