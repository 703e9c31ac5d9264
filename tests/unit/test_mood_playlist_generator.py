#!/usr/bin/env python3
"""
Unit tests for the mood playlist generator.
"""

import random
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock

from moodradio.errors import UnknownMoodError, ValidationError
from moodradio.services.mood_playlist_generator import MoodPlaylistGenerator, GENERAL_RECOMMENDATIONS
from moodradio.utils.cache_manager import CacheManager

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)

@pytest.fixture
def energy_catalog(fake_catalog, track_factory):
    """Ten energy tracks with distinct popularity, plus noise the query must skip."""
    fake_catalog.tracks = [
        track_factory(f"e{i}", mood_tags=["energy", "run"], plays=i * 100, likes=i * 10,
                      intensity=(i % 10) + 1, duration=100.0 + i)
        for i in range(10)
    ] + [
        track_factory("sad_1", mood_tags=["sad"]),
        track_factory("private_1", mood_tags=["fast"], visibility="private"),
        track_factory("pending_1", mood_tags=["adrenaline"], moderation_status="pending"),
    ]
    return fake_catalog

@pytest.fixture
def generator(energy_catalog):
    return MoodPlaylistGenerator(energy_catalog, rng=random.Random(7), clock=lambda: FIXED_NOW)

class TestGenerate:
    """Radio generation."""

    @pytest.mark.asyncio
    async def test_top_tracks_by_weighted_score_without_shuffle(self, generator):
        playlist = await generator.generate("energy", limit=3, shuffle=False)

        assert [track.id for track in playlist.tracks] == ["e9", "e8", "e7"]
        assert playlist.stats.total_tracks == 3
        assert playlist.stats.total_duration == 109.0 + 108.0 + 107.0
        assert playlist.stats.average_intensity == 9.0

    @pytest.mark.asyncio
    async def test_playlist_identity_and_metadata(self, generator):
        playlist = await generator.generate("ENERGY", limit=3, shuffle=False)

        assert playlist.id == f"energy_radio_{int(FIXED_NOW.timestamp() * 1000)}"
        assert playlist.name == "Energy Radio"
        assert playlist.mood.id == "energy"
        assert playlist.generated_at == FIXED_NOW

    @pytest.mark.asyncio
    async def test_query_uses_mood_tags_only(self, generator, energy_catalog):
        playlist = await generator.generate("energy", limit=50, shuffle=False)

        assert energy_catalog.queries == [["energy", "run", "fast", "adrenaline"]]
        assert playlist.track_count == 10
        assert all(track.id.startswith("e") for track in playlist.tracks)

    @pytest.mark.asyncio
    async def test_unknown_mood_makes_no_query(self, generator, energy_catalog):
        with pytest.raises(UnknownMoodError) as exc_info:
            await generator.generate("unknown_mood_xyz")

        assert exc_info.value.code.value == "UNKNOWN_MOOD"
        assert exc_info.value.status_code == 400
        assert energy_catalog.queries == []

    @pytest.mark.asyncio
    async def test_no_candidates_is_not_an_error(self, fake_catalog):
        generator = MoodPlaylistGenerator(fake_catalog, clock=lambda: FIXED_NOW)

        playlist = await generator.generate("love")

        data = playlist.to_dict()
        assert data["tracks"] == []
        assert data["stats"]["totalDuration"] == 0
        assert data["stats"]["averageIntensity"] == 0

    @pytest.mark.asyncio
    async def test_shuffle_picks_a_random_subset(self, generator):
        playlist = await generator.generate("energy", limit=4, shuffle=True)

        ids = [track.id for track in playlist.tracks]
        assert len(ids) == 4
        assert len(set(ids)) == 4
        assert set(ids) <= {f"e{i}" for i in range(10)}

    @pytest.mark.asyncio
    async def test_shuffle_with_few_candidates_ranks_instead(self, generator):
        playlist = await generator.generate("energy", limit=20, shuffle=True)

        assert [track.id for track in playlist.tracks] == [f"e{i}" for i in range(9, -1, -1)]

    @pytest.mark.asyncio
    async def test_invalid_limit(self, generator):
        with pytest.raises(ValidationError):
            await generator.generate("energy", limit=0)
        with pytest.raises(ValidationError):
            await generator.generate("energy", limit="many")

    @pytest.mark.asyncio
    async def test_query_string_parameters(self, generator):
        playlist = await generator.generate("energy", limit="2", shuffle="false")

        assert [track.id for track in playlist.tracks] == ["e9", "e8"]

    @pytest.mark.asyncio
    async def test_large_limit_returns_every_candidate(self, generator):
        playlist = await generator.generate("energy", limit=500, shuffle=False)

        assert playlist.track_count == 10
        assert [track.id for track in playlist.tracks][:2] == ["e9", "e8"]

class TestSupplementaryQueries:
    """Mood listing, statistics, discovery and recommendations."""

    def test_list_moods(self, generator):
        moods = generator.list_moods()

        assert [mood["id"] for mood in moods] == ["aggression", "melancholy", "love", "mystery", "energy"]
        assert moods[4]["tags"] == ["energy", "run", "fast", "adrenaline"]

    @pytest.mark.asyncio
    async def test_mood_stats(self, energy_catalog, track_factory):
        energy_catalog.tracks[0].genre = "phonk"
        energy_catalog.tracks[1].genre = "phonk"
        energy_catalog.tracks[2].genre = "drill"
        generator = MoodPlaylistGenerator(energy_catalog)

        result = await generator.mood_stats("energy")

        stats = result["stats"]
        assert result["mood"]["id"] == "energy"
        assert stats["totalTracks"] == 10
        assert [track["id"] for track in stats["topTracks"]] == ["e9", "e8", "e7", "e6", "e5"]
        assert stats["genreDistribution"][0] == {"genre": None, "count": 7}
        assert {"genre": "phonk", "count": 2} in stats["genreDistribution"]

    @pytest.mark.asyncio
    async def test_mood_stats_are_cached(self, energy_catalog):
        cache_manager = CacheManager()
        generator = MoodPlaylistGenerator(energy_catalog, cache_manager=cache_manager)

        first = await generator.mood_stats("energy")
        second = await generator.mood_stats("energy")

        assert first == second
        assert len(energy_catalog.queries) == 1

    @pytest.mark.asyncio
    async def test_mood_stats_unknown_mood(self, generator):
        with pytest.raises(UnknownMoodError):
            await generator.mood_stats("polka")

    @pytest.mark.asyncio
    async def test_discover_prefers_new_lesser_known_tracks(self, fake_catalog, track_factory):
        fake_catalog.tracks = [
            track_factory("old", mood_tags=["dark"], plays=10, created_at=datetime(2023, 1, 1, tzinfo=timezone.utc)),
            track_factory("new", mood_tags=["dark"], plays=20, created_at=datetime(2024, 4, 1, tzinfo=timezone.utc)),
            track_factory("hit", mood_tags=["dark"], plays=5000, created_at=datetime(2024, 4, 2, tzinfo=timezone.utc)),
            track_factory("undated", mood_tags=["secret"], plays=0),
        ]
        generator = MoodPlaylistGenerator(fake_catalog)

        result = await generator.discover("mystery")

        assert [track["id"] for track in result["tracks"]] == ["new", "old", "undated"]
        assert result["mood"]["id"] == "mystery"

    @pytest.mark.asyncio
    async def test_discover_with_large_limit(self, generator):
        result = await generator.discover("energy", limit=1000)

        assert len(result["tracks"]) == 10

    def test_general_recommendations_without_history(self, generator):
        recommendations = generator.recommend_moods()

        assert recommendations == GENERAL_RECOMMENDATIONS
        assert [item["mood"] for item in recommendations] == ["mystery", "energy", "aggression"]

    def test_recommendations_follow_liked_tags(self, generator, track_factory):
        liked = [
            track_factory("l1", mood_tags=["sad", "rain"]),
            track_factory("l2", mood_tags=["lonely"]),
        ]

        recommendations = generator.recommend_moods(liked)

        assert len(recommendations) == 3
        assert recommendations[0]["mood"] == "melancholy"
        assert recommendations[0]["reason"] == "Based on your preferences"
        assert recommendations[0]["weight"] >= 1.5
        weights = [item["weight"] for item in recommendations]
        assert weights == sorted(weights, reverse=True)

    @pytest.mark.asyncio
    async def test_generator_with_mocked_catalog(self, track_factory):
        catalog = AsyncMock()
        catalog.query_by_tags.return_value = [track_factory("x1", mood_tags=["rage"], intensity=7)]
        generator = MoodPlaylistGenerator(catalog, clock=lambda: FIXED_NOW)

        playlist = await generator.generate("aggression", limit=5)

        catalog.query_by_tags.assert_awaited_once_with(("rage", "anger", "fight", "hardcore"))
        assert playlist.stats.average_intensity == 7.0
