#!/usr/bin/env python3
"""
Unit tests for mood, playlist and playback state models.
"""

import pytest
from datetime import datetime, timezone
from moodradio.errors import UnknownMoodError
from moodradio.models.mood import MOOD_CATEGORIES, get_mood, list_moods
from moodradio.models.playlist import MoodPlaylist, PlaylistStats, PlaylistResponse
from moodradio.models.playback_state import PlaybackSnapshot, PlayerStatus, RepeatMode

class TestMood:

    def test_lookup_is_case_insensitive(self):
        assert get_mood("Energy") is MOOD_CATEGORIES["energy"]
        assert get_mood("  LOVE ") is MOOD_CATEGORIES["love"]

    def test_unknown_mood(self):
        with pytest.raises(UnknownMoodError) as exc_info:
            get_mood("polka")

        assert exc_info.value.mood_id == "polka"
        assert exc_info.value.to_dict() == {
            "error": "Unknown mood",
            "message": "Unknown mood: polka",
            "code": "UNKNOWN_MOOD"
        }

    def test_every_mood_has_four_tags(self):
        moods = list_moods()
        assert len(moods) == 5
        assert all(len(mood.tags) == 4 for mood in moods)

class TestPlaylist:

    def test_stats_from_tracks(self, track_factory):
        tracks = [
            track_factory("a", duration=100, intensity=3),
            track_factory("b", duration=50.5, intensity=4),
            track_factory("c", duration=0, intensity=4),
        ]

        stats = PlaylistStats.from_tracks(tracks)

        assert stats.total_tracks == 3
        assert stats.total_duration == 150.5
        assert stats.average_intensity == 3.7

    def test_average_intensity_rounds_half_up(self, track_factory):
        tracks = [track_factory(f"t{i}", intensity=value) for i, value in enumerate([5, 5, 5, 6])]

        assert PlaylistStats.from_tracks(tracks).average_intensity == 5.3

    def test_stats_from_no_tracks(self):
        assert PlaylistStats.from_tracks([]).to_dict() == {
            "totalTracks": 0,
            "totalDuration": 0,
            "averageIntensity": 0
        }

    def test_playlist_round_trip(self, sample_track):
        playlist = MoodPlaylist(
            id="energy_radio_1",
            name="Energy Radio",
            description="Fast tracks",
            mood=get_mood("energy"),
            tracks=(sample_track,),
            stats=PlaylistStats.from_tracks([sample_track]),
            generated_at=datetime(2024, 5, 1, tzinfo=timezone.utc)
        )

        data = playlist.to_dict()
        restored = MoodPlaylist.from_dict(data)

        assert data["generatedAt"] == "2024-05-01T00:00:00+00:00"
        assert restored.id == playlist.id
        assert restored.mood == playlist.mood
        assert restored.tracks[0].id == "track_123"
        assert restored.stats == playlist.stats

    def test_response_model(self, sample_track):
        playlist = MoodPlaylist(
            id="love_radio_1",
            name="Love Radio",
            description="",
            mood=get_mood("love"),
            tracks=(),
            stats=PlaylistStats(),
            generated_at=datetime(2024, 5, 1, tzinfo=timezone.utc)
        )

        response = PlaylistResponse.from_playlist(playlist)

        assert response.id == "love_radio_1"
        assert response.tracks == []
        assert response.stats["totalTracks"] == 0

class TestPlaybackState:

    def test_repeat_cycle(self):
        assert RepeatMode.NONE.next() == RepeatMode.ONE
        assert RepeatMode.ONE.next() == RepeatMode.ALL
        assert RepeatMode.ALL.next() == RepeatMode.NONE

    def test_ready_states(self):
        assert PlayerStatus.READY_PAUSED.is_ready
        assert PlayerStatus.READY_PLAYING.is_ready
        assert not PlayerStatus.LOADING.is_ready

    def test_default_snapshot(self):
        snapshot = PlaybackSnapshot()

        assert snapshot.cursor == -1
        assert not snapshot.is_playing
        assert snapshot.to_dict()["currentTrack"] is None
