"""Data models for the mood radio service and player."""

from .track import Track, formatted_duration, dominant_mood, popularity_score
from .mood import MoodDefinition, MOOD_CATEGORIES, get_mood, list_moods
from .playlist import MoodPlaylist, PlaylistStats, PlaylistResponse
from .playback_state import RepeatMode, PlayerStatus, PlaybackSnapshot

__all__ = [
    'Track',
    'formatted_duration',
    'dominant_mood',
    'popularity_score',
    'MoodDefinition',
    'MOOD_CATEGORIES',
    'get_mood',
    'list_moods',
    'MoodPlaylist',
    'PlaylistStats',
    'PlaylistResponse',
    'RepeatMode',
    'PlayerStatus',
    'PlaybackSnapshot'
]
