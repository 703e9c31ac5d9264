"""Core services for mood radio generation and queued playback."""

from .mood_playlist_generator import MoodPlaylistGenerator
from .playback_controller import PlaybackController
from .audio_backend import AudioBackend, AudioSession, SimulatedAudioBackend
from .timers import Ticker, TickerHandle, AsyncioTicker

__all__ = [
    'MoodPlaylistGenerator',
    'PlaybackController',
    'AudioBackend',
    'AudioSession',
    'SimulatedAudioBackend',
    'Ticker',
    'TickerHandle',
    'AsyncioTicker'
]
