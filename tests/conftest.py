"""
Pytest configuration and shared fixtures for the mood radio tests.
"""

import asyncio
import random
import pytest
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Set

from config.settings import Settings
from moodradio.api.catalog import TrackCatalog
from moodradio.models.track import Track
from moodradio.services.audio_backend import AudioBackend, AudioSession
from moodradio.services.playback_controller import PlaybackController
from moodradio.services.timers import Ticker, TickerHandle

class FakeAudioSession(AudioSession):
    """In-memory session whose playhead only moves when a test moves it."""

    def __init__(self, backend: 'FakeAudioBackend', track: Track, volume: float, on_end):
        self.backend = backend
        self.track = track
        self.volume = volume
        self.on_end = on_end
        self.duration = float(track.duration)
        self.pos = 0.0
        self.playing = False
        self.unloaded = False

    async def load(self) -> float:
        gate = self.backend.gates.get(self.track.id)
        if gate is not None:
            await gate.wait()
        if self.track.id in self.backend.fail_load:
            raise IOError(f"404 for {self.track.audio_url}")
        return self.duration

    async def play(self) -> None:
        if self.backend.play_gate is not None:
            await self.backend.play_gate.wait()
        if self.backend.fail_play:
            raise RuntimeError("Playback was blocked")
        self.playing = True

    def pause(self) -> None:
        self.playing = False

    def stop(self) -> None:
        self.playing = False
        self.pos = 0.0

    def seek(self, seconds: float) -> None:
        self.pos = seconds

    def position(self) -> float:
        return self.pos

    def set_volume(self, gain: float) -> None:
        self.volume = gain

    def unload(self) -> None:
        self.playing = False
        self.unloaded = True

    def end(self):
        """Simulate the natural end of audio."""
        self.pos = self.duration
        self.playing = False
        self.on_end()

class FakeAudioBackend(AudioBackend):
    """Backend recording every opened session."""

    def __init__(self):
        self.sessions: List[FakeAudioSession] = []
        self.fail_load: Set[str] = set()
        self.fail_play = False
        self.gates: Dict[str, asyncio.Event] = {}
        self.play_gate: Optional[asyncio.Event] = None

    def open(self, track: Track, volume: float, on_end) -> AudioSession:
        session = FakeAudioSession(self, track, volume, on_end)
        self.sessions.append(session)
        return session

    @property
    def live_sessions(self) -> List[FakeAudioSession]:
        return [session for session in self.sessions if not session.unloaded]

    @property
    def last(self) -> FakeAudioSession:
        return self.sessions[-1]

class ManualTickerHandle(TickerHandle):

    def __init__(self, callback):
        self.callback = callback
        self._active = True

    def cancel(self) -> None:
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

class ManualTicker(Ticker):
    """Ticker that fires only when tick() is called."""

    def __init__(self):
        self.handles: List[ManualTickerHandle] = []

    def start(self, interval: float, callback) -> TickerHandle:
        handle = ManualTickerHandle(callback)
        self.handles.append(handle)
        return handle

    def tick(self):
        for handle in list(self.handles):
            if handle.active:
                handle.callback()

    @property
    def active_count(self) -> int:
        return sum(1 for handle in self.handles if handle.active)

class FakeCatalog(TrackCatalog):
    """In-memory catalog recording queries and play increments."""

    def __init__(self, tracks: Optional[List[Track]] = None):
        self.tracks = list(tracks or [])
        self.queries: List[List[str]] = []
        self.plays: List[str] = []
        self.fail_increment = False

    async def query_by_tags(self, tags: Iterable[str], visibility: str = "public",
                            moderation_status: str = "approved") -> List[Track]:
        tags = list(tags)
        self.queries.append(tags)
        return [
            track for track in self.tracks
            if set(track.mood_tags) & set(tags)
            and track.visibility == visibility
            and track.moderation_status == moderation_status
        ]

    async def increment_play_count(self, track_id: str) -> None:
        if self.fail_increment:
            raise ConnectionError("catalog offline")
        self.plays.append(track_id)

    async def find_by_ids(self, track_ids: Iterable[str]) -> List[Track]:
        wanted = set(track_ids)
        return [track for track in self.tracks if track.id in wanted]

def build_track(track_id: str, **overrides) -> Track:
    values = {
        "id": track_id,
        "title": f"Track {track_id}",
        "artist": "artist_1",
        "artist_name": "Night Shift",
        "audio_url": f"https://cdn.example.com/{track_id}.mp3",
        "duration": 180.0,
        "mood_tags": ["energy"],
    }
    values.update(overrides)
    return Track(**values)

@pytest.fixture
def track_factory():
    """Factory building catalog tracks with sensible defaults."""
    return build_track

@pytest.fixture
def sample_track():
    """Sample track for testing."""
    return build_track(
        "track_123",
        title="Midnight Run",
        duration=215.0,
        mood_tags=["run", "adrenaline"],
        intensity=8,
        plays=1200,
        likes=85,
        genre="phonk",
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc)
    )

@pytest.fixture
def queue_tracks():
    """Five queued tracks t0..t4."""
    return [build_track(f"t{i}") for i in range(5)]

@pytest.fixture
def settings():
    return Settings()

@pytest.fixture
def rng():
    return random.Random(1234)

@pytest.fixture
def fake_backend():
    return FakeAudioBackend()

@pytest.fixture
def manual_ticker():
    return ManualTicker()

@pytest.fixture
def fake_catalog():
    return FakeCatalog()

@pytest.fixture
def controller(fake_backend, fake_catalog, manual_ticker, rng):
    """Playback controller wired to fakes."""
    return PlaybackController(
        backend=fake_backend,
        catalog=fake_catalog,
        ticker=manual_ticker,
        rng=rng
    )
