"""
Audio backend capability interface and a headless simulated implementation.

The playback controller never talks to a decoder directly: it opens one
AudioSession per loaded track through an AudioBackend and releases it with
unload() before the next one is installed.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional
from moodradio.models.track import Track

logger = logging.getLogger(__name__)

EndCallback = Callable[[], None]

class AudioSession(ABC):
    """One decoded audio resource."""

    @abstractmethod
    async def load(self) -> float:
        """Fetch and decode the resource. Returns the duration in seconds."""
        pass

    @abstractmethod
    async def play(self) -> None:
        """Start or resume playback."""
        pass

    @abstractmethod
    def pause(self) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        """Pause and rewind to the start."""
        pass

    @abstractmethod
    def seek(self, seconds: float) -> None:
        pass

    @abstractmethod
    def position(self) -> float:
        """Current playback position in seconds."""
        pass

    @abstractmethod
    def set_volume(self, gain: float) -> None:
        pass

    @abstractmethod
    def unload(self) -> None:
        """Release the resource. Further calls other than unload() are invalid."""
        pass

class AudioBackend(ABC):
    """Creates audio sessions."""

    @abstractmethod
    def open(self, track: Track, volume: float, on_end: EndCallback) -> AudioSession:
        """Create an unloaded session for `track`; `on_end` fires on natural end of audio."""
        pass

class SimulatedAudioSession(AudioSession):
    """Session that advances a virtual playhead against a monotonic clock."""

    def __init__(self, track: Track, volume: float, on_end: EndCallback,
                 clock: Callable[[], float], load_delay: float = 0.0):
        self.track = track
        self.volume = volume
        self.on_end = on_end
        self.clock = clock
        self.load_delay = load_delay
        self.duration = 0.0
        self.loaded = False
        self.unloaded = False
        self.playing = False
        self._offset = 0.0
        self._started_at: Optional[float] = None
        self._end_timer: Optional[asyncio.TimerHandle] = None

    async def load(self) -> float:
        await asyncio.sleep(self.load_delay)
        if self.unloaded:
            raise RuntimeError("Session was unloaded while loading")
        if not self.track.audio_url:
            raise FileNotFoundError(f"No audio source for track {self.track.id}")
        self.duration = float(self.track.duration or 0)
        self.loaded = True
        return self.duration

    async def play(self) -> None:
        if not self.loaded or self.unloaded:
            raise RuntimeError("Session is not loaded")
        if self.playing:
            return
        self.playing = True
        self._started_at = self.clock()
        self._schedule_end()

    def pause(self) -> None:
        if not self.playing:
            return
        self._offset = self.position()
        self.playing = False
        self._started_at = None
        self._cancel_end()

    def stop(self) -> None:
        self.pause()
        self._offset = 0.0

    def seek(self, seconds: float) -> None:
        self._offset = max(0.0, min(seconds, self.duration))
        if self.playing:
            self._started_at = self.clock()
            self._schedule_end()

    def position(self) -> float:
        if self.playing and self._started_at is not None:
            return min(self.duration, self._offset + (self.clock() - self._started_at))
        return self._offset

    def set_volume(self, gain: float) -> None:
        self.volume = gain

    def unload(self) -> None:
        self._cancel_end()
        self.playing = False
        self.unloaded = True

    def _schedule_end(self):
        self._cancel_end()
        remaining = max(0.0, self.duration - self._offset)
        self._end_timer = asyncio.get_running_loop().call_later(remaining, self._finish)

    def _cancel_end(self):
        if self._end_timer is not None:
            self._end_timer.cancel()
            self._end_timer = None

    def _finish(self):
        self._end_timer = None
        self._offset = self.duration
        self.playing = False
        self._started_at = None
        if not self.unloaded:
            self.on_end()

class SimulatedAudioBackend(AudioBackend):
    """Headless backend: plays tracks for their catalog duration without decoding audio."""

    def __init__(self, clock: Optional[Callable[[], float]] = None, load_delay: float = 0.0):
        self.clock = clock or time.monotonic
        self.load_delay = load_delay

    def open(self, track: Track, volume: float, on_end: EndCallback) -> AudioSession:
        logger.debug(f"Opening simulated session for {track.id}")
        return SimulatedAudioSession(track, volume, on_end, self.clock, self.load_delay)
