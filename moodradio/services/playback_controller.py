"""
Playback queue controller.

Owns the play queue, the cursor, the listening history and exactly one active
audio session. All transitions between tracks go through this class; UI code
reads PlaybackSnapshot objects and never mutates state directly.
"""

import asyncio
import logging
import random
from typing import Callable, List, Optional, Sequence, Set
from moodradio.api.catalog import TrackCatalog
from moodradio.errors import (
    ErrorCode,
    LoadFailedError,
    NoTrackLoadedError,
    PlaybackError,
    PlayFailedError,
    ValidationError
)
from moodradio.models.playback_state import PlaybackSnapshot, PlayerStatus, RepeatMode
from moodradio.models.track import Track
from moodradio.services.audio_backend import AudioBackend, AudioSession
from moodradio.services.timers import AsyncioTicker, Ticker, TickerHandle
from moodradio.utils.validators import clamp
from config.settings import Settings, PlayerConfig

logger = logging.getLogger(__name__)

Listener = Callable[[PlaybackSnapshot], None]

class PlaybackController:
    """Queue-aware playback state machine over an injected audio backend."""

    def __init__(
        self,
        backend: AudioBackend,
        catalog: Optional[TrackCatalog] = None,
        ticker: Optional[Ticker] = None,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the controller.

        Args:
            backend: Audio backend that opens one session per loaded track
            catalog: Catalog receiving play-count increments (optional)
            ticker: Periodic timer used to poll elapsed time while playing
            settings: Application settings (player defaults)
            rng: Random source for shuffle decisions
        """
        self.backend = backend
        self.catalog = catalog
        self.ticker = ticker or AsyncioTicker()
        self.config: PlayerConfig = settings.player if settings else PlayerConfig()
        self.rng = rng or random.Random()

        self._session: Optional[AudioSession] = None
        self._pending_session: Optional[AudioSession] = None
        self._load_generation = 0
        self._progress: Optional[TickerHandle] = None
        self._tasks: Set[asyncio.Future] = set()
        self._listeners: List[Listener] = []

        self._status = PlayerStatus.IDLE
        self._current_track: Optional[Track] = None
        self._volume = clamp(self.config.default_volume, 0.0, 1.0)
        self._muted = False
        self._shuffle = False
        self._repeat = RepeatMode.NONE
        self._elapsed = 0.0
        self._duration = 0.0
        self._playlist: List[Track] = []
        self._cursor = -1
        self._history: List[Track] = []
        self._last_error: Optional[ErrorCode] = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # -- observation -------------------------------------------------------

    @property
    def state(self) -> PlaybackSnapshot:
        """Current read-only state snapshot."""
        return PlaybackSnapshot(
            current_track=self._current_track,
            status=self._status,
            volume=self._volume,
            is_muted=self._muted,
            shuffle=self._shuffle,
            repeat_mode=self._repeat,
            elapsed=self._elapsed,
            duration=self._duration,
            playlist=tuple(self._playlist),
            cursor=self._cursor,
            history=tuple(self._history),
            last_error=self._last_error.value if self._last_error else None
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        snapshot = self.state
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Playback state listener failed")

    # -- transport -----------------------------------------------------------

    async def load(self, track: Track, playlist: Optional[Sequence[Track]] = None, start_index: int = 0) -> bool:
        """
        Load a track, replacing the active audio session.

        Args:
            track: Track to load
            playlist: New queue; when omitted the track is located in (or appended to) the current queue
            start_index: Cursor position of `track` in `playlist`

        Returns:
            True when the track is ready, False when a newer load superseded this one

        Raises:
            LoadFailedError: The audio resource could not be loaded (controller returns to Idle)
        """
        if playlist and not 0 <= start_index < len(playlist):
            raise ValidationError(f"Start index {start_index} out of range for {len(playlist)} tracks")

        self._load_generation += 1
        generation = self._load_generation
        self._release_sessions()

        if playlist:
            self._playlist = list(playlist)
            self._cursor = start_index
        else:
            self._cursor = self._queue_position(track)

        self._current_track = track
        self._elapsed = 0.0
        self._duration = 0.0
        self._last_error = None
        self._set_status(PlayerStatus.LOADING)

        self._report_play(track.id)

        session = self.backend.open(track, self._gain(), lambda: self._on_session_end(generation))
        self._pending_session = session
        try:
            duration = await session.load()
        except asyncio.CancelledError:
            session.unload()
            if generation == self._load_generation:
                self._pending_session = None
                self._current_track = None
                self._set_status(PlayerStatus.IDLE)
                logger.info(f"Load of {track.id} cancelled")
            raise
        except Exception as e:
            session.unload()
            if generation != self._load_generation:
                logger.debug(f"Superseded load of {track.id} failed: {e}")
                return False
            self._pending_session = None
            self._current_track = None
            self._last_error = ErrorCode.LOAD_FAILED
            self._set_status(PlayerStatus.IDLE)
            logger.error(f"Failed to load track {track.id} ({track.title}): {e}")
            raise LoadFailedError(f"Failed to load '{track.title}': {e}") from e

        if generation != self._load_generation:
            session.unload()
            logger.debug(f"Load of {track.id} superseded, released its session")
            return False

        self._pending_session = None
        self._session = session
        self._duration = float(duration or 0)
        self._history.insert(0, track)
        del self._history[self.config.history_limit:]
        self._set_status(PlayerStatus.READY_PAUSED)
        logger.info(f"Track loaded: {track.title}")

        if self.config.auto_play:
            await self.play()
        return True

    async def play(self, track: Optional[Track] = None, playlist: Optional[Sequence[Track]] = None, start_index: int = 0):
        """
        Start playback, loading `track` first when it is not the current one.

        Raises:
            NoTrackLoadedError: Nothing is loaded
            PlayFailedError: The backend refused to start (state stays Ready-Paused)
        """
        if track is not None and (self._session is None or self._current_track is None
                                  or track.id != self._current_track.id):
            if not await self.load(track, playlist, start_index):
                return

        if self._status == PlayerStatus.READY_PLAYING:
            return
        session = self._require_session()
        generation = self._load_generation

        try:
            await session.play()
        except Exception as e:
            if generation != self._load_generation or self._session is not session:
                logger.debug(f"Superseded play failed: {e}")
                return
            self._last_error = ErrorCode.PLAY_FAILED
            self._set_status(PlayerStatus.READY_PAUSED)
            logger.error(f"Audio play error: {e}")
            raise PlayFailedError(f"Playback failed: {e}") from e

        # a load() during the await owns the controller now
        if generation != self._load_generation or self._session is not session:
            return
        self._set_status(PlayerStatus.READY_PLAYING)

    def pause(self):
        """Ready-Playing -> Ready-Paused."""
        session = self._require_session()
        if self._status != PlayerStatus.READY_PLAYING:
            return
        session.pause()
        self._elapsed = session.position()
        self._set_status(PlayerStatus.READY_PAUSED)

    def stop(self):
        """Pause and rewind to the start of the track."""
        session = self._require_session()
        session.stop()
        self._elapsed = 0.0
        self._set_status(PlayerStatus.READY_PAUSED)

    def seek(self, seconds: float):
        """Move the playhead, clamped to [0, duration]."""
        session = self._require_session()
        position = clamp(float(seconds), 0.0, self._duration)
        session.seek(position)
        self._elapsed = position
        self._notify()

    async def handle_track_end(self):
        """Natural end of audio: dispatch according to the repeat mode."""
        if self._session is None:
            return

        self._elapsed = self._duration
        self._set_status(PlayerStatus.ENDED)

        try:
            if self._repeat == RepeatMode.ONE:
                await self._restart_current()
            elif self._repeat == RepeatMode.ALL:
                await self.play_next()
            elif self._cursor < len(self._playlist) - 1:
                await self.play_next()
            else:
                self._session.seek(0)
                self._elapsed = 0.0
                self._set_status(PlayerStatus.READY_PAUSED)
        except PlaybackError as e:
            logger.warning(f"Auto-advance stopped: {e.message}")

    # -- queue navigation ----------------------------------------------------

    async def play_next(self) -> Optional[int]:
        """
        Advance to the next track.

        Returns:
            The new cursor, or None when there is nothing to advance to
        """
        if not self._playlist:
            return None

        if self._shuffle:
            candidates = [i for i in range(len(self._playlist)) if i != self._cursor]
            if not candidates:
                await self._restart_current()
                return self._cursor
            next_index = self.rng.choice(candidates)
        else:
            next_index = self._cursor + 1
            if next_index >= len(self._playlist):
                if self._repeat != RepeatMode.ALL:
                    return None
                next_index = 0

        if next_index == self._cursor:
            await self._restart_current()
        else:
            await self._play_index(next_index)
        return next_index

    async def play_previous(self) -> Optional[int]:
        """
        Go back: restart the current track after the restart threshold,
        otherwise move to the previous track.
        """
        if not self._playlist:
            return None

        if self._session is not None and self._current_elapsed() > self.config.restart_threshold:
            self.seek(0)
            return self._cursor

        if self._shuffle:
            prev_index = None
            if len(self._history) > 1:
                prev_index = self._index_of(self._history[1].id)
            if prev_index is None:
                prev_index = self.rng.randrange(len(self._playlist))
        else:
            prev_index = self._cursor - 1
            if prev_index < 0:
                prev_index = len(self._playlist) - 1 if self._repeat == RepeatMode.ALL else 0

        if prev_index == self._cursor:
            await self._restart_current()
        else:
            await self._play_index(prev_index)
        return prev_index

    def toggle_shuffle(self) -> bool:
        self._shuffle = not self._shuffle
        self._notify()
        return self._shuffle

    def cycle_repeat(self) -> RepeatMode:
        self._repeat = self._repeat.next()
        self._notify()
        return self._repeat

    def add_to_queue(self, track: Track):
        """Append a track to the end of the queue."""
        self._playlist.append(track)
        self._notify()

    def remove_from_queue(self, index: int) -> bool:
        """
        Remove the track at `index`. Removing the current track stops playback
        and clears it; removing an earlier track shifts the cursor back by one.
        """
        if not 0 <= index < len(self._playlist):
            return False

        del self._playlist[index]
        if index == self._cursor:
            self._teardown()
            self._cursor = -1
        elif index < self._cursor:
            self._cursor -= 1

        self._notify()
        return True

    def clear_queue(self):
        """Stop playback and empty the queue."""
        self._teardown()
        self._playlist = []
        self._cursor = -1
        self._notify()

    # -- output --------------------------------------------------------------

    def set_volume(self, volume: float):
        self._volume = clamp(float(volume), 0.0, 1.0)
        if self._session is not None and not self._muted:
            self._session.set_volume(self._volume)
        self._notify()

    def toggle_mute(self) -> bool:
        self._muted = not self._muted
        if self._session is not None:
            self._session.set_volume(self._gain())
        self._notify()
        return self._muted

    async def close(self):
        """Release the audio session, stop polling and cancel pending telemetry."""
        self._teardown()
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    # -- internals -----------------------------------------------------------

    def _gain(self) -> float:
        return 0.0 if self._muted else self._volume

    def _require_session(self) -> AudioSession:
        if self._session is None or self._status in (PlayerStatus.IDLE, PlayerStatus.LOADING):
            raise NoTrackLoadedError()
        return self._session

    def _current_elapsed(self) -> float:
        if self._session is not None and self._status == PlayerStatus.READY_PLAYING:
            return self._session.position()
        return self._elapsed

    def _index_of(self, track_id: str) -> Optional[int]:
        for index, queued in enumerate(self._playlist):
            if queued.id == track_id:
                return index
        return None

    def _queue_position(self, track: Track) -> int:
        if 0 <= self._cursor < len(self._playlist) and self._playlist[self._cursor].id == track.id:
            return self._cursor
        index = self._index_of(track.id)
        if index is None:
            self._playlist.append(track)
            index = len(self._playlist) - 1
        return index

    async def _play_index(self, index: int):
        if await self.load(self._playlist[index], self._playlist, index):
            await self.play()

    async def _restart_current(self):
        if self._session is None:
            if 0 <= self._cursor < len(self._playlist):
                await self._play_index(self._cursor)
            return
        self._session.seek(0)
        self._elapsed = 0.0
        self._set_status(PlayerStatus.READY_PAUSED)
        await self.play()

    def _set_status(self, status: PlayerStatus):
        if status != PlayerStatus.READY_PLAYING:
            self._stop_progress()
        elif self._progress is None:
            self._progress = self.ticker.start(self.config.progress_interval, self._on_progress_tick)
        self._status = status
        self._notify()

    def _stop_progress(self):
        if self._progress is not None:
            self._progress.cancel()
            self._progress = None

    def _on_progress_tick(self):
        if self._session is None or self._status != PlayerStatus.READY_PLAYING:
            return
        self._elapsed = self._session.position()
        self._notify()

    def _release_sessions(self):
        """Unload the active and any in-flight session."""
        self._stop_progress()
        for session in (self._pending_session, self._session):
            if session is not None:
                session.unload()
        self._pending_session = None
        self._session = None

    def _teardown(self):
        """Drop the current track entirely; cancels any in-flight load."""
        self._load_generation += 1
        self._release_sessions()
        self._current_track = None
        self._elapsed = 0.0
        self._duration = 0.0
        self._status = PlayerStatus.IDLE

    def _on_session_end(self, generation: int):
        if generation != self._load_generation or self._session is None:
            return
        self._spawn(self.handle_track_end())

    def _report_play(self, track_id: str):
        if self.catalog is None:
            return
        self._spawn(self._increment_play_count(track_id))

    async def _increment_play_count(self, track_id: str):
        try:
            await self.catalog.increment_play_count(track_id)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning(f"Failed to track play for {track_id}: {e}")

    def _spawn(self, coro):
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
