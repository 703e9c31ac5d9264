"""
Playback state value objects exposed by the playback controller.
"""

from enum import Enum
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
from .track import Track

class RepeatMode(str, Enum):
    """Repeat policy applied when a track ends."""
    NONE = "none"
    ONE = "one"
    ALL = "all"

    def next(self) -> 'RepeatMode':
        """Cycle none -> one -> all -> none."""
        order = [RepeatMode.NONE, RepeatMode.ONE, RepeatMode.ALL]
        return order[(order.index(self) + 1) % len(order)]

class PlayerStatus(str, Enum):
    """States of the playback state machine."""
    IDLE = "idle"
    LOADING = "loading"
    READY_PAUSED = "ready_paused"
    READY_PLAYING = "ready_playing"
    ENDED = "ended"

    @property
    def is_ready(self) -> bool:
        return self in (PlayerStatus.READY_PAUSED, PlayerStatus.READY_PLAYING)

@dataclass(frozen=True)
class PlaybackSnapshot:
    """Read-only view of the controller state for UI binding."""
    current_track: Optional[Track] = None
    status: PlayerStatus = PlayerStatus.IDLE
    volume: float = 0.7
    is_muted: bool = False
    shuffle: bool = False
    repeat_mode: RepeatMode = RepeatMode.NONE
    elapsed: float = 0.0
    duration: float = 0.0
    playlist: Tuple[Track, ...] = ()
    cursor: int = -1
    history: Tuple[Track, ...] = ()
    last_error: Optional[str] = None

    @property
    def is_playing(self) -> bool:
        return self.status == PlayerStatus.READY_PLAYING

    @property
    def is_loading(self) -> bool:
        return self.status == PlayerStatus.LOADING

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary representation."""
        return {
            "currentTrack": self.current_track.to_dict() if self.current_track else None,
            "status": self.status.value,
            "isPlaying": self.is_playing,
            "isLoading": self.is_loading,
            "volume": self.volume,
            "isMuted": self.is_muted,
            "shuffle": self.shuffle,
            "repeatMode": self.repeat_mode.value,
            "elapsed": self.elapsed,
            "duration": self.duration,
            "playlist": [track.id for track in self.playlist],
            "cursor": self.cursor,
            "history": [track.id for track in self.history],
            "lastError": self.last_error
        }
