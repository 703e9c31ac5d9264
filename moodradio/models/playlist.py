"""
Mood playlist data model: an immutable, metadata-annotated radio track list.
"""

import math
from dataclasses import dataclass
from typing import Dict, Any, Optional, List, Tuple, Sequence
from datetime import datetime, timezone
from pydantic import BaseModel
from .track import Track
from .mood import MoodDefinition

@dataclass(frozen=True)
class PlaylistStats:
    """Aggregate metadata over the tracks of a generated playlist."""
    total_tracks: int = 0
    total_duration: float = 0
    average_intensity: float = 0

    @classmethod
    def from_tracks(cls, tracks: Sequence[Track]) -> 'PlaylistStats':
        """Compute stats over the final track list (zeros when empty)."""
        if not tracks:
            return cls()

        total_duration = sum(track.duration or 0 for track in tracks)
        average_intensity = sum(track.intensity for track in tracks) / len(tracks)

        return cls(
            total_tracks=len(tracks),
            total_duration=total_duration,
            average_intensity=math.floor(average_intensity * 10 + 0.5) / 10
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTracks": self.total_tracks,
            "totalDuration": self.total_duration,
            "averageIntensity": self.average_intensity
        }

@dataclass(frozen=True)
class MoodPlaylist:
    """Represents a generated mood radio playlist."""
    id: str
    name: str
    description: str
    mood: MoodDefinition
    tracks: Tuple[Track, ...]
    stats: PlaylistStats
    generated_at: datetime

    @property
    def track_count(self) -> int:
        """Get number of tracks in playlist."""
        return len(self.tracks)

    def to_dict(self) -> Dict[str, Any]:
        """Convert playlist to its JSON response shape."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "mood": self.mood.to_dict(),
            "tracks": [track.to_dict() for track in self.tracks],
            "stats": self.stats.to_dict(),
            "generatedAt": self.generated_at.isoformat()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MoodPlaylist':
        """Create MoodPlaylist from a radio response body."""
        mood_data = data.get("mood") or {}
        stats_data = data.get("stats") or {}

        generated_at = data.get("generatedAt")
        if isinstance(generated_at, str):
            generated_at = datetime.fromisoformat(generated_at.replace("Z", "+00:00"))
        elif generated_at is None:
            generated_at = datetime.now(timezone.utc)

        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            mood=MoodDefinition(
                id=mood_data.get("id", ""),
                name=mood_data.get("name", ""),
                icon=mood_data.get("icon", ""),
                tags=tuple(mood_data.get("tags") or ())
            ),
            tracks=tuple(Track.from_dict(track) for track in data.get("tracks") or []),
            stats=PlaylistStats(
                total_tracks=stats_data.get("totalTracks", 0),
                total_duration=stats_data.get("totalDuration", 0),
                average_intensity=stats_data.get("averageIntensity", 0)
            ),
            generated_at=generated_at
        )

class PlaylistResponse(BaseModel):
    """Pydantic model for API responses with playlist data."""
    id: str
    name: str
    description: Optional[str] = None
    mood: Dict[str, Any]
    tracks: List[Dict[str, Any]]
    stats: Dict[str, Any]
    generatedAt: str

    @classmethod
    def from_playlist(cls, playlist: MoodPlaylist) -> 'PlaylistResponse':
        """Create response model from MoodPlaylist object."""
        return cls(**playlist.to_dict())
