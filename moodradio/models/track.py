"""
Track data model representing a catalog track with mood metadata and engagement counters.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
from datetime import datetime

PLAYS_WEIGHT = 0.7
LIKES_WEIGHT = 0.3
DEFAULT_INTENSITY = 5

@dataclass
class Track:
    """Represents a catalog track."""
    id: str                               # Unique identifier
    title: str                            # Track title
    artist: str                           # Artist reference (user id)
    audio_url: str                        # Audio file location
    duration: float = 0.0                 # Duration in seconds
    artist_name: str = ""                 # Display name of the artist
    mood_tags: List[str] = field(default_factory=list)
    intensity: int = DEFAULT_INTENSITY    # 1-10
    plays: int = 0
    likes: int = 0
    genre: Optional[str] = None
    cover_url: Optional[str] = None
    visibility: str = "public"            # public, unlisted, private
    moderation_status: str = "approved"   # pending, approved, rejected
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert track to dictionary representation."""
        return {
            "id": self.id,
            "title": self.title,
            "artist": self.artist,
            "artistName": self.artist_name,
            "audioUrl": self.audio_url,
            "duration": self.duration,
            "formattedDuration": formatted_duration(self),
            "moodTags": list(self.mood_tags),
            "dominantMood": dominant_mood(self),
            "intensity": self.intensity,
            "stats": {"plays": self.plays, "likes": self.likes},
            "genre": self.genre,
            "coverUrl": self.cover_url,
            "visibility": self.visibility,
            "moderationStatus": self.moderation_status,
            "createdAt": self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Track':
        """Create Track from dictionary representation."""
        stats = data.get("stats") or {}
        created_at = data.get("createdAt")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at.replace("Z", "+00:00"))

        return cls(
            id=str(data["id"]),
            title=data["title"],
            artist=str(data.get("artist", "")),
            artist_name=data.get("artistName", ""),
            audio_url=data.get("audioUrl", ""),
            duration=float(data.get("duration") or 0),
            mood_tags=list(data.get("moodTags") or []),
            intensity=int(data.get("intensity") or DEFAULT_INTENSITY),
            plays=int(stats.get("plays", 0)),
            likes=int(stats.get("likes", 0)),
            genre=data.get("genre"),
            cover_url=data.get("coverUrl"),
            visibility=data.get("visibility", "public"),
            moderation_status=data.get("moderationStatus", "approved"),
            created_at=created_at
        )

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> 'Track':
        """Create Track from a catalog document (nested storage schema)."""
        audio_file = doc.get("audioFile") or {}
        metadata = doc.get("criminalMetadata") or {}
        stats = doc.get("stats") or {}
        cover_art = doc.get("coverArt") or {}
        artist = doc.get("artist")
        if isinstance(artist, dict):
            artist = artist.get("_id") or artist.get("id")

        return cls(
            id=str(doc.get("_id", doc.get("id"))),
            title=doc.get("title", "Unknown Track"),
            artist=str(artist) if artist is not None else "",
            artist_name=doc.get("artistName", "Unknown Artist"),
            audio_url=audio_file.get("url", ""),
            duration=float(audio_file.get("duration") or 0),
            mood_tags=list(metadata.get("moodTags") or []),
            intensity=int(metadata.get("intensity") or DEFAULT_INTENSITY),
            plays=int(stats.get("plays", 0)),
            likes=int(stats.get("likes", 0)),
            genre=doc.get("genre"),
            cover_url=cover_art.get("url"),
            visibility=doc.get("visibility", "public"),
            moderation_status=doc.get("moderationStatus", "pending"),
            created_at=doc.get("createdAt")
        )

def formatted_duration(track: Track) -> str:
    """Get formatted duration string (M:SS)."""
    if not track.duration:
        return "0:00"
    total_seconds = int(track.duration)
    minutes = total_seconds // 60
    seconds = total_seconds % 60
    return f"{minutes}:{seconds:02d}"

def dominant_mood(track: Track) -> str:
    """First mood tag of the track, or 'unknown'."""
    if not track.mood_tags:
        return "unknown"
    return track.mood_tags[0]

def popularity_score(track: Track) -> float:
    """Weighted popularity used to rank radio candidates."""
    return PLAYS_WEIGHT * track.plays + LIKES_WEIGHT * track.likes
