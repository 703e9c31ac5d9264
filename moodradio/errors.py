"""
Error taxonomy shared by the radio service and the playback controller.
Every error carries a stable code so callers can branch on the kind of failure.
"""

from enum import Enum
from typing import Dict, Any, Optional

class ErrorCode(str, Enum):
    """Stable, enumerable error codes."""
    UNKNOWN_MOOD = "UNKNOWN_MOOD"
    LOAD_FAILED = "LOAD_FAILED"
    PLAY_FAILED = "PLAY_FAILED"
    NO_TRACK_LOADED = "NO_TRACK_LOADED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CATALOG_ERROR = "CATALOG_ERROR"

class MoodRadioError(Exception):
    """Base exception for all recoverable application errors."""
    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    status_code: int = 400
    title: str = "Bad request"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.title)
        self.message = message or self.title

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to the JSON error body."""
        return {
            "error": self.title,
            "message": self.message,
            "code": self.code.value
        }

class UnknownMoodError(MoodRadioError):
    """Raised when a mood identifier does not match any mood category."""
    code = ErrorCode.UNKNOWN_MOOD
    status_code = 400
    title = "Unknown mood"

    def __init__(self, mood_id: str):
        super().__init__(f"Unknown mood: {mood_id}")
        self.mood_id = mood_id

class ValidationError(MoodRadioError):
    """Raised for invalid request parameters."""
    code = ErrorCode.VALIDATION_ERROR
    status_code = 400
    title = "Validation error"

class CatalogError(MoodRadioError):
    """Raised when the track catalog cannot be reached or answers badly."""
    code = ErrorCode.CATALOG_ERROR
    status_code = 502
    title = "Catalog unavailable"

class PlaybackError(MoodRadioError):
    """Base class for playback controller errors."""
    status_code = 409

class LoadFailedError(PlaybackError):
    """The audio resource could not be fetched or decoded."""
    code = ErrorCode.LOAD_FAILED
    title = "Track failed to load"

class PlayFailedError(PlaybackError):
    """The audio backend refused to start playback."""
    code = ErrorCode.PLAY_FAILED
    title = "Playback failed to start"

class NoTrackLoadedError(PlaybackError):
    """A transport operation was attempted with no track loaded."""
    code = ErrorCode.NO_TRACK_LOADED
    title = "No track loaded"
