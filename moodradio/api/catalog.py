"""
Track catalog interface consumed by the radio generator and the player.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List
from moodradio.models.track import Track

class TrackCatalog(ABC):
    """Read access to catalog tracks plus the play counter."""

    @abstractmethod
    async def query_by_tags(
        self,
        tags: Iterable[str],
        visibility: str = "public",
        moderation_status: str = "approved"
    ) -> List[Track]:
        """Return all tracks whose mood tags intersect `tags` and pass the visibility filters."""
        pass

    @abstractmethod
    async def increment_play_count(self, track_id: str) -> None:
        """Increment the play counter of a track."""
        pass

    @abstractmethod
    async def find_by_ids(self, track_ids: Iterable[str]) -> List[Track]:
        """Fetch tracks by id, ignoring unknown ids."""
        pass
