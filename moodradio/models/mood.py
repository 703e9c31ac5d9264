"""
Static mood categories used for radio generation.
"""

from dataclasses import dataclass
from typing import Dict, Any, List, Tuple
from moodradio.errors import UnknownMoodError

@dataclass(frozen=True)
class MoodDefinition:
    """A named mood mapped to a fixed set of content tags."""
    id: str
    name: str
    icon: str
    tags: Tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "tags": list(self.tags)
        }

MOOD_CATEGORIES: Dict[str, MoodDefinition] = {
    "aggression": MoodDefinition("aggression", "Aggression", "🔫", ("rage", "anger", "fight", "hardcore")),
    "melancholy": MoodDefinition("melancholy", "Melancholy", "🌧️", ("sad", "rain", "lonely", "blues")),
    "love": MoodDefinition("love", "Love", "❤️‍🔥", ("love", "romance", "passion", "heart")),
    "mystery": MoodDefinition("mystery", "Mystery", "🎭", ("mystery", "dark", "secret", "underground")),
    "energy": MoodDefinition("energy", "Energy", "🏃", ("energy", "run", "fast", "adrenaline")),
}

def get_mood(mood_id: str) -> MoodDefinition:
    """
    Resolve a mood identifier (case-insensitive).

    Raises:
        UnknownMoodError: If no mood category matches
    """
    mood = MOOD_CATEGORIES.get((mood_id or "").strip().lower())
    if mood is None:
        raise UnknownMoodError(mood_id)
    return mood

def list_moods() -> List[MoodDefinition]:
    """All mood definitions in declaration order."""
    return list(MOOD_CATEGORIES.values())
