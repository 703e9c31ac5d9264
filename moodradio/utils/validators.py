"""
Input validation utilities for radio requests and player parameters.
"""

from typing import Any, Union
from moodradio.errors import ValidationError

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")

class RadioRequestValidator:
    """Validator for mood radio generation parameters."""

    @classmethod
    def validate_limit(cls, limit: Any) -> int:
        """
        Validate the playlist size limit.

        Args:
            limit: Requested number of tracks

        Returns:
            The limit as an int

        Raises:
            ValidationError: If the limit is not a positive integer
        """
        if isinstance(limit, bool):
            raise ValidationError("Limit must be a positive integer")
        try:
            value = int(limit)
        except (ValueError, TypeError):
            raise ValidationError("Limit must be a positive integer")

        if value != limit and not isinstance(limit, str):
            raise ValidationError("Limit must be a positive integer")
        if value < 1:
            raise ValidationError("Limit must be a positive integer")

        return value

    @classmethod
    def validate_shuffle(cls, shuffle: Union[bool, str, None], default: bool = True) -> bool:
        """Parse a shuffle flag given as bool or query-string text."""
        if shuffle is None:
            return default
        if isinstance(shuffle, bool):
            return shuffle
        if isinstance(shuffle, str):
            text = shuffle.strip().lower()
            if text in _TRUE_VALUES:
                return True
            if text in _FALSE_VALUES:
                return False
        raise ValidationError(f"Invalid shuffle flag: {shuffle!r}")

def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp value into [lower, upper]."""
    return max(lower, min(upper, value))
