"""Utility modules for the mood radio service."""

from .cache_manager import CacheManager
from .validators import RadioRequestValidator, clamp

__all__ = [
    'CacheManager',
    'RadioRequestValidator',
    'clamp'
]
