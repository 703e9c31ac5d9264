"""Catalog collaborators: the catalog interface, its MongoDB store and its HTTP client."""

from .catalog import TrackCatalog
from .base_client import BaseAPIClient, APIError, AuthenticationError
from .catalog_client import CatalogClient
from .mongo_catalog import MongoTrackCatalog

__all__ = [
    'TrackCatalog',
    'BaseAPIClient',
    'APIError',
    'AuthenticationError',
    'CatalogClient',
    'MongoTrackCatalog'
]
