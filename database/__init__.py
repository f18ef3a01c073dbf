"""
Database module for the quote service.
Provides the MongoDB connection handle and collection-scoped store adapters.
"""

from .connection import MongoManager
from .operations import DocumentStore
from .models import QuoteStatus, parse_object_id

__all__ = ['models', 'connection', 'operations', 'MongoManager', 'DocumentStore', 'QuoteStatus', 'parse_object_id']
