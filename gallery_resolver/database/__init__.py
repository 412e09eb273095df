"""Data store access for Gallery Resolver."""

from .db_manager import DatabaseError, DatabaseManager
from .models import AlbumRecord

__all__ = ["AlbumRecord", "DatabaseError", "DatabaseManager"]
