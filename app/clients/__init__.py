"""Expose constructed client wrappers."""

from .dynamodb import DynamoDBClient
from .google_drive import GoogleDriveClient
from .sqlite_store import SQLiteStore

__all__ = [
    "DynamoDBClient",
    "GoogleDriveClient",
    "SQLiteStore",
]
