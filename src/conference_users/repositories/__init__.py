"""Data access layer.

This module provides the user record store and its statement catalog
with proper error handling and type safety.
"""

from .user_store import StoreError, UserRecordStore

__all__ = [
    "StoreError",
    "UserRecordStore",
]
