"""Pydantic schemas for user listings.

This module exports the typed filter and query schemas accepted by the
user store in place of raw SQL fragments.
"""

from .user_schemas import SortOrder, UserFilter, UserQuery, UserSortField

__all__ = [
    "SortOrder",
    "UserFilter",
    "UserQuery",
    "UserSortField",
]
