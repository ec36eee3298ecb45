"""SQLModel data models.

This module exports all database models and schemas for the user store.
Import models from here to ensure every table is registered with the
SQLModel metadata before the schema is created.
"""

from .event import Event, Report, UserHasEvent
from .user import Role, User, UserBase, UserCreate

__all__ = [
    # User models
    "Role",
    "User",
    "UserBase",
    "UserCreate",
    # Event models
    "Event",
    "Report",
    "UserHasEvent",
]
