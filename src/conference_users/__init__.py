"""Conference users.

Data access for the users of a conference-management application: user
CRUD, role changes and event registrations over a relational database.
"""

from .config import ConfigurationError, Settings, get_settings
from .database import ConnectionProvider, create_db_and_tables, create_db_engine
from .models import Role, User, UserCreate
from .repositories import StoreError, UserRecordStore
from .schemas import SortOrder, UserFilter, UserQuery, UserSortField

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "ConnectionProvider",
    "Role",
    "Settings",
    "SortOrder",
    "StoreError",
    "User",
    "UserCreate",
    "UserFilter",
    "UserQuery",
    "UserRecordStore",
    "UserSortField",
    "create_db_and_tables",
    "create_db_engine",
    "get_settings",
]
