"""User listing schemas.

This module defines the Pydantic schemas callers use to filter, sort and
paginate user listings. Every field is typed and enumerated so that the
store can build the statement from bound parameters only.
"""

from enum import Enum

from pydantic import BaseModel, Field, field_validator

from ..models.user import Role


class UserSortField(str, Enum):
    """Enumeration for user sorting fields."""

    ID = "id"
    EMAIL = "email"
    NAME = "name"
    SURNAME = "surname"
    ROLE = "role_id"


class SortOrder(str, Enum):
    """Enumeration for sort order."""

    ASC = "asc"
    DESC = "desc"


class UserFilter(BaseModel):
    """Schema for filtering users.

    Used on its own for counting records and as the base of UserQuery.
    """

    role: Role | None = Field(
        default=None,
        description="Only users holding this role",
    )
    search: str | None = Field(
        default=None,
        max_length=100,
        description="Case-insensitive search term over email, name and surname",
    )

    @field_validator("search")
    @classmethod
    def validate_search(cls, v: str | None) -> str | None:
        """Normalize the search term; blank terms disable the search."""
        if v is not None:
            v = v.strip()
            if not v:
                return None
            v = " ".join(v.split())
        return v


class UserQuery(UserFilter):
    """Schema for a sorted, paginated user listing."""

    sort_by: UserSortField = Field(
        default=UserSortField.ID,
        description="Field to sort by",
    )
    order: SortOrder = Field(
        default=SortOrder.ASC,
        description="Sort order (ascending or descending)",
    )
    offset: int = Field(
        default=0, ge=0, description="Number of users to skip"
    )
    limit: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of users to return (unbounded if omitted)",
    )

    def to_filter(self) -> UserFilter:
        """Return the filtering part of this query, e.g. to count all pages."""
        return UserFilter(role=self.role, search=self.search)
