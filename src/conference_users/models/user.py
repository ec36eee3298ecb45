"""User model for conference participants.

This module defines the User SQLModel matching the ``user`` table together
with the Role enumeration and the schemas used to create and update users.
"""

from enum import IntEnum
from typing import Optional
from sqlmodel import SQLModel, Field, Column, Integer, String


class Role(IntEnum):
    """Participation role of a user, stored as ``user.role_id``."""

    ADMIN = 1
    ORGANIZER = 2
    SPEAKER = 3
    VISITOR = 4

    @classmethod
    def of(cls, value: int) -> "Role":
        """Return the role for a ``role_id`` value.

        Raises:
            ValueError: If no role has this id
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Unknown role id {value}") from None


class UserBase(SQLModel):
    """Base user model with common fields."""

    email: str = Field(
        max_length=255,
        description="User's email address (unique login)"
    )
    name: str = Field(
        max_length=100,
        description="User's first name"
    )
    surname: str = Field(
        max_length=100,
        description="User's last name"
    )


class User(UserBase, table=True):
    """User model for database storage.

    Instances returned by the store are detached snapshots: changing them
    has no effect until they are passed back to an update operation.

    Attributes:
        id: Primary key (generated by the database)
        email: Unique email address
        password: Hashed credential
        name: First name
        surname: Last name
        role_id: Integer id of the user's Role
    """

    __tablename__ = "user"

    id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="Primary key (auto-generated)"
    )

    # Override email to add unique constraint
    email: str = Field(
        max_length=255,
        description="User's email address (unique login)",
        sa_column=Column(String(255), unique=True, nullable=False)
    )

    password: str = Field(
        description="Hashed password",
        sa_column=Column(String(255), nullable=False)
    )

    role_id: int = Field(
        default=Role.VISITOR.value,
        description="Role id, defaults to VISITOR",
        sa_column=Column(Integer, nullable=False, server_default=str(Role.VISITOR.value))
    )

    @property
    def role(self) -> Role:
        """Role matching ``role_id``."""
        return Role.of(self.role_id)


class UserCreate(UserBase):
    """Schema for creating a new user.

    The password is expected to be hashed already; the store never sees
    plain-text credentials.
    """

    password: str = Field(
        min_length=1,
        max_length=255,
        description="Hashed password"
    )

