"""Event-side tables referenced by user queries.

Only the columns the user store joins on are modelled here. Registrations
live in ``user_has_event``; speakers are users assigned to a report of the
event.
"""

from typing import Optional
from sqlmodel import SQLModel, Field, Column, ForeignKey, Integer, String


class Event(SQLModel, table=True):
    """Conference event."""

    __tablename__ = "event"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(sa_column=Column(String(255), nullable=False))


class Report(SQLModel, table=True):
    """Talk given at an event, optionally assigned to a speaker."""

    __tablename__ = "report"

    id: Optional[int] = Field(default=None, primary_key=True)
    topic: str = Field(sa_column=Column(String(255), nullable=False))
    event_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("event.id", ondelete="CASCADE"), nullable=False, index=True
        )
    )
    speaker_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True
        )
    )


class UserHasEvent(SQLModel, table=True):
    """Registration of a visitor for an event.

    The (user_id, event_id) pair is the whole identity of a registration.
    Both keys cascade, so deleting a user or an event drops its registrations.
    """

    __tablename__ = "user_has_event"

    user_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("user.id", ondelete="CASCADE"), primary_key=True
        )
    )
    event_id: int = Field(
        sa_column=Column(
            Integer, ForeignKey("event.id", ondelete="CASCADE"), primary_key=True
        )
    )
