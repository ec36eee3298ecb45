"""User record store for database operations.

This module provides the data access layer for the ``user`` table and the
``user_has_event`` registration table. Every operation runs one statement
from the statement catalog on its own session, and every backend failure
surfaces as StoreError.
"""

import time
from typing import Any, Iterator, List, Optional, Union
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from ..database import ConnectionProvider
from ..logging_config import get_logger, log_database_operation
from ..models.user import Role, User, UserCreate
from ..schemas.user_schemas import UserFilter, UserQuery
from . import user_statements as sql

logger = get_logger(__name__)

USER_TABLE = "user"
REGISTRATION_TABLE = "user_has_event"


class StoreError(Exception):
    """Raised when the backing database fails to run a store operation.

    Attributes:
        message: Operation-specific description, including ids or emails
        operation: Name of the store operation that failed
        original_error: Underlying driver or connectivity error
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        self.message = message
        self.operation = operation
        self.original_error = original_error
        super().__init__(self.message)


class UserRecordStore:
    """Store for user database operations.

    The store is stateless: it holds only the connection provider and
    acquires a fresh session for every call, releasing it on every exit
    path. It is safe to share between threads when the provider's engine is.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        """Initialize user store with a connection provider.

        Args:
            provider: Source of per-call database sessions
        """
        self.provider = provider

    @contextmanager
    def _session(
        self, operation: str, table: str, failure: str, **context: Any
    ) -> Iterator[Session]:
        """Run one store operation, translating backend failures.

        Args:
            operation: Store operation name used in logs and errors
            table: Table the operation works on
            failure: Message prefix, e.g. "Couldn't add new user a@b.com"
            **context: Ids or emails attached to the failure log record
        """
        started = time.perf_counter()
        try:
            with self.provider.get_connection() as session:
                yield session
        except SQLAlchemyError as e:
            log_database_operation(
                operation,
                table,
                success=False,
                duration=time.perf_counter() - started,
                error=str(e),
                **context,
            )
            raise StoreError(
                f"{failure}: {str(e)}",
                operation=operation,
                original_error=e,
            ) from e

    def add(self, user: Union[User, UserCreate]) -> User:
        """Insert a new user.

        Only email, password, name and surname are written; the database
        assigns the id and the default role.

        Args:
            user: User data; a User instance gets its id filled in

        Returns:
            The stored user with its generated id

        Raises:
            ValueError: If a required field is missing
            StoreError: If the email is taken or the database fails
        """
        _require_fields(user, "email", "password", "name", "surname")
        params = {
            "email": user.email,
            "password": user.password,
            "name": user.name,
            "surname": user.surname,
        }

        with self._session(
            "add", USER_TABLE, f"Couldn't add new user {user.email}", email=user.email
        ) as session:
            result = session.execute(sql.ADD_USER, params)
            user_id = result.inserted_primary_key[0]
            session.commit()

        # role_id is not written, so the row carries the server default.
        if isinstance(user, User):
            user.id = user_id
            user.role_id = Role.VISITOR.value
            stored = user
        else:
            stored = User(id=user_id, role_id=Role.VISITOR.value, **params)

        log_database_operation("add", USER_TABLE, user_id=user_id, email=user.email)
        return stored

    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID.

        Args:
            user_id: User ID to search for

        Returns:
            User if found, None otherwise

        Raises:
            StoreError: If database operation fails
        """
        with self._session(
            "get_by_id", USER_TABLE, f"Couldn't find user with id={user_id}", user_id=user_id
        ) as session:
            return session.exec(sql.GET_USER_BY_ID, params={"user_id": user_id}).first()

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email address.

        Args:
            email: Email address to search for

        Returns:
            User if found, None otherwise

        Raises:
            StoreError: If database operation fails
        """
        with self._session(
            "get_by_email", USER_TABLE, f"Couldn't find user with email - {email}", email=email
        ) as session:
            return session.exec(sql.GET_USER_BY_EMAIL, params={"email": email}).first()

    def get_all(self) -> List[User]:
        """Get all users in storage order.

        Raises:
            StoreError: If database operation fails
        """
        with self._session(
            "get_all", USER_TABLE, "Couldn't get list of all users"
        ) as session:
            return list(session.exec(sql.GET_USERS).all())

    def get_sorted(self, query: UserQuery) -> List[User]:
        """Get a filtered, sorted page of users.

        Args:
            query: Role/search filter, sort field and order, offset and limit

        Returns:
            Matching users; empty if there are none

        Raises:
            StoreError: If database operation fails
        """
        statement = sql.build_sorted_statement(query)
        with self._session(
            "get_sorted", USER_TABLE, "Couldn't get sorted list of users"
        ) as session:
            return list(session.exec(statement).all())

    def get_participants(self, event_id: int, role: Union[Role, int]) -> List[User]:
        """Get users taking part in an event.

        Args:
            event_id: Event to inspect
            role: VISITOR for registered users, SPEAKER for report speakers

        Raises:
            ValueError: If role is not a known role id, or is neither VISITOR
                nor SPEAKER
            StoreError: If database operation fails
        """
        role = Role.of(role)
        statement = sql.participants_statement(role)
        table = REGISTRATION_TABLE if role == Role.VISITOR else "report"
        with self._session(
            "get_participants",
            table,
            f"Couldn't get list of participants of event with id={event_id}",
            event_id=event_id,
            role=role.name,
        ) as session:
            return list(session.exec(statement, params={"event_id": event_id}).all())

    def get_number_of_records(self, user_filter: Optional[UserFilter] = None) -> int:
        """Count users matching a filter.

        Args:
            user_filter: Role/search filter; all users are counted if omitted

        Raises:
            StoreError: If database operation fails
        """
        statement = sql.build_count_statement(user_filter or UserFilter())
        with self._session(
            "get_number_of_records", USER_TABLE, "Couldn't get number of users"
        ) as session:
            return session.exec(statement).one() or 0

    def update(self, user: User) -> None:
        """Update email, name and surname of a user.

        Password and role are left as they are.

        Args:
            user: User carrying the id and the new field values

        Raises:
            ValueError: If the id or a field is missing
            StoreError: If the new email is taken or the database fails
        """
        _require_fields(user, "id", "email", "name", "surname")
        with self._session(
            "update", USER_TABLE, f"Couldn't update user {user.email}", user_id=user.id
        ) as session:
            result = session.execute(
                sql.UPDATE_USER,
                {
                    "new_email": user.email,
                    "new_name": user.name,
                    "new_surname": user.surname,
                    "user_id": user.id,
                },
            )
            session.commit()
        self._log_write("update", USER_TABLE, result.rowcount, user_id=user.id)

    def update_password(self, user: User) -> None:
        """Update only the password of a user.

        Args:
            user: User carrying the id and the new hashed password

        Raises:
            ValueError: If the id or password is missing
            StoreError: If database operation fails
        """
        _require_fields(user, "id", "password")
        with self._session(
            "update_password",
            USER_TABLE,
            f"Couldn't update user {user.email} password",
            user_id=user.id,
        ) as session:
            result = session.execute(
                sql.UPDATE_PASSWORD,
                {"new_password": user.password, "user_id": user.id},
            )
            session.commit()
        self._log_write("update_password", USER_TABLE, result.rowcount, user_id=user.id)

    def set_user_role(self, email: str, role: Union[Role, int]) -> None:
        """Set the role of the user with the given email.

        Args:
            email: Email of the user
            role: New role

        Raises:
            ValueError: If role is not a known role id
            StoreError: If database operation fails
        """
        role = Role.of(role)
        with self._session(
            "set_user_role", USER_TABLE, f"Couldn't set user {email} role", email=email
        ) as session:
            result = session.execute(
                sql.SET_ROLE, {"new_role_id": int(role), "user_email": email}
            )
            session.commit()
        self._log_write(
            "set_user_role", USER_TABLE, result.rowcount, email=email, role=role.name
        )

    def delete(self, user_id: int) -> None:
        """Delete a user.

        Registrations of the user are removed by the foreign key cascade.

        Args:
            user_id: ID of user to delete

        Raises:
            StoreError: If database operation fails
        """
        with self._session(
            "delete", USER_TABLE, f"Couldn't delete user with id={user_id}", user_id=user_id
        ) as session:
            result = session.execute(sql.DELETE_USER, {"user_id": user_id})
            session.commit()
        self._log_write("delete", USER_TABLE, result.rowcount, user_id=user_id)

    def register_for_event(self, user_id: int, event_id: int) -> None:
        """Register a user for an event.

        Raises:
            StoreError: If already registered, an id is unknown, or the
                database fails
        """
        with self._session(
            "register_for_event",
            REGISTRATION_TABLE,
            f"Couldn't register for event user with id={user_id}",
            user_id=user_id,
            event_id=event_id,
        ) as session:
            session.execute(
                sql.REGISTER_FOR_EVENT, {"user_id": user_id, "event_id": event_id}
            )
            session.commit()
        log_database_operation(
            "register_for_event", REGISTRATION_TABLE, user_id=user_id, event_id=event_id
        )

    def cancel_registration(self, user_id: int, event_id: int) -> None:
        """Remove the registration of a user for an event.

        Raises:
            StoreError: If database operation fails
        """
        with self._session(
            "cancel_registration",
            REGISTRATION_TABLE,
            f"Couldn't cancel registration for event user with id={user_id}",
            user_id=user_id,
            event_id=event_id,
        ) as session:
            result = session.execute(
                sql.CANCEL_REGISTRATION, {"user_id": user_id, "event_id": event_id}
            )
            session.commit()
        self._log_write(
            "cancel_registration",
            REGISTRATION_TABLE,
            result.rowcount,
            user_id=user_id,
            event_id=event_id,
        )

    def is_registered(self, user_id: int, event_id: int) -> bool:
        """Check if a user is registered for an event.

        Raises:
            StoreError: If database operation fails
        """
        with self._session(
            "is_registered",
            REGISTRATION_TABLE,
            f"Couldn't check of user with id={user_id} registered for event",
            user_id=user_id,
            event_id=event_id,
        ) as session:
            row = session.exec(
                sql.IS_REGISTERED, params={"user_id": user_id, "event_id": event_id}
            ).first()
            return row is not None

    @staticmethod
    def _log_write(operation: str, table: str, rowcount: int, **context: Any) -> None:
        if rowcount == 0:
            logger.debug(
                f"{operation} matched no rows in {table}",
                extra={"operation": operation, **context},
            )
            return
        log_database_operation(operation, table, rows=rowcount, **context)


def _require_fields(user: Union[User, UserCreate], *fields: str) -> None:
    # Table models skip validation on construction, so gaps show up here.
    missing = [field for field in fields if getattr(user, field, None) is None]
    if missing:
        raise ValueError(f"User is missing required fields: {', '.join(missing)}")
