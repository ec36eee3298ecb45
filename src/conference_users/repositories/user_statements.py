"""Statement catalog for the user store.

Each constant is a prebuilt SQLAlchemy statement with named bind
parameters. Write statements target the tables directly; read statements
select the User entity so that rows come back as model instances.

Bind parameters of UPDATE statements never reuse a column name of the
updated table: SQLAlchemy would treat such a parameter as an extra SET
value.
"""

from sqlalchemy import Select, String, asc, bindparam, delete, desc, func, insert, or_, update
from sqlmodel import select

from ..models.event import Report, UserHasEvent
from ..models.user import Role, User
from ..schemas.user_schemas import SortOrder, UserFilter, UserQuery, UserSortField

user_table = User.__table__
registration_table = UserHasEvent.__table__

# params: email, password, name, surname
ADD_USER = insert(user_table)

# params: user_id
GET_USER_BY_ID = select(User).where(User.id == bindparam("user_id"))

# params: email
GET_USER_BY_EMAIL = select(User).where(User.email == bindparam("email"))

GET_USERS = select(User).order_by(User.id)

# Base for build_sorted_statement
GET_SORTED = select(User)

# params: event_id
GET_PARTICIPANTS = (
    select(User)
    .join(UserHasEvent, UserHasEvent.user_id == User.id)
    .where(UserHasEvent.event_id == bindparam("event_id"))
    .order_by(User.id)
)

# params: event_id
GET_SPEAKERS = (
    select(User)
    .join(Report, Report.speaker_id == User.id)
    .where(Report.event_id == bindparam("event_id"))
    .distinct()
    .order_by(User.id)
)

# Base for build_count_statement
GET_NUMBER_OF_RECORDS = select(func.count(User.id))

# params: new_email, new_name, new_surname, user_id
UPDATE_USER = (
    update(user_table)
    .where(user_table.c.id == bindparam("user_id"))
    .values(
        email=bindparam("new_email"),
        name=bindparam("new_name"),
        surname=bindparam("new_surname"),
    )
)

# params: new_password, user_id
UPDATE_PASSWORD = (
    update(user_table)
    .where(user_table.c.id == bindparam("user_id"))
    .values(password=bindparam("new_password"))
)

# params: new_role_id, user_email
SET_ROLE = (
    update(user_table)
    .where(user_table.c.email == bindparam("user_email"))
    .values(role_id=bindparam("new_role_id"))
)

# params: user_id
DELETE_USER = delete(user_table).where(user_table.c.id == bindparam("user_id"))

# params: user_id, event_id
REGISTER_FOR_EVENT = insert(registration_table)

# params: user_id, event_id
CANCEL_REGISTRATION = delete(registration_table).where(
    registration_table.c.user_id == bindparam("user_id"),
    registration_table.c.event_id == bindparam("event_id"),
)

# params: user_id, event_id
IS_REGISTERED = select(UserHasEvent.user_id).where(
    UserHasEvent.user_id == bindparam("user_id"),
    UserHasEvent.event_id == bindparam("event_id"),
)

_SORT_COLUMNS = {
    UserSortField.ID: User.id,
    UserSortField.EMAIL: User.email,
    UserSortField.NAME: User.name,
    UserSortField.SURNAME: User.surname,
    UserSortField.ROLE: User.role_id,
}


def apply_filter(statement: Select, user_filter: UserFilter) -> Select:
    """Add the WHERE clauses described by a filter.

    Filter values are bound as parameters; LIKE wildcards in the search
    term are escaped.

    Args:
        statement: Select over the user table
        user_filter: Role and search criteria

    Returns:
        Select: The filtered statement
    """
    if user_filter.role is not None:
        statement = statement.where(User.role_id == int(user_filter.role))

    if user_filter.search:
        term = user_filter.search.lower()
        statement = statement.where(
            or_(
                func.lower(User.email, type_=String).contains(term, autoescape=True),
                func.lower(User.name, type_=String).contains(term, autoescape=True),
                func.lower(User.surname, type_=String).contains(term, autoescape=True),
            )
        )

    return statement


def build_sorted_statement(query: UserQuery) -> Select:
    """Build a filtered, ordered and paginated user select.

    Rows with equal sort keys are ordered by id so that pages are stable.

    Args:
        query: Listing parameters

    Returns:
        Select: Statement selecting User entities

    Example:
        statement = build_sorted_statement(
            UserQuery(role=Role.SPEAKER, sort_by=UserSortField.SURNAME, limit=10)
        )
    """
    statement = apply_filter(GET_SORTED, query)

    sort_column = _SORT_COLUMNS[query.sort_by]
    direction = desc if query.order == SortOrder.DESC else asc
    statement = statement.order_by(direction(sort_column))
    if query.sort_by != UserSortField.ID:
        statement = statement.order_by(asc(User.id))

    if query.offset:
        statement = statement.offset(query.offset)
    if query.limit is not None:
        statement = statement.limit(query.limit)

    return statement


def build_count_statement(user_filter: UserFilter) -> Select:
    """Build a count of the users matching a filter."""
    return apply_filter(GET_NUMBER_OF_RECORDS, user_filter)


def participants_statement(role: Role) -> Select:
    """Pick the participant query for a role.

    Args:
        role: VISITOR for registered users, SPEAKER for report speakers

    Raises:
        ValueError: For any other role
    """
    if role == Role.VISITOR:
        return GET_PARTICIPANTS
    if role == Role.SPEAKER:
        return GET_SPEAKERS
    raise ValueError(
        f"Participants can be listed for VISITOR or SPEAKER only, got {role.name}"
    )
