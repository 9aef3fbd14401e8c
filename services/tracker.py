"""Exercise tracker service: users, exercises and filtered logs."""

from typing import Any, Dict, List, Optional

from pymongo import ASCENDING

from models.database import EXERCISES, USERS
from schemas import Exercise, ExerciseLog, ExerciseResponse, LogEntry, User
from services.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from services.store import DocumentStore
from utils.helpers import format_date, is_blank, parse_date, parse_int, utc_now
from utils.logger import setup_logger

logger = setup_logger(__name__)

# BSON stores integers as signed 64-bit
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


class ExerciseTrackerService:
    """Validates requests, talks to the store and shapes responses.

    Holds no state of its own beyond the injected store, so a single
    instance serves concurrent requests.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    async def create_user(self, username: Any) -> User:
        """Create a user with a unique username.

        Raises:
            ValidationError: If the username is missing or not a string.
            ConflictError: If the username is taken.
            PersistenceError: On any other store failure.
        """
        if is_blank(username):
            raise ValidationError("Username is required")
        if not isinstance(username, str):
            raise ValidationError("Username must be a string")

        try:
            saved = await self.store.insert_one(USERS, {"username": username})
        except ConflictError as e:
            raise ConflictError("Username already exists") from e
        except PersistenceError as e:
            raise PersistenceError("Server error creating user") from e

        logger.info(f"Created user: {username}")
        return User(**saved)

    async def list_users(self) -> List[User]:
        """Return every user in store order."""
        try:
            users = await self.store.find(USERS, projection=["username"])
        except PersistenceError as e:
            raise PersistenceError("Server error retrieving users") from e
        return [User(**user) for user in users]

    async def add_exercise(
        self,
        user_id: str,
        description: Any,
        duration: Any,
        date: Any = None,
    ) -> ExerciseResponse:
        """Record an exercise for a user.

        The response carries the user's id and username with the new
        exercise's fields; the exercise's own id is not returned.
        """
        if is_blank(description) or is_blank(duration):
            raise ValidationError("Description and duration are required")
        if not isinstance(description, str):
            raise ValidationError("Description must be a string")

        minutes = parse_int(duration)
        if minutes is None or not INT64_MIN <= minutes <= INT64_MAX:
            raise ValidationError("Duration must be a number")

        # Unknown users are reported before any problem with the date
        user = await self._get_user(user_id, "Server error adding exercise")

        if is_blank(date):
            when = utc_now()
        else:
            try:
                when = parse_date(date)
            except ValueError:
                raise ValidationError("Invalid date format. Use yyyy-mm-dd")

        exercise = Exercise(user_id=user.id, description=description, duration=minutes, date=when)
        try:
            saved = await self.store.insert_one(EXERCISES, exercise.model_dump())
        except PersistenceError as e:
            raise PersistenceError("Server error adding exercise") from e

        logger.info(f"Added exercise {saved['_id']} for user {user.id}")
        return ExerciseResponse(
            _id=user.id,
            username=user.username,
            date=format_date(saved["date"]),
            duration=saved["duration"],
            description=saved["description"],
        )

    async def get_log(
        self,
        user_id: str,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> ExerciseLog:
        """Return a user's exercises in ascending date order.

        ``date_from`` and ``date_to`` are inclusive bounds. ``limit`` caps the
        number of entries when it reads as a positive integer and is ignored
        otherwise.
        """
        user = await self._get_user(user_id, "Server error retrieving logs")
        query = build_log_filter(user.id, date_from, date_to)

        count_cap = parse_int(limit) if not is_blank(limit) else None
        if count_cap is not None and not 0 < count_cap <= INT64_MAX:
            count_cap = None

        try:
            exercises = await self.store.find(
                EXERCISES,
                filter=query,
                sort=[("date", ASCENDING)],
                limit=count_cap,
            )
        except PersistenceError as e:
            raise PersistenceError("Server error retrieving logs") from e

        log = [
            LogEntry(
                description=exercise["description"],
                duration=exercise["duration"],
                date=format_date(exercise["date"]),
            )
            for exercise in exercises
        ]
        return ExerciseLog(_id=user.id, username=user.username, count=len(log), log=log)

    async def _get_user(self, user_id: str, failure_message: str) -> User:
        try:
            user = await self.store.find_by_id(USERS, user_id)
        except PersistenceError as e:
            raise PersistenceError(failure_message) from e
        if not user:
            raise NotFoundError("User not found")
        return User(**user)


def build_log_filter(
    user_id: str,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the exercises filter for a log request.

    Raises:
        ValidationError: If either bound is not a valid date.
    """
    query: Dict[str, Any] = {"user_id": user_id}
    bounds: Dict[str, Any] = {}

    if not is_blank(date_from):
        try:
            bounds["$gte"] = parse_date(date_from)
        except ValueError:
            raise ValidationError('Invalid "from" date format')
    if not is_blank(date_to):
        try:
            bounds["$lte"] = parse_date(date_to)
        except ValueError:
            raise ValidationError('Invalid "to" date format')

    if bounds:
        query["date"] = bounds
    return query
