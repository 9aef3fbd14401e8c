"""Collection and response schemas."""

from schemas.user import User
from schemas.exercise import Exercise, ExerciseResponse, LogEntry, ExerciseLog

__all__ = [
    "User",
    "Exercise",
    "ExerciseResponse",
    "LogEntry",
    "ExerciseLog",
]
