"""Exercise collection schema and the response shapes built from it."""

from datetime import datetime
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class Exercise(BaseModel):
    """Exercises collection model.

    ``user_id`` names a user by id; the store does not enforce that the
    user exists.
    """
    user_id: str = Field(..., description="Identifier of the owning user")
    description: str = Field(..., description="What was done")
    duration: int = Field(..., description="Duration in minutes")
    date: datetime = Field(..., description="When the exercise took place (UTC)")


class ExerciseResponse(BaseModel):
    """A newly added exercise merged with its user's identity."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="User identifier")
    username: str
    date: str = Field(..., description="Date as 'Mon Jan 01 1990'")
    duration: int
    description: str


class LogEntry(BaseModel):
    """One exercise in a user's log."""
    description: str
    duration: int
    date: str = Field(..., description="Date as 'Mon Jan 01 1990'")


class ExerciseLog(BaseModel):
    """A user's filtered exercise log."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="User identifier")
    username: str
    count: int = Field(..., description="Number of entries in log")
    log: List[LogEntry] = Field(default_factory=list)
