"""User collection schema."""

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """User collection model."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id", description="Store-generated user identifier")
    username: str = Field(..., description="Unique username")
