"""User domain model."""

from pydantic import BaseModel, Field, field_validator

from src.domain.ids import new_id


# Constants for validation
MAX_NAME_LENGTH = 100


class User(BaseModel):
    """A person tasks can be assigned to."""

    id: str = Field(default_factory=new_id, description="Unique user ID")
    name: str = Field(..., description="Display name of the user")

    @field_validator("name")
    @classmethod
    def validate_name_usable(cls, v: str) -> str:
        """Validate name is present and not too long."""
        v = v.strip()

        if not v:
            raise ValueError("User name cannot be empty")

        if len(v) > MAX_NAME_LENGTH:
            raise ValueError(f"Name too long (max {MAX_NAME_LENGTH} characters)")

        return v
