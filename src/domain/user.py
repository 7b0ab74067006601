"""User context supplied by the authentication collaborator."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class UserRole(StrEnum):
    """User role in the family."""

    PARENT = "PARENT"
    CHILD = "CHILD"
    MEMBER = "MEMBER"


class UserContext(BaseModel):
    """Already-verified identity attached to each request.

    The role is carried for callers but never consulted by the access policy.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, description="Authenticated user ID")
    role: UserRole = Field(default=UserRole.MEMBER, description="User role in the family")
    family_id: str | None = Field(default=None, description="Family the user belongs to")
