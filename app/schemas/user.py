"""Identity schemas for the authenticated caller."""

from pydantic import Field

from .base import BaseSchema


class UserIdentity(BaseSchema):
    """Identity supplied by the identity provider for the current caller.

    Passed explicitly into every service call; ``subject`` is the stable key
    stored as ``user_id`` on owned records.
    """

    subject: str = Field(..., min_length=1, description="Identity provider subject")
    name: str | None = Field(None, description="Display name")
    email: str | None = Field(None, description="Email address")

    @classmethod
    def from_token_payload(cls, payload: dict) -> "UserIdentity":
        """Build an identity from decoded Clerk JWT claims."""
        return cls(
            subject=payload["sub"],
            name=payload.get("name") or payload.get("username"),
            email=payload.get("email"),
        )
