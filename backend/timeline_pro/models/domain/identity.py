"""Identity domain models."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class CustomTokenSignIn(BaseModel):
    """Payload for signing in with a provisioned custom token."""
    token: str = Field(min_length=1)


class UserIdentity(BaseModel):
    """A signed-in user and the bearer token that identifies them."""
    uid: str
    is_anonymous: bool = True
    token: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
