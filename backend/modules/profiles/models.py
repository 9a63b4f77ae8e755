"""
Profiles module data models.

These models define the user profile and reading progress documents,
plus the request shapes of the profile endpoints.
"""

from datetime import datetime, timezone
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from shared.models import Identity

DEFAULT_DISPLAY_NAME = "User"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _unique(values: Any) -> list[str]:
    """Normalize an array column to a list of distinct ids, keeping order."""
    if values is None:
        return []
    seen: list[str] = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


class UserProfile(BaseModel):
    """
    Application-owned profile of a signed-in user.

    Keyed by the identity id. Follows and bookmarks have set semantics and
    are stored as arrays.
    """

    id: str = Field(..., min_length=1, description="Identity ID")
    email: str = Field(..., description="Email address")
    display_name: str = Field(..., description="Display name")
    photo_url: Optional[str] = Field(None, description="Avatar URL")
    created_at: datetime = Field(default_factory=_utcnow, description="Profile creation time")
    onboarding_completed: bool = Field(default=False)
    followed_topics: list[str] = Field(default_factory=list)
    followed_publications: list[str] = Field(default_factory=list)
    bookmarks: list[str] = Field(default_factory=list)

    @field_validator("followed_topics", "followed_publications", "bookmarks", mode="before")
    @classmethod
    def _distinct_ids(cls, value: Any) -> list[str]:
        return _unique(value)

    @field_validator("onboarding_completed", mode="before")
    @classmethod
    def _null_is_false(cls, value: Any) -> Any:
        return False if value is None else value

    @classmethod
    def for_identity(cls, identity: Identity) -> "UserProfile":
        """New profile for a first sign-in, with everything else defaulted."""
        return cls(
            id=identity.id,
            email=identity.email or "",
            display_name=identity.display_name or DEFAULT_DISPLAY_NAME,
            photo_url=identity.photo_url,
        )


class ReadingProgress(BaseModel):
    """How far a user has read into an article."""

    user_id: str
    article_id: str
    last_read_at: datetime = Field(default_factory=_utcnow)
    progress: float = Field(default=0.0, description="Percent read, 0-100")
    is_completed: bool = False

    @field_validator("progress", mode="before")
    @classmethod
    def _clamp(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        if isinstance(value, (int, float)):
            return min(max(float(value), 0.0), 100.0)
        return value

    @model_validator(mode="after")
    def _complete_at_full_progress(self) -> "ReadingProgress":
        if self.progress >= 100.0:
            self.is_completed = True
        return self

    @staticmethod
    def document_id(user_id: str, article_id: str) -> str:
        return f"{user_id}:{article_id}"

    @property
    def is_started(self) -> bool:
        return self.progress > 0

    @property
    def progress_percentage(self) -> str:
        return f"{self.progress:.0f}%"

    def advanced_to(self, progress: float) -> "ReadingProgress":
        """Copy with new progress. A completed article stays completed."""
        return ReadingProgress(
            user_id=self.user_id,
            article_id=self.article_id,
            last_read_at=_utcnow(),
            progress=progress,
            is_completed=self.is_completed,
        )


# -----------------------------------------------------------------------------
# API request models
# -----------------------------------------------------------------------------


class UpdatePhotoRequest(BaseModel):
    photo_url: Optional[str] = None


class ReadingProgressUpdate(BaseModel):
    progress: float = Field(..., description="Percent read; clamped to 0-100")


class FollowedIdsRequest(BaseModel):
    """Replaces a followed set wholesale (onboarding picks)."""

    ids: list[str] = Field(default_factory=list)
