"""
Profiles module interface.

The session manager and the API depend on IProfileService, not on the
concrete implementation.
"""

from typing import Optional, Protocol, runtime_checkable

from shared.models import Identity

from .models import ReadingProgress, UserProfile


@runtime_checkable
class IProfileService(Protocol):
    """
    Interface for profile operations.

    Every mutation is a field-level, idempotent update.
    """

    async def ensure_profile(self, identity: Identity) -> UserProfile:
        """
        Return the identity's profile, creating it if absent.

        Safe to call repeatedly and concurrently: exactly one profile
        document exists afterwards and an existing one is never modified.
        """
        ...

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        ...

    async def require_profile(self, user_id: str) -> UserProfile:
        """
        Raises:
            ProfileNotFoundError: If the user has no profile
        """
        ...

    async def update_display_name(self, user_id: str, display_name: str) -> None:
        ...

    async def update_photo_url(self, user_id: str, photo_url: Optional[str]) -> None:
        ...

    async def complete_onboarding(self, user_id: str) -> None:
        ...

    async def follow_topic(self, user_id: str, topic_id: str) -> None:
        ...

    async def unfollow_topic(self, user_id: str, topic_id: str) -> None:
        ...

    async def set_followed_topics(self, user_id: str, topic_ids: list[str]) -> None:
        ...

    async def follow_publication(self, user_id: str, publication_id: str) -> None:
        ...

    async def unfollow_publication(self, user_id: str, publication_id: str) -> None:
        ...

    async def set_followed_publications(self, user_id: str, publication_ids: list[str]) -> None:
        ...

    async def add_bookmark(self, user_id: str, article_id: str) -> None:
        ...

    async def remove_bookmark(self, user_id: str, article_id: str) -> None:
        ...

    async def is_bookmarked(self, user_id: str, article_id: str) -> bool:
        ...

    async def save_reading_progress(
        self,
        user_id: str,
        article_id: str,
        progress: float,
    ) -> ReadingProgress:
        ...

    async def get_reading_progress(
        self,
        user_id: str,
        article_id: str,
    ) -> Optional[ReadingProgress]:
        ...

    async def list_reading_progress(self, user_id: str) -> list[ReadingProgress]:
        ...

    async def mark_article_completed(self, user_id: str, article_id: str) -> ReadingProgress:
        ...

    async def delete_profile(self, user_id: str) -> None:
        """Delete the profile and the user's reading progress."""
        ...
