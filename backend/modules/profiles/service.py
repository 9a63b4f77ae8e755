"""
Profile service implementation.

Bootstraps profiles on first sign-in and applies field-level updates for
follows, bookmarks, onboarding and reading progress.
"""

import logging
from typing import Optional

from shared.config import Settings, get_settings
from shared.documents import ArrayRemove, ArrayUnion
from shared.models import Identity

from .exceptions import LimitExceededError, ProfileNotFoundError
from .interfaces import IProfileService
from .models import ReadingProgress, UserProfile
from .repository import ProfileRepository, ReadingProgressRepository

logger = logging.getLogger(__name__)


class ProfileService(IProfileService):
    """
    Implementation of the profile service.

    Profile creation is an insert-if-absent keyed by the identity id, so
    concurrent first sign-ins for the same identity converge on one
    document.
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        progress: ReadingProgressRepository,
        settings: Optional[Settings] = None,
    ):
        self._profiles = profiles
        self._progress = progress
        self._settings = settings or get_settings()

    # -------------------------------------------------------------------------
    # Profile lifecycle
    # -------------------------------------------------------------------------

    async def ensure_profile(self, identity: Identity) -> UserProfile:
        existing = await self._profiles.get(identity.id)
        if existing is not None:
            return existing

        profile = UserProfile.for_identity(identity)
        if await self._profiles.create_if_absent(profile):
            logger.info(f"Created profile for user {identity.id}")
            return profile

        # A concurrent bootstrap created it first; the stored document wins
        logger.debug(f"Profile for user {identity.id} was created concurrently")
        return await self.require_profile(identity.id)

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        return await self._profiles.get(user_id)

    async def require_profile(self, user_id: str) -> UserProfile:
        profile = await self._profiles.get(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    async def delete_profile(self, user_id: str) -> None:
        removed = await self._progress.delete_for_user(user_id)
        await self._profiles.delete(user_id)
        logger.info(f"Deleted profile for user {user_id} ({removed} progress records)")

    # -------------------------------------------------------------------------
    # Profile fields
    # -------------------------------------------------------------------------

    async def update_display_name(self, user_id: str, display_name: str) -> None:
        await self._profiles.update_fields(user_id, {"display_name": display_name.strip()})

    async def update_photo_url(self, user_id: str, photo_url: Optional[str]) -> None:
        await self._profiles.update_fields(user_id, {"photo_url": photo_url})

    async def complete_onboarding(self, user_id: str) -> None:
        await self._profiles.update_fields(user_id, {"onboarding_completed": True})

    # -------------------------------------------------------------------------
    # Follows and bookmarks
    # -------------------------------------------------------------------------

    async def _add_to_set(self, user_id: str, field: str, value: str, limit: int) -> None:
        profile = await self.require_profile(user_id)
        current: list[str] = getattr(profile, field)
        if value in current:
            return
        if len(current) >= limit:
            raise LimitExceededError(field, limit)
        # The store re-checks the cap atomically; the read above may be stale
        await self._profiles.update_fields(user_id, {field: ArrayUnion([value], max_size=limit)})

    async def _replace_set(self, user_id: str, field: str, values: list[str], limit: int) -> None:
        distinct = list(dict.fromkeys(values))
        if len(distinct) > limit:
            raise LimitExceededError(field, limit)
        await self._profiles.update_fields(user_id, {field: distinct})

    async def follow_topic(self, user_id: str, topic_id: str) -> None:
        await self._add_to_set(
            user_id, "followed_topics", topic_id, self._settings.max_followed_topics
        )

    async def unfollow_topic(self, user_id: str, topic_id: str) -> None:
        await self._profiles.update_fields(user_id, {"followed_topics": ArrayRemove([topic_id])})

    async def set_followed_topics(self, user_id: str, topic_ids: list[str]) -> None:
        await self._replace_set(
            user_id, "followed_topics", topic_ids, self._settings.max_followed_topics
        )

    async def follow_publication(self, user_id: str, publication_id: str) -> None:
        await self._add_to_set(
            user_id,
            "followed_publications",
            publication_id,
            self._settings.max_followed_publications,
        )

    async def unfollow_publication(self, user_id: str, publication_id: str) -> None:
        await self._profiles.update_fields(
            user_id, {"followed_publications": ArrayRemove([publication_id])}
        )

    async def set_followed_publications(self, user_id: str, publication_ids: list[str]) -> None:
        await self._replace_set(
            user_id,
            "followed_publications",
            publication_ids,
            self._settings.max_followed_publications,
        )

    async def add_bookmark(self, user_id: str, article_id: str) -> None:
        await self._add_to_set(user_id, "bookmarks", article_id, self._settings.max_bookmarks)

    async def remove_bookmark(self, user_id: str, article_id: str) -> None:
        await self._profiles.update_fields(user_id, {"bookmarks": ArrayRemove([article_id])})

    async def is_bookmarked(self, user_id: str, article_id: str) -> bool:
        profile = await self._profiles.get(user_id)
        if profile is None:
            return False
        return article_id in profile.bookmarks

    # -------------------------------------------------------------------------
    # Reading progress
    # -------------------------------------------------------------------------

    async def save_reading_progress(
        self,
        user_id: str,
        article_id: str,
        progress: float,
    ) -> ReadingProgress:
        existing = await self._progress.get_for_article(user_id, article_id)
        if existing is None:
            updated = ReadingProgress(user_id=user_id, article_id=article_id, progress=progress)
        else:
            updated = existing.advanced_to(progress)
        await self._progress.save(updated)
        return updated

    async def get_reading_progress(
        self,
        user_id: str,
        article_id: str,
    ) -> Optional[ReadingProgress]:
        return await self._progress.get_for_article(user_id, article_id)

    async def list_reading_progress(self, user_id: str) -> list[ReadingProgress]:
        return await self._progress.list_for_user(user_id)

    async def mark_article_completed(self, user_id: str, article_id: str) -> ReadingProgress:
        return await self.save_reading_progress(user_id, article_id, 100.0)
