"""
Profile repositories.

Encapsulates document access and record mapping for:
- users (profile documents keyed by identity id)
- reading_progress (keyed by "{user_id}:{article_id}")
"""

from typing import Any, Optional

from shared.exceptions import ArraySizeLimitError, DocumentNotFoundError
from shared.repository import BaseRepository

from .exceptions import LimitExceededError, ProfileNotFoundError
from .models import ReadingProgress, UserProfile

USERS_COLLECTION = "users"
READING_PROGRESS_COLLECTION = "reading_progress"


class ProfileRepository(BaseRepository[UserProfile]):
    """
    Repository for profile documents.

    Note: This repository does NOT enforce limits or check ownership.
    The service layer is responsible for both.
    """

    collection = USERS_COLLECTION
    model = UserProfile

    async def create_if_absent(self, profile: UserProfile) -> bool:
        """
        Insert the profile unless one already exists for its id.

        Returns:
            True if this call created the document
        """
        return await self._store.insert_if_absent(
            self.collection,
            profile.id,
            self._encode(profile),
        )

    async def update_fields(self, user_id: str, fields: dict[str, Any]) -> None:
        """
        Patch profile fields.

        Raises:
            ProfileNotFoundError: If the profile doesn't exist
            LimitExceededError: If a capped ArrayUnion would pass its cap
        """
        try:
            await self._store.update_fields(self.collection, user_id, fields)
        except DocumentNotFoundError as e:
            raise ProfileNotFoundError(user_id) from e
        except ArraySizeLimitError as e:
            raise LimitExceededError(e.field, e.max_size) from e

    async def delete(self, user_id: str) -> None:
        await self._store.delete_document(self.collection, user_id)


class ReadingProgressRepository(BaseRepository[ReadingProgress]):
    """Repository for per-article reading progress."""

    collection = READING_PROGRESS_COLLECTION
    model = ReadingProgress

    async def get_for_article(self, user_id: str, article_id: str) -> Optional[ReadingProgress]:
        return await self.get(ReadingProgress.document_id(user_id, article_id))

    async def save(self, progress: ReadingProgress) -> None:
        await self._store.set_document(
            self.collection,
            ReadingProgress.document_id(progress.user_id, progress.article_id),
            self._encode(progress),
        )

    async def list_for_user(self, user_id: str) -> list[ReadingProgress]:
        """All progress records for a user, most recently read first."""
        records = await self._store.query_by_field(
            self.collection,
            "user_id",
            user_id,
            order_by="last_read_at",
            descending=True,
        )
        return self._decode_all(records)

    async def delete_for_user(self, user_id: str) -> int:
        """Delete all of a user's progress records; returns how many were removed."""
        records = await self._store.query_by_field(self.collection, "user_id", user_id)
        for record in records:
            await self._store.delete_document(self.collection, record["id"])
        return len(records)
