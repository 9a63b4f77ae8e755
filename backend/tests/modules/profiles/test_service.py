"""
Tests for the profile service.

Runs against the in-memory document store; limits come from the test
settings fixture (3 topics, 5 bookmarks).
"""

import pytest
from unittest.mock import AsyncMock

from modules.profiles.exceptions import LimitExceededError, ProfileNotFoundError
from modules.profiles.repository import READING_PROGRESS_COLLECTION, USERS_COLLECTION


@pytest.fixture
async def profile(profile_service, test_identity):
    return await profile_service.ensure_profile(test_identity)


class TestEnsureProfile:
    @pytest.mark.asyncio
    async def test_creates_profile(self, profile_service, test_identity, store):
        profile = await profile_service.ensure_profile(test_identity)

        assert profile.id == test_identity.id
        assert profile.display_name == "Test User"
        assert profile.onboarding_completed is False
        assert profile.bookmarks == []
        assert await store.document_exists(USERS_COLLECTION, test_identity.id)

    @pytest.mark.asyncio
    async def test_idempotent(self, profile_service, test_identity, store):
        """Bootstrapping twice leaves exactly one unchanged document."""
        await profile_service.ensure_profile(test_identity)
        first = await store.get_document(USERS_COLLECTION, test_identity.id)

        await profile_service.ensure_profile(test_identity)
        second = await store.get_document(USERS_COLLECTION, test_identity.id)

        assert first == second
        assert len(await store.list_documents(USERS_COLLECTION)) == 1

    @pytest.mark.asyncio
    async def test_existing_profile_not_overwritten(self, profile_service, test_identity):
        await profile_service.ensure_profile(test_identity)
        await profile_service.complete_onboarding(test_identity.id)

        renamed = test_identity.model_copy(update={"display_name": "Someone Else"})
        profile = await profile_service.ensure_profile(renamed)

        assert profile.display_name == "Test User"
        assert profile.onboarding_completed is True

    @pytest.mark.asyncio
    async def test_lost_race_returns_stored_document(self, profile_service, test_identity, store):
        """When another bootstrap wins the insert, its document is returned."""
        await store.insert_if_absent(
            USERS_COLLECTION,
            test_identity.id,
            {"email": "winner@example.com", "display_name": "Winner"},
        )
        profile_service._profiles.get = AsyncMock(
            side_effect=[None, await profile_service._profiles.get(test_identity.id)]
        )

        profile = await profile_service.ensure_profile(test_identity)

        assert profile.display_name == "Winner"


class TestProfileFields:
    @pytest.mark.asyncio
    async def test_require_missing_profile(self, profile_service):
        with pytest.raises(ProfileNotFoundError):
            await profile_service.require_profile("ghost")

    @pytest.mark.asyncio
    async def test_get_missing_profile(self, profile_service):
        assert await profile_service.get_profile("ghost") is None

    @pytest.mark.asyncio
    async def test_update_display_name(self, profile_service, profile):
        await profile_service.update_display_name(profile.id, "  Ann  ")
        assert (await profile_service.require_profile(profile.id)).display_name == "Ann"

    @pytest.mark.asyncio
    async def test_update_photo_url(self, profile_service, profile):
        await profile_service.update_photo_url(profile.id, "https://img/ann.png")
        assert (await profile_service.require_profile(profile.id)).photo_url == "https://img/ann.png"

        await profile_service.update_photo_url(profile.id, None)
        assert (await profile_service.require_profile(profile.id)).photo_url is None

    @pytest.mark.asyncio
    async def test_update_missing_profile(self, profile_service):
        with pytest.raises(ProfileNotFoundError):
            await profile_service.complete_onboarding("ghost")


class TestFollows:
    @pytest.mark.asyncio
    async def test_follow_is_idempotent(self, profile_service, profile):
        await profile_service.follow_topic(profile.id, "tech")
        await profile_service.follow_topic(profile.id, "tech")

        assert (await profile_service.require_profile(profile.id)).followed_topics == ["tech"]

    @pytest.mark.asyncio
    async def test_unfollow_is_idempotent(self, profile_service, profile):
        await profile_service.follow_topic(profile.id, "tech")
        await profile_service.unfollow_topic(profile.id, "tech")
        await profile_service.unfollow_topic(profile.id, "tech")

        assert (await profile_service.require_profile(profile.id)).followed_topics == []

    @pytest.mark.asyncio
    async def test_topic_limit(self, profile_service, profile):
        for topic in ("a", "b", "c"):
            await profile_service.follow_topic(profile.id, topic)

        with pytest.raises(LimitExceededError) as exc_info:
            await profile_service.follow_topic(profile.id, "d")
        assert exc_info.value.details == {"field": "followed_topics", "limit": 3}

        # Re-following an existing topic at the limit is still a no-op
        await profile_service.follow_topic(profile.id, "a")

    @pytest.mark.asyncio
    async def test_limit_holds_when_read_is_stale(self, profile_service, profile, store):
        """A follow that read the profile before a concurrent follow landed is still capped."""
        await profile_service.follow_topic(profile.id, "a")
        await profile_service.follow_topic(profile.id, "b")
        stale = await profile_service.require_profile(profile.id)
        await profile_service.follow_topic(profile.id, "c")

        profile_service._profiles.get = AsyncMock(return_value=stale)
        with pytest.raises(LimitExceededError):
            await profile_service.follow_topic(profile.id, "d")

        record = await store.get_document(USERS_COLLECTION, profile.id)
        assert record["followed_topics"] == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_set_followed_topics(self, profile_service, profile):
        await profile_service.follow_topic(profile.id, "old")
        await profile_service.set_followed_topics(profile.id, ["x", "y", "x"])

        assert (await profile_service.require_profile(profile.id)).followed_topics == ["x", "y"]

    @pytest.mark.asyncio
    async def test_set_followed_topics_over_limit(self, profile_service, profile):
        with pytest.raises(LimitExceededError):
            await profile_service.set_followed_topics(profile.id, ["a", "b", "c", "d"])

    @pytest.mark.asyncio
    async def test_publications(self, profile_service, profile):
        await profile_service.follow_publication(profile.id, "pub-1")
        await profile_service.follow_publication(profile.id, "pub-2")
        await profile_service.unfollow_publication(profile.id, "pub-1")
        assert (await profile_service.require_profile(profile.id)).followed_publications == ["pub-2"]

        await profile_service.set_followed_publications(profile.id, ["pub-3"])
        assert (await profile_service.require_profile(profile.id)).followed_publications == ["pub-3"]

    @pytest.mark.asyncio
    async def test_follow_without_profile(self, profile_service):
        with pytest.raises(ProfileNotFoundError):
            await profile_service.follow_topic("ghost", "tech")


class TestBookmarks:
    @pytest.mark.asyncio
    async def test_add_and_remove(self, profile_service, profile):
        await profile_service.add_bookmark(profile.id, "art-1")
        assert await profile_service.is_bookmarked(profile.id, "art-1") is True

        await profile_service.remove_bookmark(profile.id, "art-1")
        assert await profile_service.is_bookmarked(profile.id, "art-1") is False

    @pytest.mark.asyncio
    async def test_bookmark_limit(self, profile_service, profile):
        for i in range(5):
            await profile_service.add_bookmark(profile.id, f"art-{i}")
        with pytest.raises(LimitExceededError):
            await profile_service.add_bookmark(profile.id, "art-5")

    @pytest.mark.asyncio
    async def test_is_bookmarked_without_profile(self, profile_service):
        assert await profile_service.is_bookmarked("ghost", "art-1") is False


class TestReadingProgress:
    @pytest.mark.asyncio
    async def test_save_new(self, profile_service, profile):
        progress = await profile_service.save_reading_progress(profile.id, "art-1", 25)
        assert progress.progress == 25.0
        assert progress.is_completed is False

    @pytest.mark.asyncio
    async def test_save_clamps(self, profile_service, profile):
        progress = await profile_service.save_reading_progress(profile.id, "art-1", 250)
        assert progress.progress == 100.0
        assert progress.is_completed is True

    @pytest.mark.asyncio
    async def test_completion_sticks(self, profile_service, profile):
        await profile_service.mark_article_completed(profile.id, "art-1")
        progress = await profile_service.save_reading_progress(profile.id, "art-1", 5)

        assert progress.progress == 5.0
        assert progress.is_completed is True
        stored = await profile_service.get_reading_progress(profile.id, "art-1")
        assert stored.is_completed is True

    @pytest.mark.asyncio
    async def test_get_unread(self, profile_service, profile):
        assert await profile_service.get_reading_progress(profile.id, "art-1") is None

    @pytest.mark.asyncio
    async def test_list(self, profile_service, profile):
        await profile_service.save_reading_progress(profile.id, "art-1", 10)
        await profile_service.save_reading_progress(profile.id, "art-2", 20)

        listed = await profile_service.list_reading_progress(profile.id)
        assert {p.article_id for p in listed} == {"art-1", "art-2"}


class TestDeleteProfile:
    @pytest.mark.asyncio
    async def test_removes_profile_and_progress(self, profile_service, profile, store):
        await profile_service.save_reading_progress(profile.id, "art-1", 10)

        await profile_service.delete_profile(profile.id)

        assert await profile_service.get_profile(profile.id) is None
        assert await store.list_documents(READING_PROGRESS_COLLECTION) == []

    @pytest.mark.asyncio
    async def test_delete_missing_profile_is_noop(self, profile_service):
        await profile_service.delete_profile("ghost")
