"""
Profile API endpoints.

Everything under /me acts on the profile of the signed-in user.
"""

from fastapi import APIRouter, Depends, Response

from api.dependencies import get_profile_service
from api.middleware.auth import get_current_identity
from shared.models import Identity

from .interfaces import IProfileService
from .models import (
    FollowedIdsRequest,
    ReadingProgress,
    ReadingProgressUpdate,
    UpdatePhotoRequest,
    UserProfile,
)

router = APIRouter()


@router.get("", response_model=UserProfile)
async def get_my_profile(
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Get the signed-in user's profile."""
    return await service.require_profile(identity.id)


@router.patch("/photo", response_model=UserProfile)
async def update_photo(
    request: UpdatePhotoRequest,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> UserProfile:
    await service.update_photo_url(identity.id, request.photo_url)
    return await service.require_profile(identity.id)


@router.post("/onboarding", response_model=UserProfile)
async def complete_onboarding(
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> UserProfile:
    """Mark onboarding as completed."""
    await service.complete_onboarding(identity.id)
    return await service.require_profile(identity.id)


# -----------------------------------------------------------------------------
# Follows
# -----------------------------------------------------------------------------


@router.put("/topics", response_model=UserProfile)
async def set_followed_topics(
    request: FollowedIdsRequest,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> UserProfile:
    await service.set_followed_topics(identity.id, request.ids)
    return await service.require_profile(identity.id)


@router.put("/topics/{topic_id}", status_code=204)
async def follow_topic(
    topic_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> Response:
    await service.follow_topic(identity.id, topic_id)
    return Response(status_code=204)


@router.delete("/topics/{topic_id}", status_code=204)
async def unfollow_topic(
    topic_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> Response:
    await service.unfollow_topic(identity.id, topic_id)
    return Response(status_code=204)


@router.put("/publications", response_model=UserProfile)
async def set_followed_publications(
    request: FollowedIdsRequest,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> UserProfile:
    await service.set_followed_publications(identity.id, request.ids)
    return await service.require_profile(identity.id)


@router.put("/publications/{publication_id}", status_code=204)
async def follow_publication(
    publication_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> Response:
    await service.follow_publication(identity.id, publication_id)
    return Response(status_code=204)


@router.delete("/publications/{publication_id}", status_code=204)
async def unfollow_publication(
    publication_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> Response:
    await service.unfollow_publication(identity.id, publication_id)
    return Response(status_code=204)


# -----------------------------------------------------------------------------
# Bookmarks
# -----------------------------------------------------------------------------


@router.put("/bookmarks/{article_id}", status_code=204)
async def add_bookmark(
    article_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> Response:
    await service.add_bookmark(identity.id, article_id)
    return Response(status_code=204)


@router.delete("/bookmarks/{article_id}", status_code=204)
async def remove_bookmark(
    article_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> Response:
    await service.remove_bookmark(identity.id, article_id)
    return Response(status_code=204)


# -----------------------------------------------------------------------------
# Reading progress
# -----------------------------------------------------------------------------


@router.get("/reading-progress", response_model=list[ReadingProgress])
async def list_reading_progress(
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> list[ReadingProgress]:
    """Reading progress across articles, most recently read first."""
    return await service.list_reading_progress(identity.id)


@router.get("/reading-progress/{article_id}", response_model=ReadingProgress)
async def get_reading_progress(
    article_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> ReadingProgress:
    """
    Progress on one article.

    Unread articles report zero progress rather than 404.
    """
    progress = await service.get_reading_progress(identity.id, article_id)
    if progress is None:
        return ReadingProgress(user_id=identity.id, article_id=article_id, progress=0)
    return progress


@router.put("/reading-progress/{article_id}", response_model=ReadingProgress)
async def save_reading_progress(
    article_id: str,
    request: ReadingProgressUpdate,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> ReadingProgress:
    return await service.save_reading_progress(identity.id, article_id, request.progress)


@router.post("/reading-progress/{article_id}/complete", response_model=ReadingProgress)
async def mark_article_completed(
    article_id: str,
    identity: Identity = Depends(get_current_identity),
    service: IProfileService = Depends(get_profile_service),
) -> ReadingProgress:
    return await service.mark_article_completed(identity.id, article_id)
