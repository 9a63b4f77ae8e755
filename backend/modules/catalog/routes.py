"""
Catalog API endpoints.

Browsing is public; the feed needs a signed-in user because it is built
from their follows.
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from api.dependencies import get_catalog_service, get_profile_service
from api.middleware.auth import get_current_identity
from modules.profiles.interfaces import IProfileService
from shared.models import Identity

from .interfaces import ICatalogService
from .models import Article, ArticleSummary, Publication, Topic

router = APIRouter()


@router.get("/topics", response_model=list[Topic])
async def list_topics(
    service: ICatalogService = Depends(get_catalog_service),
) -> list[Topic]:
    """All topics in display order."""
    return await service.list_topics()


@router.get("/topics/{topic_id}", response_model=Topic)
async def get_topic(
    topic_id: str,
    service: ICatalogService = Depends(get_catalog_service),
) -> Topic:
    return await service.get_topic(topic_id)


@router.get("/publications", response_model=list[Publication])
async def list_publications(
    topic_id: Optional[str] = Query(default=None, description="Filter by topic"),
    service: ICatalogService = Depends(get_catalog_service),
) -> list[Publication]:
    return await service.list_publications(topic_id)


@router.get("/publications/{publication_id}", response_model=Publication)
async def get_publication(
    publication_id: str,
    service: ICatalogService = Depends(get_catalog_service),
) -> Publication:
    return await service.get_publication(publication_id)


@router.get("/articles", response_model=list[ArticleSummary])
async def list_articles(
    topic_id: Optional[str] = Query(default=None, description="Filter by topic"),
    publication_id: Optional[str] = Query(default=None, description="Filter by publication"),
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Maximum articles"),
    service: ICatalogService = Depends(get_catalog_service),
) -> list[ArticleSummary]:
    """
    List articles, newest first.

    Bodies are omitted; fetch a single article for its content.
    """
    articles = await service.list_articles(topic_id, publication_id, limit)
    return [ArticleSummary.from_article(article) for article in articles]


@router.get("/articles/slug/{slug}", response_model=Article)
async def get_article_by_slug(
    slug: str,
    service: ICatalogService = Depends(get_catalog_service),
) -> Article:
    return await service.get_article_by_slug(slug)


@router.get("/articles/{article_id}", response_model=Article)
async def get_article(
    article_id: str,
    service: ICatalogService = Depends(get_catalog_service),
) -> Article:
    return await service.get_article(article_id)


@router.get("/feed", response_model=list[ArticleSummary])
async def get_feed(
    limit: Optional[int] = Query(default=None, ge=1, le=100, description="Maximum articles"),
    identity: Identity = Depends(get_current_identity),
    profiles: IProfileService = Depends(get_profile_service),
    service: ICatalogService = Depends(get_catalog_service),
) -> list[ArticleSummary]:
    """Newest articles from the publications and topics the user follows."""
    profile = await profiles.require_profile(identity.id)
    articles = await service.get_feed(profile, limit)
    return [ArticleSummary.from_article(article) for article in articles]
