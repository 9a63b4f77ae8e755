"""
Catalog service implementation.
"""

from typing import Optional

from shared.config import Settings, get_settings
from modules.profiles.models import UserProfile

from .exceptions import CatalogItemNotFoundError
from .interfaces import ICatalogService
from .models import Article, Publication, Topic
from .repository import ArticleRepository, PublicationRepository, TopicRepository


class CatalogService(ICatalogService):
    """Read-only browsing over the catalog repositories."""

    def __init__(
        self,
        topics: TopicRepository,
        publications: PublicationRepository,
        articles: ArticleRepository,
        settings: Optional[Settings] = None,
    ):
        self._topics = topics
        self._publications = publications
        self._articles = articles
        self._settings = settings or get_settings()

    async def list_topics(self) -> list[Topic]:
        return await self._topics.list_ordered()

    async def get_topic(self, topic_id: str) -> Topic:
        topic = await self._topics.get(topic_id)
        if topic is None:
            raise CatalogItemNotFoundError("topic", topic_id)
        return topic

    async def list_publications(self, topic_id: Optional[str] = None) -> list[Publication]:
        if topic_id:
            return await self._publications.list_by_topic(topic_id)
        return await self._publications.list_all()

    async def get_publication(self, publication_id: str) -> Publication:
        publication = await self._publications.get(publication_id)
        if publication is None:
            raise CatalogItemNotFoundError("publication", publication_id)
        return publication

    async def list_articles(
        self,
        topic_id: Optional[str] = None,
        publication_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Article]:
        limit = limit or self._settings.articles_per_page

        if publication_id:
            articles = await self._articles.list_by_field("publication_id", publication_id, limit)
            if topic_id:
                articles = [a for a in articles if a.topic_id == topic_id]
            return articles
        if topic_id:
            return await self._articles.list_by_field("topic_id", topic_id, limit)
        return await self._articles.list_recent(limit)

    async def get_article(self, article_id: str) -> Article:
        article = await self._articles.get(article_id)
        if article is None:
            raise CatalogItemNotFoundError("article", article_id)
        return article

    async def get_article_by_slug(self, slug: str) -> Article:
        article = await self._articles.get_by_slug(slug)
        if article is None:
            raise CatalogItemNotFoundError("article", slug)
        return article

    async def get_feed(self, profile: UserProfile, limit: Optional[int] = None) -> list[Article]:
        limit = limit or self._settings.articles_per_page

        collected: dict[str, Article] = {}
        for publication_id in profile.followed_publications:
            for article in await self._articles.list_by_field("publication_id", publication_id, limit):
                collected.setdefault(article.id, article)
        for topic_id in profile.followed_topics:
            for article in await self._articles.list_by_field("topic_id", topic_id, limit):
                collected.setdefault(article.id, article)

        feed = sorted(collected.values(), key=lambda a: a.published_at, reverse=True)
        return feed[:limit]
