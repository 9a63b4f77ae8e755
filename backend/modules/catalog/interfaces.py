"""
Catalog module interface.
"""

from typing import Optional, Protocol, runtime_checkable

from modules.profiles.models import UserProfile

from .models import Article, Publication, Topic


@runtime_checkable
class ICatalogService(Protocol):
    """Interface for browsing topics, publications and articles."""

    async def list_topics(self) -> list[Topic]:
        """All topics in display order."""
        ...

    async def get_topic(self, topic_id: str) -> Topic:
        ...

    async def list_publications(self, topic_id: Optional[str] = None) -> list[Publication]:
        ...

    async def get_publication(self, publication_id: str) -> Publication:
        ...

    async def list_articles(
        self,
        topic_id: Optional[str] = None,
        publication_id: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[Article]:
        """Newest articles, optionally filtered by topic or publication."""
        ...

    async def get_article(self, article_id: str) -> Article:
        ...

    async def get_article_by_slug(self, slug: str) -> Article:
        ...

    async def get_feed(self, profile: UserProfile, limit: Optional[int] = None) -> list[Article]:
        """Newest articles from the profile's followed publications and topics."""
        ...
