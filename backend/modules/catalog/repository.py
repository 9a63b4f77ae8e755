"""
Catalog repositories.

Read-only access to the topics, publications and articles collections.
"""

from typing import Optional

from shared.repository import BaseRepository

from .models import Article, Publication, Topic


class TopicRepository(BaseRepository[Topic]):
    collection = "topics"
    model = Topic

    async def list_ordered(self) -> list[Topic]:
        records = await self._store.list_documents(self.collection, order_by="order")
        return self._decode_all(records)


class PublicationRepository(BaseRepository[Publication]):
    collection = "publications"
    model = Publication

    async def list_all(self) -> list[Publication]:
        records = await self._store.list_documents(self.collection, order_by="name")
        return self._decode_all(records)

    async def list_by_topic(self, topic_id: str) -> list[Publication]:
        records = await self._store.query_by_field(
            self.collection, "topic_id", topic_id, order_by="name"
        )
        return self._decode_all(records)


class ArticleRepository(BaseRepository[Article]):
    """Articles, newest first."""

    collection = "articles"
    model = Article

    async def list_recent(self, limit: int) -> list[Article]:
        records = await self._store.list_documents(
            self.collection, limit=limit, order_by="published_at", descending=True
        )
        return self._decode_all(records)

    async def list_by_field(self, field: str, value: str, limit: int) -> list[Article]:
        records = await self._store.query_by_field(
            self.collection,
            field,
            value,
            limit=limit,
            order_by="published_at",
            descending=True,
        )
        return self._decode_all(records)

    async def get_by_slug(self, slug: str) -> Optional[Article]:
        records = await self._store.query_by_field(self.collection, "slug", slug, limit=1)
        return self._decode(records[0]) if records else None
