"""
Catalog fixtures: a small seeded catalog in the in-memory store.
"""

import pytest

from modules.catalog.repository import ArticleRepository, PublicationRepository, TopicRepository
from modules.catalog.service import CatalogService


def topic_record(topic_id: str, order: int, **fields) -> dict:
    return {
        "name": topic_id.title(),
        "slug": topic_id,
        "description": f"All about {topic_id}",
        "icon_name": "book",
        "color": "#336699",
        "order": order,
        **fields,
    }


def publication_record(publication_id: str, topic_id: str, **fields) -> dict:
    return {
        "name": publication_id.title(),
        "slug": publication_id,
        "description": "A publication",
        "avatar_url": f"https://img/{publication_id}.png",
        "blog_url": f"https://{publication_id}.example.com",
        "topic_id": topic_id,
        "topics": [topic_id],
        "follower_count": 10,
        "article_count": 2,
        "created_at": "2024-01-01T00:00:00+00:00",
        **fields,
    }


def article_record(article_id: str, publication_id: str, topic_id: str, day: int, **fields) -> dict:
    return {
        "title": f"Article {article_id}",
        "slug": f"article-{article_id}",
        "featured_quote": "A quote",
        "content": "# Heading\n\nBody",
        "author_name": "Ann",
        "published_at": f"2024-03-{day:02d}T09:00:00+00:00",
        "original_publish_date": f"2024-03-{day:02d}T09:00:00+00:00",
        "read_time_minutes": 5,
        "publication_id": publication_id,
        "topic_id": topic_id,
        "recommend_count": 3,
        **fields,
    }


@pytest.fixture
def catalog_store(store):
    """
    Two topics, two publications, four articles.

    art-4 is the newest; art-1 the oldest.
    """
    records = {
        "topics": {
            "tech": topic_record("tech", 2),
            "science": topic_record("science", 1),
        },
        "publications": {
            "bytes": publication_record("bytes", "tech"),
            "atoms": publication_record("atoms", "science"),
        },
        "articles": {
            "art-1": article_record("1", "bytes", "tech", 1),
            "art-2": article_record("2", "atoms", "science", 2),
            "art-3": article_record("3", "bytes", "tech", 3),
            "art-4": article_record("4", "atoms", "tech", 4),
        },
    }
    for collection, documents in records.items():
        store._collections[collection] = {
            document_id: {**record, "id": document_id} for document_id, record in documents.items()
        }
    return store


@pytest.fixture
def catalog_service(catalog_store, settings) -> CatalogService:
    return CatalogService(
        TopicRepository(catalog_store),
        PublicationRepository(catalog_store),
        ArticleRepository(catalog_store),
        settings=settings,
    )
