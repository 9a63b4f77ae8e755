"""
Catalog module.

Read-only browsing of topics, publications and articles.

Public API:
- ICatalogService: Interface for catalog operations
- Topic, Publication, Article, ArticleSummary: Content models
- CatalogItemNotFoundError
"""

from .interfaces import ICatalogService
from .models import Topic, Publication, Article, ArticleSummary
from .exceptions import CatalogItemNotFoundError

__all__ = [
    "ICatalogService",
    "Topic",
    "Publication",
    "Article",
    "ArticleSummary",
    "CatalogItemNotFoundError",
]
