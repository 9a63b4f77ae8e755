"""
Catalog module data models.

Read-only content records: topics, publications and articles.
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional
from pydantic import BaseModel, BeforeValidator, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _zero_if_null(value: Any) -> Any:
    return 0 if value is None else value


# Counters may be stored as null before the first increment
Count = Annotated[int, BeforeValidator(_zero_if_null)]


class Topic(BaseModel):
    """A content category."""

    id: str
    name: str
    slug: str
    description: str
    icon_name: str
    color: str
    order: int

    model_config = {"frozen": True}


class Publication(BaseModel):
    """A publisher or blog whose articles are syndicated."""

    id: str
    name: str
    slug: str
    description: str
    avatar_url: str
    blog_url: str
    topic_id: str
    topics: list[str]
    follower_count: Count = 0
    article_count: Count = 0
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}


class Article(BaseModel):
    """A published article. Content is markdown."""

    id: str
    title: str
    slug: str
    featured_quote: str
    content: str
    author_name: str
    author_avatar_url: Optional[str] = None
    published_at: datetime = Field(default_factory=_utcnow)
    original_publish_date: datetime = Field(default_factory=_utcnow)
    read_time_minutes: int
    cover_image_url: Optional[str] = None
    publication_id: str
    topic_id: str
    recommend_count: Count = 0

    model_config = {"frozen": True}

    @property
    def read_time_text(self) -> str:
        """e.g. "5 min read"."""
        return f"{self.read_time_minutes} min read"


class ArticleSummary(BaseModel):
    """Article without its body, for list views."""

    id: str
    title: str
    slug: str
    featured_quote: str
    author_name: str
    author_avatar_url: Optional[str] = None
    published_at: datetime
    read_time_minutes: int
    read_time_text: str
    cover_image_url: Optional[str] = None
    publication_id: str
    topic_id: str
    recommend_count: int = 0

    @classmethod
    def from_article(cls, article: Article) -> "ArticleSummary":
        return cls(
            **article.model_dump(exclude={"content", "original_publish_date"}),
            read_time_text=article.read_time_text,
        )
