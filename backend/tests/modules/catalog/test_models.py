"""
Tests for catalog models.
"""

from modules.catalog.models import Article, ArticleSummary

from tests.modules.catalog.conftest import article_record


def make_article(**fields) -> Article:
    return Article.model_validate({"id": "art-1", **article_record("1", "bytes", "tech", 1, **fields)})


class TestArticle:
    def test_read_time_text(self):
        assert make_article(read_time_minutes=7).read_time_text == "7 min read"

    def test_optional_images(self):
        article = make_article()
        assert article.cover_image_url is None
        assert article.author_avatar_url is None

    def test_null_recommend_count(self):
        assert make_article(recommend_count=None).recommend_count == 0


class TestArticleSummary:
    def test_from_article_drops_body(self):
        summary = ArticleSummary.from_article(make_article())

        assert summary.id == "art-1"
        assert summary.read_time_text == "5 min read"
        assert "content" not in summary.model_dump()
