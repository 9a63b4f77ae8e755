"""
Base repository class for document access.

Provides a common abstraction layer for all repositories, encapsulating
document store access and the mapping of raw records to Pydantic models.
"""

from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from .documents import IDocumentStore, Record
from .exceptions import DecodingError


T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """
    Base class for all repositories.

    Provides common functionality for document operations:
    - Document store access via self._store
    - Record-to-model decoding that fails loudly on malformed records

    Subclasses set ``collection`` and ``model`` and implement
    domain-specific data access methods.

    Example:
        class TopicRepository(BaseRepository[Topic]):
            collection = "topics"
            model = Topic

            async def get_by_slug(self, slug: str) -> Optional[Topic]:
                records = await self._store.query_by_field(self.collection, "slug", slug, limit=1)
                return self._decode(records[0]) if records else None
    """

    collection: str
    model: type[T]

    def __init__(self, store: IDocumentStore) -> None:
        """
        Initialize the repository with a document store.

        Args:
            store: Document store instance for data operations.
        """
        self._store = store

    def _decode(self, record: Record) -> T:
        """
        Map a raw record to the repository's model.

        Raises:
            DecodingError: If required fields are missing or have the wrong type
        """
        try:
            return self.model.model_validate(record)
        except PydanticValidationError as e:
            errors = [
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}"
                for err in e.errors()
            ]
            raise DecodingError(self.collection, record.get("id"), errors) from e

    def _decode_all(self, records: list[Record]) -> list[T]:
        """Decode every record; a single malformed record fails the whole call."""
        return [self._decode(r) for r in records]

    @staticmethod
    def _encode(model: BaseModel, exclude: Optional[set[str]] = None) -> dict[str, Any]:
        """Serialize a model into a JSON-compatible record."""
        return model.model_dump(mode="json", exclude=exclude)

    async def get(self, document_id: str) -> Optional[T]:
        """Get a record by ID, or None if it doesn't exist."""
        record = await self._store.get_document(self.collection, document_id)
        if record is None:
            return None
        return self._decode(record)
