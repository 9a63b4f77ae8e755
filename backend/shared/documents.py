"""
Document store over Supabase tables.

Profiles and catalog records are read and written as flat documents keyed
by an ``id`` column. Collections map one-to-one onto tables. Array-valued
columns support set semantics through the ``ArrayUnion`` and ``ArrayRemove``
sentinels, which the Supabase store forwards to the
``document_array_update`` SQL function. Whole-document writes go through
``document_replace`` (see migrations/).
"""

import copy
import logging
from typing import Any, Iterable, Optional, Protocol, runtime_checkable

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from .exceptions import (
    ArraySizeLimitError,
    DocumentNotFoundError,
    ExternalServiceError,
    NetworkError,
)

logger = logging.getLogger(__name__)

Record = dict[str, Any]

# Postgres "no_data_found", raised by document_array_update for a missing row
_NO_DATA_FOUND = "P0002"
# Raised by document_array_update when a union would pass p_max_size
_ARRAY_SIZE_LIMIT = "DF001"


class ArrayUnion:
    """
    Field update that adds values to an array, skipping ones already present.

    With ``max_size`` the whole update is rejected (``ArraySizeLimitError``)
    if the array would end up longer than that. The check and the write are
    one atomic step in both stores.
    """

    def __init__(self, values: Iterable[Any], max_size: Optional[int] = None):
        self.values = list(values)
        self.max_size = max_size

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, ArrayUnion)
            and self.values == other.values
            and self.max_size == other.max_size
        )

    def __repr__(self) -> str:
        if self.max_size is None:
            return f"ArrayUnion({self.values!r})"
        return f"ArrayUnion({self.values!r}, max_size={self.max_size})"


class ArrayRemove:
    """Field update that removes every occurrence of the given values."""

    def __init__(self, values: Iterable[Any]):
        self.values = list(values)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ArrayRemove) and self.values == other.values

    def __repr__(self) -> str:
        return f"ArrayRemove({self.values!r})"


@runtime_checkable
class IDocumentStore(Protocol):
    """
    Interface for document storage.

    Repositories depend on this protocol, not on a concrete store.
    """

    async def get_document(self, collection: str, document_id: str) -> Optional[Record]:
        """Return the document, or None if it doesn't exist."""
        ...

    async def set_document(self, collection: str, document_id: str, record: Record) -> None:
        """
        Create the document, or replace it entirely if it exists.

        Fields missing from ``record`` do not survive the replace.
        """
        ...

    async def insert_if_absent(self, collection: str, document_id: str, record: Record) -> bool:
        """
        Atomically create the document unless one with the same id exists.

        Returns:
            True if this call created the document, False if it already existed
        """
        ...

    async def update_fields(self, collection: str, document_id: str, fields: Record) -> None:
        """
        Patch individual fields of an existing document.

        Values may be ArrayUnion / ArrayRemove sentinels for array fields.

        Raises:
            DocumentNotFoundError: If the document doesn't exist
            ArraySizeLimitError: If an ArrayUnion would pass its max_size
        """
        ...

    async def document_exists(self, collection: str, document_id: str) -> bool:
        """Check whether a document exists."""
        ...

    async def query_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        """Return documents whose field equals value."""
        ...

    async def list_documents(
        self,
        collection: str,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        """Return all documents of a collection."""
        ...

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document. Deleting a missing document is a no-op."""
        ...


def split_field_updates(
    fields: Record,
) -> tuple[Record, list[tuple[str, ArrayUnion | ArrayRemove]]]:
    """Separate plain field values from array sentinels."""
    plain: Record = {}
    array_ops: list[tuple[str, ArrayUnion | ArrayRemove]] = []
    for name, value in fields.items():
        if isinstance(value, (ArrayUnion, ArrayRemove)):
            array_ops.append((name, value))
        else:
            plain[name] = value
    return plain, array_ops


class SupabaseDocumentStore(IDocumentStore):
    """
    Document store backed by Supabase (PostgREST).

    Every table used as a collection must have a text primary key named ``id``.
    """

    def __init__(self, db: AsyncClient) -> None:
        self._db = db

    async def _execute(self, query: Any, operation: str, collection: str) -> Any:
        """Run a PostgREST query, mapping transport and API failures."""
        try:
            return await query.execute()
        except httpx.TransportError as e:
            logger.warning(f"Supabase {operation} on '{collection}' failed: {e}")
            raise NetworkError("supabase") from e
        except APIError as e:
            logger.warning(
                f"Supabase {operation} on '{collection}' rejected: {e.code} {e.message}"
            )
            raise ExternalServiceError(
                e.message or f"Document store {operation} failed",
                service="supabase",
                code="STORE_ERROR",
                details={"operation": operation, "collection": collection, "postgrest_code": e.code},
            ) from e

    async def get_document(self, collection: str, document_id: str) -> Optional[Record]:
        query = self._db.table(collection).select("*").eq("id", document_id).limit(1)
        result = await self._execute(query, "get", collection)
        if not result.data:
            return None
        return result.data[0]

    async def set_document(self, collection: str, document_id: str, record: Record) -> None:
        # Columns absent from the record are reset, not kept
        query = self._db.rpc(
            "document_replace",
            {"p_table": collection, "p_id": document_id, "p_record": record},
        )
        await self._execute(query, "set", collection)

    async def insert_if_absent(self, collection: str, document_id: str, record: Record) -> bool:
        data = {**record, "id": document_id}
        query = self._db.table(collection).upsert(
            data,
            on_conflict="id",
            ignore_duplicates=True,
        )
        result = await self._execute(query, "insert", collection)
        # Ignored duplicates are not returned in the representation
        return bool(result.data)

    async def update_fields(self, collection: str, document_id: str, fields: Record) -> None:
        plain, array_ops = split_field_updates(fields)

        if plain:
            query = self._db.table(collection).update(plain).eq("id", document_id)
            result = await self._execute(query, "update", collection)
            if not result.data:
                raise DocumentNotFoundError(collection, document_id)

        for name, op in array_ops:
            query = self._db.rpc(
                "document_array_update",
                {
                    "p_table": collection,
                    "p_id": document_id,
                    "p_field": name,
                    "p_values": op.values,
                    "p_remove": isinstance(op, ArrayRemove),
                    "p_max_size": op.max_size if isinstance(op, ArrayUnion) else None,
                },
            )
            try:
                await self._execute(query, "array_update", collection)
            except ExternalServiceError as e:
                postgrest_code = e.details.get("postgrest_code")
                if postgrest_code == _NO_DATA_FOUND:
                    raise DocumentNotFoundError(collection, document_id) from e
                if postgrest_code == _ARRAY_SIZE_LIMIT:
                    raise ArraySizeLimitError(collection, document_id, name, op.max_size) from e
                raise

    async def document_exists(self, collection: str, document_id: str) -> bool:
        query = self._db.table(collection).select("id").eq("id", document_id).limit(1)
        result = await self._execute(query, "exists", collection)
        return bool(result.data)

    async def query_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        query = self._db.table(collection).select("*").eq(field, value)
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        result = await self._execute(query, "query", collection)
        return list(result.data or [])

    async def list_documents(
        self,
        collection: str,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        query = self._db.table(collection).select("*")
        if order_by:
            query = query.order(order_by, desc=descending)
        if limit is not None:
            query = query.limit(limit)
        result = await self._execute(query, "list", collection)
        return list(result.data or [])

    async def delete_document(self, collection: str, document_id: str) -> None:
        query = self._db.table(collection).delete().eq("id", document_id)
        await self._execute(query, "delete", collection)


class InMemoryDocumentStore(IDocumentStore):
    """
    Document store kept in process memory.

    Used for local runs without Supabase and in tests. Records are deep-copied
    on the way in and out so callers never share state with the store.
    """

    def __init__(self) -> None:
        # {collection: {document_id: record}}
        self._collections: dict[str, dict[str, Record]] = {}

    def _table(self, collection: str) -> dict[str, Record]:
        return self._collections.setdefault(collection, {})

    @staticmethod
    def _sorted(
        records: list[Record],
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
    ) -> list[Record]:
        if order_by:
            # Missing values sort last regardless of direction
            present = [r for r in records if r.get(order_by) is not None]
            missing = [r for r in records if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            records = present + missing
        if limit is not None:
            records = records[:limit]
        return [copy.deepcopy(r) for r in records]

    async def get_document(self, collection: str, document_id: str) -> Optional[Record]:
        record = self._table(collection).get(document_id)
        return copy.deepcopy(record) if record is not None else None

    async def set_document(self, collection: str, document_id: str, record: Record) -> None:
        self._table(collection)[document_id] = {**copy.deepcopy(record), "id": document_id}

    async def insert_if_absent(self, collection: str, document_id: str, record: Record) -> bool:
        table = self._table(collection)
        if document_id in table:
            return False
        table[document_id] = {**copy.deepcopy(record), "id": document_id}
        return True

    async def update_fields(self, collection: str, document_id: str, fields: Record) -> None:
        table = self._table(collection)
        if document_id not in table:
            raise DocumentNotFoundError(collection, document_id)

        record = table[document_id]
        plain, array_ops = split_field_updates(fields)

        # Every array result is computed before anything is written
        arrays: Record = {}
        for name, op in array_ops:
            current = list(arrays.get(name, record.get(name)) or [])
            if isinstance(op, ArrayUnion):
                for value in op.values:
                    if value not in current:
                        current.append(value)
                if op.max_size is not None and len(current) > op.max_size:
                    raise ArraySizeLimitError(collection, document_id, name, op.max_size)
            else:
                current = [v for v in current if v not in op.values]
            arrays[name] = current

        record.update(copy.deepcopy(plain))
        record.update(arrays)

    async def document_exists(self, collection: str, document_id: str) -> bool:
        return document_id in self._table(collection)

    async def query_by_field(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        matches = [r for r in self._table(collection).values() if r.get(field) == value]
        return self._sorted(matches, order_by, descending, limit)

    async def list_documents(
        self,
        collection: str,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> list[Record]:
        return self._sorted(list(self._table(collection).values()), order_by, descending, limit)

    async def delete_document(self, collection: str, document_id: str) -> None:
        self._table(collection).pop(document_id, None)
