"""
Backend clients for PawMarket.
Handles table queries against Firestore and image uploads to Cloud Storage,
plus an in-memory backend used for local development and tests.
"""

import asyncio
import copy
import uuid
from functools import partial
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote
from loguru import logger

from ..config import settings

# Firestore rejects "in" filters with more values than this
FIRESTORE_IN_LIMIT = 30

RangeBounds = Tuple[Optional[float], Optional[float]]


class BackendError(Exception):
    """Raised when a table or storage call to the backend fails."""

    def __init__(self, message: str, code: Optional[str] = None):
        self.code = code
        super().__init__(message)


class BackendClient:
    """
    Table and object storage operations the marketplace relies on.

    Rows are plain dictionaries and always carry their row ID under ``id``.
    Range bounds are half-open: ``(low, high)`` matches ``low <= value < high``
    and either side may be ``None``.
    """

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        in_filters: Optional[Dict[str, Sequence[Any]]] = None,
        ranges: Optional[Dict[str, RangeBounds]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def insert(
        self, table: str, data: Dict[str, Any], row_id: Optional[str] = None
    ) -> Dict[str, Any]:
        raise NotImplementedError

    async def upsert(self, table: str, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError

    async def delete(self, table: str, filters: Dict[str, Any]) -> int:
        raise NotImplementedError

    async def upload(
        self, bucket: str, object_name: str, content: bytes, content_type: str
    ) -> str:
        raise NotImplementedError

    def get_public_url(self, bucket: str, object_name: str) -> str:
        """Public link for an object in a bucket."""
        bucket_name = settings.get_bucket(bucket)
        base_url = settings.storage_public_base_url.rstrip("/")
        return f"{base_url}/{bucket_name}/{quote(object_name)}"


class FirestoreBackend(BackendClient):
    """Backend backed by Google Cloud Firestore and Cloud Storage."""

    def __init__(self, project_id: Optional[str] = None):
        """Initialize Google Cloud clients."""
        self.project_id = project_id or settings.gcp_project_id

        # Lazy initialization of clients
        self._firestore_client = None
        self._storage_client = None

    @property
    def firestore_client(self):
        """Get or create Firestore client."""
        if self._firestore_client is None:
            from google.cloud import firestore

            self._firestore_client = firestore.Client(project=self.project_id)
        return self._firestore_client

    @property
    def storage_client(self):
        """Get or create Cloud Storage client."""
        if self._storage_client is None:
            from google.cloud import storage

            self._storage_client = storage.Client(project=self.project_id)
        return self._storage_client

    def _collection(self, table: str):
        return self.firestore_client.collection(settings.get_table(table))

    async def _run(self, func: Callable[[], Any], action: str) -> Any:
        """Run a blocking SDK call in the executor and wrap its failures."""
        from google.api_core import exceptions as gcp_exceptions

        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, func)
        except gcp_exceptions.GoogleAPIError as e:
            logger.error(f"Backend error during {action}: {e}")
            code = getattr(e, "code", None)
            raise BackendError(f"{action} failed: {e}", code=str(int(code)) if code else None) from e

    def _build_queries(
        self,
        table: str,
        filters: Optional[Dict[str, Any]],
        in_filters: Optional[Dict[str, Sequence[Any]]],
        ranges: Optional[Dict[str, RangeBounds]],
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
        fields: Optional[List[str]],
    ) -> List[Any]:
        from google.cloud import firestore
        from google.cloud.firestore_v1.base_query import FieldFilter

        collection = self._collection(table)
        query = collection

        # Row IDs live in the document name, not in a field
        def _target(field: str, value: Any) -> Tuple[str, Any]:
            if field != "id":
                return field, value
            if isinstance(value, (list, tuple)):
                return "__name__", [collection.document(v) for v in value]
            return "__name__", collection.document(value)

        for field, value in (filters or {}).items():
            path, value = _target(field, value)
            query = query.where(filter=FieldFilter(path, "==", value))

        for field, (low, high) in (ranges or {}).items():
            if low is not None:
                query = query.where(filter=FieldFilter(field, ">=", low))
            if high is not None:
                query = query.where(filter=FieldFilter(field, "<", high))

        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)

        if fields:
            query = query.select(fields)

        if limit:
            query = query.limit(limit)

        # Only one "in" filter is supported per query; large lists are chunked
        if not in_filters:
            return [query]

        if len(in_filters) > 1:
            raise BackendError("Only one 'in' filter is supported per query")

        field, values = next(iter(in_filters.items()))
        path, values = _target(field, list(values))
        return [
            query.where(filter=FieldFilter(path, "in", values[i:i + FIRESTORE_IN_LIMIT]))
            for i in range(0, len(values), FIRESTORE_IN_LIMIT)
        ]

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        in_filters: Optional[Dict[str, Sequence[Any]]] = None,
        ranges: Optional[Dict[str, RangeBounds]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        if in_filters and not any(in_filters.values()):
            return []

        queries = self._build_queries(
            table, filters, in_filters, ranges, order_by, descending, limit, fields
        )

        def _stream() -> List[Dict[str, Any]]:
            rows = []
            for query in queries:
                for doc in query.stream():
                    rows.append({**doc.to_dict(), "id": doc.id})
            return rows

        rows = await self._run(_stream, f"select from {table}")
        logger.debug(f"Selected {len(rows)} rows from {table} (filters={filters})")
        return rows

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        doc = await self._run(
            self._collection(table).document(row_id).get, f"get {table}/{row_id}"
        )
        if doc.exists:
            return {**doc.to_dict(), "id": doc.id}
        return None

    async def insert(
        self, table: str, data: Dict[str, Any], row_id: Optional[str] = None
    ) -> Dict[str, Any]:
        collection = self._collection(table)
        doc_ref = collection.document(row_id) if row_id else collection.document()
        payload = {k: v for k, v in data.items() if k != "id"}

        await self._run(partial(doc_ref.set, payload), f"insert into {table}")
        logger.info(f"Inserted row {doc_ref.id} into {table}")
        return {**payload, "id": doc_ref.id}

    async def upsert(self, table: str, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        doc_ref = self._collection(table).document(row_id)
        payload = {k: v for k, v in data.items() if k != "id"}

        await self._run(partial(doc_ref.set, payload, merge=True), f"upsert {table}/{row_id}")
        doc = await self._run(doc_ref.get, f"get {table}/{row_id}")
        logger.info(f"Upserted row {row_id} in {table}")
        return {**(doc.to_dict() or payload), "id": row_id}

    async def delete(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            raise BackendError("Refusing to delete without filters")

        if set(filters) == {"id"}:
            doc_ref = self._collection(table).document(filters["id"])
            doc = await self._run(doc_ref.get, f"get {table}/{filters['id']}")
            if not doc.exists:
                return 0
            await self._run(doc_ref.delete, f"delete {table}/{filters['id']}")
            logger.info(f"Deleted row {filters['id']} from {table}")
            return 1

        rows = await self.select(table, filters=filters, fields=[])

        def _delete_rows() -> None:
            batch = self.firestore_client.batch()
            for row in rows:
                batch.delete(self._collection(table).document(row["id"]))
            batch.commit()

        if rows:
            await self._run(_delete_rows, f"delete from {table}")
        logger.info(f"Deleted {len(rows)} rows from {table}")
        return len(rows)

    async def upload(
        self, bucket: str, object_name: str, content: bytes, content_type: str
    ) -> str:
        blob = self.storage_client.bucket(settings.get_bucket(bucket)).blob(object_name)

        await self._run(
            partial(blob.upload_from_string, content, content_type=content_type),
            f"upload {bucket}/{object_name}",
        )
        logger.info(f"Uploaded {len(content)} bytes to {bucket}/{object_name}")
        return object_name


class MemoryBackend(BackendClient):
    """In-process table and object store with the same query semantics."""

    def __init__(self):
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.buckets: Dict[str, Dict[str, Tuple[bytes, str]]] = {}

    def _table(self, table: str) -> Dict[str, Dict[str, Any]]:
        return self.tables.setdefault(settings.get_table(table), {})

    @staticmethod
    def _matches(
        row: Dict[str, Any],
        filters: Optional[Dict[str, Any]],
        in_filters: Optional[Dict[str, Sequence[Any]]],
        ranges: Optional[Dict[str, RangeBounds]],
    ) -> bool:
        for field, value in (filters or {}).items():
            if row.get(field) != value:
                return False

        for field, values in (in_filters or {}).items():
            if row.get(field) not in values:
                return False

        for field, (low, high) in (ranges or {}).items():
            value = row.get(field)
            if value is None:
                return False
            if low is not None and value < low:
                return False
            if high is not None and value >= high:
                return False

        return True

    async def select(
        self,
        table: str,
        filters: Optional[Dict[str, Any]] = None,
        in_filters: Optional[Dict[str, Sequence[Any]]] = None,
        ranges: Optional[Dict[str, RangeBounds]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        fields: Optional[List[str]] = None,
    ) -> List[Dict[str, Any]]:
        rows = [
            {**copy.deepcopy(row), "id": row_id}
            for row_id, row in self._table(table).items()
            if self._matches({**row, "id": row_id}, filters, in_filters, ranges)
        ]

        if order_by:
            # Firestore drops rows missing the ordered field
            rows = [row for row in rows if row.get(order_by) is not None]
            rows.sort(key=lambda row: row[order_by], reverse=descending)

        if limit:
            rows = rows[:limit]

        if fields is not None:
            rows = [{k: v for k, v in row.items() if k in fields or k == "id"} for row in rows]

        return rows

    async def get(self, table: str, row_id: str) -> Optional[Dict[str, Any]]:
        row = self._table(table).get(row_id)
        if row is None:
            return None
        return {**copy.deepcopy(row), "id": row_id}

    async def insert(
        self, table: str, data: Dict[str, Any], row_id: Optional[str] = None
    ) -> Dict[str, Any]:
        row_id = row_id or uuid.uuid4().hex
        payload = {k: copy.deepcopy(v) for k, v in data.items() if k != "id"}
        self._table(table)[row_id] = payload
        logger.debug(f"Inserted row {row_id} into {table}")
        return {**copy.deepcopy(payload), "id": row_id}

    async def upsert(self, table: str, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        rows = self._table(table)
        merged = {**rows.get(row_id, {}), **{k: copy.deepcopy(v) for k, v in data.items() if k != "id"}}
        rows[row_id] = merged
        logger.debug(f"Upserted row {row_id} in {table}")
        return {**copy.deepcopy(merged), "id": row_id}

    async def delete(self, table: str, filters: Dict[str, Any]) -> int:
        if not filters:
            raise BackendError("Refusing to delete without filters")

        rows = self._table(table)
        doomed = [
            row_id for row_id, row in rows.items()
            if self._matches({**row, "id": row_id}, filters, None, None)
        ]
        for row_id in doomed:
            del rows[row_id]
        return len(doomed)

    async def upload(
        self, bucket: str, object_name: str, content: bytes, content_type: str
    ) -> str:
        objects = self.buckets.setdefault(settings.get_bucket(bucket), {})
        if object_name in objects:
            raise BackendError(f"Object {bucket}/{object_name} already exists", code="409")
        objects[object_name] = (content, content_type)
        return object_name

    def seed(self, table: str, rows: Iterable[Dict[str, Any]]) -> None:
        """Load rows (each carrying an ``id``) straight into a table."""
        target = self._table(table)
        for row in rows:
            row = dict(row)
            row_id = row.pop("id", None) or uuid.uuid4().hex
            target[row_id] = row


# Singleton instance
_backend: Optional[BackendClient] = None


def get_backend() -> BackendClient:
    """Get or create the backend selected by the settings."""
    global _backend
    if _backend is None:
        if settings.mock_backend or settings.testing_mode:
            logger.info("Using in-memory backend")
            _backend = MemoryBackend()
        else:
            logger.info(f"Using Firestore backend for project {settings.gcp_project_id}")
            _backend = FirestoreBackend()
    return _backend


def set_backend(backend: Optional[BackendClient]) -> None:
    """Replace the shared backend (``None`` re-creates it on next use)."""
    global _backend
    _backend = backend
