"""Document store interfaces and implementations for tokens, progress and team data."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Any, Mapping, Protocol

from tarkovtracker.backend.models import Document


class StoreError(RuntimeError):
    """Base error for document store failures that end a request."""


class MissingDocumentError(StoreError):
    def __init__(self, collection: str, document_id: str) -> None:
        super().__init__(f"Document {collection}/{document_id} not found")
        self.collection = collection
        self.document_id = document_id


class DocumentStore(Protocol):
    async def get_document(self, collection: str, document_id: str) -> Document | None:
        """Return the stored document or None when it does not exist."""

    async def increment_field(self, collection: str, document_id: str, field: str, amount: int = 1) -> None:
        """Atomically add amount to a numeric field of an existing document."""


class InMemoryDocumentStore:
    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def put_document(self, collection: str, document_id: str, data: Mapping[str, Any]) -> None:
        self._collections.setdefault(collection, {})[document_id] = dict(data)

    def seed(self, documents: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> None:
        """Load a {collection: {document_id: data}} mapping."""
        for collection, entries in documents.items():
            for document_id, data in entries.items():
                self.put_document(collection, document_id, data)

    def reset(self) -> None:
        self._collections.clear()

    async def get_document(self, collection: str, document_id: str) -> Document | None:
        data = self._collections.get(collection, {}).get(document_id)
        if data is None:
            return None
        return Document(collection=collection, document_id=document_id, data=dict(data))

    async def increment_field(self, collection: str, document_id: str, field: str, amount: int = 1) -> None:
        data = self._collections.get(collection, {}).get(document_id)
        if data is None:
            raise MissingDocumentError(collection, document_id)
        data[field] = int(data.get(field, 0) or 0) + amount


@dataclass
class PostgresDocumentStore:
    database_url: str

    async def _connect(self) -> Any:
        import psycopg

        return await psycopg.AsyncConnection.connect(self.database_url)

    async def get_document(self, collection: str, document_id: str) -> Document | None:
        async with await self._connect() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    SELECT data
                    FROM documents
                    WHERE collection = %s AND id = %s
                    """,
                    (collection, document_id),
                )
                row = await cur.fetchone()

        if row is None:
            return None

        (data_json,) = row
        data = data_json if isinstance(data_json, dict) else json.loads(data_json)
        return Document(collection=collection, document_id=document_id, data=data)

    async def increment_field(self, collection: str, document_id: str, field: str, amount: int = 1) -> None:
        async with await self._connect() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    """
                    UPDATE documents
                    SET data = jsonb_set(data, %s, to_jsonb(COALESCE((data ->> %s)::bigint, 0) + %s)),
                        updated_at = now()
                    WHERE collection = %s AND id = %s
                    """,
                    ([field], field, amount, collection, document_id),
                )
            await conn.commit()


@dataclass
class FirestoreDocumentStore:
    project_id: str | None = None

    def __post_init__(self) -> None:
        self._db: Any = None

    def _client(self) -> Any:
        if self._db is None:
            import firebase_admin
            from firebase_admin import firestore_async

            try:
                app = firebase_admin.get_app()
            except ValueError:
                options = {"projectId": self.project_id} if self.project_id else None
                app = firebase_admin.initialize_app(options=options)
            self._db = firestore_async.client(app)
        return self._db

    async def get_document(self, collection: str, document_id: str) -> Document | None:
        snapshot = await self._client().collection(collection).document(document_id).get()
        if not snapshot.exists:
            return None
        return Document(collection=collection, document_id=snapshot.id, data=snapshot.to_dict() or {})

    async def increment_field(self, collection: str, document_id: str, field: str, amount: int = 1) -> None:
        from google.cloud.firestore_v1 import Increment

        await self._client().collection(collection).document(document_id).update({field: Increment(amount)})


def create_store(database_url: str | None, firestore_project: str | None = None) -> DocumentStore:
    if database_url:
        return PostgresDocumentStore(database_url=database_url)
    if firestore_project:
        return FirestoreDocumentStore(project_id=firestore_project)
    return InMemoryDocumentStore()
