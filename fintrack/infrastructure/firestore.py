"""
Firestore document layer with bounded calls and error translation.
"""
import asyncio
import os
from decimal import Decimal
from enum import Enum
from typing import Any, Awaitable, Dict, List, Optional, Tuple, Type, TypeVar

import structlog
from google.api_core import exceptions as gcp_exceptions
from google.cloud import firestore
from google.cloud.firestore import FieldFilter
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..config import Settings
from ..middleware.monitoring import DATABASE_OPERATIONS
from ..utils.constants import USERS_COLLECTION
from ..utils.exceptions import DatabaseError, NotFoundError, StorageDegradedError

T = TypeVar("T", bound=BaseModel)
R = TypeVar("R")

WhereClause = Tuple[str, str, Any]

# Firestore caps a write batch at 500 operations
BATCH_LIMIT = 500

logger = structlog.get_logger()


class FirestoreService:
    """
    Async Firestore access for one process.

    Created once at startup and closed at shutdown; every call is bounded
    by ``storage_timeout_seconds`` and any transport fault or timeout is
    raised as ``StorageDegradedError``.
    """
    
    def __init__(self, settings: Settings, client: Optional[firestore.AsyncClient] = None):
        self._settings = settings
        self._client = client
        self._timeout = settings.storage_timeout_seconds
    
    @property
    def client(self) -> firestore.AsyncClient:
        """Get or create Firestore client."""
        if self._client is None:
            self._client = self._create_client()
        return self._client
    
    def _create_client(self) -> firestore.AsyncClient:
        """Create and configure Firestore client."""
        if self._settings.use_firestore_emulator:
            os.environ["FIRESTORE_EMULATOR_HOST"] = self._settings.firestore_emulator_host
        elif self._settings.google_credentials_path:
            os.environ["GOOGLE_APPLICATION_CREDENTIALS"] = self._settings.google_credentials_path
        
        try:
            client = firestore.AsyncClient(
                project=self._settings.firestore_project_id,
                database=self._settings.firestore_database
            )
        except Exception as e:
            logger.error("Failed to create Firestore client", error=str(e))
            raise StorageDegradedError(
                message="Failed to connect to database",
                operation="connect",
                details=["Operation: connect"]
            ) from e
        
        logger.info(
            "Connected to Firestore",
            project=self._settings.firestore_project_id,
            emulator=self._settings.use_firestore_emulator
        )
        return client
    
    async def close(self) -> None:
        """Release the underlying client."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Firestore client closed")
    
    async def _run(self, operation: str, collection: str, awaitable: Awaitable[R]) -> R:
        """Await a storage call under the configured timeout."""
        try:
            result = await asyncio.wait_for(awaitable, timeout=self._timeout)
        except asyncio.TimeoutError:
            DATABASE_OPERATIONS.labels(operation, collection, "timeout").inc()
            logger.warning(
                "Storage call timed out",
                operation=operation,
                collection=collection,
                timeout=self._timeout
            )
            raise StorageDegradedError(
                message="Storage call timed out",
                operation=operation
            )
        except (gcp_exceptions.GoogleAPICallError, gcp_exceptions.RetryError) as e:
            DATABASE_OPERATIONS.labels(operation, collection, "error").inc()
            logger.error(
                "Storage call failed",
                operation=operation,
                collection=collection,
                error=str(e)
            )
            raise StorageDegradedError(
                message="Storage unavailable",
                operation=operation,
                details=[f"Operation: {operation}"]
            ) from e
        
        DATABASE_OPERATIONS.labels(operation, collection, "success").inc()
        return result
    
    def _serialize_model(self, model: BaseModel) -> Dict[str, Any]:
        """Serialize Pydantic model to Firestore document."""
        data = model.model_dump(exclude={"id"})
        
        for key, value in data.items():
            if isinstance(value, Decimal):
                # Firestore has no decimal type; keep exact digits as text
                data[key] = str(value)
            elif isinstance(value, Enum):
                data[key] = value.value
        
        return data
    
    def _deserialize_document(self, doc_id: str, doc_data: Dict[str, Any], model_class: Type[T]) -> T:
        """Deserialize Firestore document to Pydantic model."""
        try:
            return model_class(**{**doc_data, "id": doc_id})
        except PydanticValidationError as e:
            logger.error(
                "Failed to deserialize document",
                document_id=doc_id,
                model_class=model_class.__name__,
                error=str(e)
            )
            raise DatabaseError(
                message=f"Failed to deserialize document to {model_class.__name__}",
                code="DESERIALIZATION_ERROR",
                details=[f"Document: {model_class.__name__}"]
            ) from e
    
    def _apply_filters(self, query, where_clauses: Optional[List[WhereClause]]):
        for field, operator, value in where_clauses or []:
            if isinstance(value, Enum):
                value = value.value
            query = query.where(filter=FieldFilter(field, operator, value))
        return query
    
    async def create_document(self, collection: str, document_id: str, data: BaseModel) -> str:
        """Create a new document in the collection."""
        doc_ref = self.client.collection(collection).document(document_id)
        await self._run("create", collection, doc_ref.set(self._serialize_model(data)))
        
        logger.info("Document created", collection=collection, document_id=document_id)
        return document_id
    
    async def get_document(
        self,
        collection: str,
        document_id: str,
        model_class: Type[T]
    ) -> Optional[T]:
        """Get a document by ID, or None when it does not exist."""
        doc_ref = self.client.collection(collection).document(document_id)
        snapshot = await self._run("get", collection, doc_ref.get())
        
        if not snapshot.exists:
            return None
        
        return self._deserialize_document(snapshot.id, snapshot.to_dict(), model_class)
    
    async def update_document(self, collection: str, document_id: str, data: BaseModel) -> None:
        """Replace an existing document. Last writer wins."""
        doc_ref = self.client.collection(collection).document(document_id)
        snapshot = await self._run("get", collection, doc_ref.get())
        
        if not snapshot.exists:
            raise NotFoundError(resource_type=collection.rstrip("s"), resource_id=document_id)
        
        await self._run("update", collection, doc_ref.set(self._serialize_model(data)))
        logger.info("Document updated", collection=collection, document_id=document_id)
    
    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document."""
        doc_ref = self.client.collection(collection).document(document_id)
        snapshot = await self._run("get", collection, doc_ref.get())
        
        if not snapshot.exists:
            raise NotFoundError(resource_type=collection.rstrip("s"), resource_id=document_id)
        
        await self._run("delete", collection, doc_ref.delete())
        logger.info("Document deleted", collection=collection, document_id=document_id)
    
    async def query_documents(
        self,
        collection: str,
        model_class: Type[T],
        where_clauses: Optional[List[WhereClause]] = None,
        limit: Optional[int] = None
    ) -> List[T]:
        """Query documents with equality/range filters."""
        query = self._apply_filters(self.client.collection(collection), where_clauses)
        if limit:
            query = query.limit(limit)
        
        async def collect():
            return [snapshot async for snapshot in query.stream()]
        
        snapshots = await self._run("query", collection, collect())
        results = [
            self._deserialize_document(snapshot.id, snapshot.to_dict(), model_class)
            for snapshot in snapshots
        ]
        
        logger.debug(
            "Documents queried",
            collection=collection,
            count=len(results),
            filters=[(field, operator) for field, operator, _ in where_clauses or []]
        )
        return results
    
    async def count_documents(
        self,
        collection: str,
        where_clauses: Optional[List[WhereClause]] = None
    ) -> int:
        """Count documents matching the query."""
        query = self._apply_filters(self.client.collection(collection), where_clauses)
        
        async def count():
            return len([snapshot async for snapshot in query.stream()])
        
        return await self._run("count", collection, count())
    
    async def delete_where(
        self,
        collection: str,
        where_clauses: List[WhereClause]
    ) -> int:
        """Delete every document matching the filters in batched writes."""
        query = self._apply_filters(self.client.collection(collection), where_clauses)
        
        async def collect():
            return [snapshot.reference async for snapshot in query.stream()]
        
        references = await self._run("query", collection, collect())
        
        for start in range(0, len(references), BATCH_LIMIT):
            batch = self.client.batch()
            for reference in references[start:start + BATCH_LIMIT]:
                batch.delete(reference)
            await self._run("batch_delete", collection, batch.commit())
        
        if references:
            logger.info("Documents deleted", collection=collection, count=len(references))
        return len(references)
    
    async def ping(self) -> None:
        """Round-trip a trivial read; raises StorageDegradedError when unreachable."""
        query = self.client.collection(USERS_COLLECTION).limit(1)
        
        async def probe():
            return [snapshot async for snapshot in query.stream()]
        
        await self._run("ping", USERS_COLLECTION, probe())
