"""
Database Service Module

This module handles the document store (Appwrite Databases). It provides
create, read, list, update and delete operations on documents in named
collections. Every operation touches a single document.
"""

from typing import Optional, List, Dict, Any

from config import settings
from services.appwrite_client import AppwriteClient, UNIQUE_ID
from utils.exceptions import BackendError, DocumentStoreError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class DatabaseService:
    """Service for documents in one database."""

    def __init__(self, client: AppwriteClient, database_id: Optional[str] = None):
        """Initialize the database service."""
        self.client = client
        self.database_id = database_id or settings.APPWRITE_DATABASE_ID

    def _documents_path(self, collection_id: str, document_id: str = '') -> str:
        path = f"/databases/{self.database_id}/collections/{collection_id}/documents"
        return f"{path}/{document_id}" if document_id else path

    def _call(self, action: str, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            return self.client.call(method, path, **kwargs)
        except BackendError as e:
            if e.code == 404:
                raise NotFoundError(f"{action}: {e}") from e
            logger.error(f"Error during {action}: {e}")
            raise DocumentStoreError(f"{action} failed: {e}") from e

    def create_document(self, collection_id: str, data: Dict[str, Any],
                        document_id: str = UNIQUE_ID) -> Dict[str, Any]:
        """
        Create a document.

        Args:
            collection_id: Target collection.
            data: Document fields.
            document_id: Id to use, or "unique()" for a generated one.

        Returns:
            Dict[str, Any]: The created document.
        """
        document = self._call(
            f"create document in {collection_id}", 'POST', self._documents_path(collection_id),
            json_body={'documentId': document_id, 'data': data}
        )
        logger.info(f"Created document {document.get('$id')} in {collection_id}")
        return document

    def get_document(self, collection_id: str, document_id: str) -> Dict[str, Any]:
        return self._call(
            f"get document {document_id}", 'GET', self._documents_path(collection_id, document_id)
        )

    def list_documents(self, collection_id: str,
                       queries: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        List documents in a collection.

        Args:
            collection_id: Collection to list.
            queries: Serialized queries from services.query.Query.

        Returns:
            List[Dict[str, Any]]: Matching documents in store order.
        """
        params = {'queries[]': queries} if queries else None
        response = self._call(
            f"list documents in {collection_id}", 'GET', self._documents_path(collection_id),
            params=params
        )
        documents = response.get('documents', [])
        logger.debug(f"Listed {len(documents)} documents from {collection_id}")
        return documents

    def update_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the given fields of a document and return the result."""
        document = self._call(
            f"update document {document_id}", 'PATCH', self._documents_path(collection_id, document_id),
            json_body={'data': data}
        )
        logger.info(f"Updated document {document_id} in {collection_id}")
        return document

    def delete_document(self, collection_id: str, document_id: str) -> None:
        self._call(
            f"delete document {document_id}", 'DELETE', self._documents_path(collection_id, document_id)
        )
        logger.info(f"Deleted document {document_id} from {collection_id}")
