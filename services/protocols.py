"""
Service Protocol Definitions

This module defines typing.Protocol interfaces for the backend collaborators
used by the post, engagement and session services. These protocols enable
loose coupling, dependency injection, and easier testing with in-memory fakes.

Protocols defined:
- ObjectStoreProtocol: Interface for binary file storage
- DocumentStoreProtocol: Interface for document collections
- IdentityServiceProtocol: Interface for accounts and sessions
"""

from typing import Protocol, Optional, List, Dict, Any

from data.models import Account, BlobRef


class ObjectStoreProtocol(Protocol):
    """Protocol defining the interface for binary file storage.

    Implementations should provide methods for:
    - Uploading file content
    - Deriving a display URL for an uploaded file
    - Deleting files
    """

    def upload(self, file_name: str, content: bytes) -> BlobRef:
        """Upload file content.

        Args:
            file_name: Original file name.
            content: Raw file bytes.

        Returns:
            BlobRef for the stored file.

        Raises:
            ObjectStoreError: If the upload fails. No partial file is assumed.
        """
        ...

    def preview_url(self, file_id: str, width: int = 2000, height: int = 2000,
                    gravity: str = "top", quality: int = 100) -> Optional[str]:
        """Derive a display URL for a file without mutating storage.

        Returns:
            The URL, or None/empty when no URL can be derived.
        """
        ...

    def delete(self, file_id: str) -> bool:
        """Delete a file.

        Returns:
            True if the file was deleted, False if it was already gone.

        Raises:
            ObjectStoreError: For failures other than "not found".
        """
        ...


class DocumentStoreProtocol(Protocol):
    """Protocol defining the interface for single-document operations.

    No multi-document transactions are available.
    """

    def create_document(self, collection_id: str, data: Dict[str, Any],
                        document_id: str = "unique()") -> Dict[str, Any]:
        """Create a document and return it."""
        ...

    def get_document(self, collection_id: str, document_id: str) -> Dict[str, Any]:
        """Return a document. Raises NotFoundError if absent."""
        ...

    def list_documents(self, collection_id: str,
                       queries: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Return documents matching serialized queries, in store order."""
        ...

    def update_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        """Replace the given fields of a document and return it."""
        ...

    def delete_document(self, collection_id: str, document_id: str) -> None:
        """Delete a document."""
        ...


class IdentityServiceProtocol(Protocol):
    """Protocol defining the interface for accounts and sessions."""

    def create_account(self, email: str, password: str, name: str) -> Account:
        """Create an identity account. Raises AuthError on rejection."""
        ...

    def create_email_session(self, email: str, password: str) -> Dict[str, Any]:
        """Start a session. Raises InvalidCredentialsError on bad credentials."""
        ...

    def get_account(self) -> Account:
        """Return the current account. Raises NotAuthenticatedError without a session."""
        ...

    def delete_session(self, session_id: str = "current", timeout: Optional[float] = None) -> bool:
        """End a session.

        Returns:
            True if a session was ended, False if there was none to end.
        """
        ...

    def initials_avatar_url(self, name: str) -> str:
        """Derive an initials avatar URL for a display name."""
        ...
