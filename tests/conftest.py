"""
Shared Test Fixtures for Snapgram

This module provides common fixtures used across all test modules.
Fixtures include in-memory fakes of the three backend collaborators
(object store, document store, identity service), an in-memory marker
store, HTTP response factories, and data factories for test documents.
"""

import pytest
from unittest.mock import MagicMock
from typing import Optional, Dict, Any, List
import itertools
import json
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from data.models import Account, BlobRef
from utils.exceptions import (
    NotFoundError,
    NotAuthenticatedError, InvalidCredentialsError, AuthError
)


# =============================================================================
# Backend Fakes
# =============================================================================

class FakeObjectStore:
    """In-memory object store that records every create and delete."""

    def __init__(self):
        self.files: Dict[str, bytes] = {}
        self.events: List[tuple] = []
        self._ids = itertools.count(1)
        self.fail_upload: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None
        self.preview_result = 'derive'

    def upload(self, file_name: str, content: bytes) -> BlobRef:
        if self.fail_upload:
            raise self.fail_upload
        file_id = f"file-{next(self._ids)}"
        self.files[file_id] = content
        self.events.append(('create', file_id))
        return BlobRef(id=file_id, bucket_id='bucket', name=file_name, size=len(content))

    def preview_url(self, file_id: str, width: int = 2000, height: int = 2000,
                    gravity: str = 'top', quality: int = 100) -> Optional[str]:
        if self.preview_result != 'derive':
            return self.preview_result
        return f"https://files.test/{file_id}/preview?width={width}&height={height}&gravity={gravity}&quality={quality}"

    def delete(self, file_id: str) -> bool:
        self.events.append(('delete', file_id))
        if self.fail_delete:
            raise self.fail_delete
        return self.files.pop(file_id, None) is not None


class FakeDocumentStore:
    """In-memory document store supporting the queries the services use."""

    def __init__(self):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._ids = itertools.count(1)
        self._clock = itertools.count(1)
        self.fail_create: Optional[Exception] = None
        self.fail_update: Optional[Exception] = None
        self.fail_list: Optional[Exception] = None
        self.fail_delete: Optional[Exception] = None

    def _collection(self, collection_id: str) -> Dict[str, Dict[str, Any]]:
        return self.collections.setdefault(collection_id, {})

    def create_document(self, collection_id: str, data: Dict[str, Any],
                        document_id: str = 'unique()') -> Dict[str, Any]:
        if self.fail_create:
            raise self.fail_create
        if document_id == 'unique()':
            document_id = f"doc-{next(self._ids)}"
        document = dict(data)
        document['$id'] = document_id
        document['$collectionId'] = collection_id
        document['$createdAt'] = f"2024-01-15T10:00:{next(self._clock):02d}.000+00:00"
        self._collection(collection_id)[document_id] = document
        return dict(document)

    def get_document(self, collection_id: str, document_id: str) -> Dict[str, Any]:
        try:
            return dict(self._collection(collection_id)[document_id])
        except KeyError:
            raise NotFoundError(f"Document {document_id} not found")

    def list_documents(self, collection_id: str,
                       queries: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        if self.fail_list:
            raise self.fail_list
        documents = list(self._collection(collection_id).values())
        limit = None
        for raw in queries or []:
            query = json.loads(raw)
            method = query['method']
            if method == 'equal':
                documents = [d for d in documents if d.get(query['attribute']) in query['values']]
            elif method == 'orderDesc':
                documents.sort(key=lambda d: d.get(query['attribute']), reverse=True)
            elif method == 'orderAsc':
                documents.sort(key=lambda d: d.get(query['attribute']))
            elif method == 'limit':
                limit = query['values'][0]
        if limit is not None:
            documents = documents[:limit]
        return [dict(d) for d in documents]

    def update_document(self, collection_id: str, document_id: str,
                        data: Dict[str, Any]) -> Dict[str, Any]:
        if self.fail_update:
            raise self.fail_update
        collection = self._collection(collection_id)
        if document_id not in collection:
            raise NotFoundError(f"Document {document_id} not found")
        collection[document_id].update(data)
        return dict(collection[document_id])

    def delete_document(self, collection_id: str, document_id: str) -> None:
        if self.fail_delete:
            raise self.fail_delete
        collection = self._collection(collection_id)
        if document_id not in collection:
            raise NotFoundError(f"Document {document_id} not found")
        del collection[document_id]


class FakeIdentityService:
    """In-memory identity service with a single current session."""

    def __init__(self):
        self.accounts: Dict[str, Dict[str, str]] = {}
        self.current_account_id: Optional[str] = None
        self._ids = itertools.count(1)
        self.fail_get_account: Optional[Exception] = None
        self.fail_delete_session: Optional[Exception] = None
        self.delete_session_calls: List[Dict[str, Any]] = []

    def create_account(self, email: str, password: str, name: str) -> Account:
        if any(a['email'] == email for a in self.accounts.values()):
            raise AuthError(f"Account {email} already exists")
        account_id = f"acct-{next(self._ids)}"
        self.accounts[account_id] = {'email': email, 'password': password, 'name': name}
        return Account(id=account_id, email=email, name=name)

    def create_email_session(self, email: str, password: str) -> Dict[str, Any]:
        for account_id, account in self.accounts.items():
            if account['email'] == email and account['password'] == password:
                self.current_account_id = account_id
                return {'$id': f"session-{account_id}", 'userId': account_id}
        raise InvalidCredentialsError(f"Sign in rejected for {email}")

    def get_account(self) -> Account:
        if self.fail_get_account:
            raise self.fail_get_account
        if self.current_account_id is None:
            raise NotAuthenticatedError("No active session")
        account = self.accounts[self.current_account_id]
        return Account(id=self.current_account_id, email=account['email'], name=account['name'])

    def delete_session(self, session_id: str = 'current', timeout: Optional[float] = None) -> bool:
        self.delete_session_calls.append({'session_id': session_id, 'timeout': timeout})
        if self.fail_delete_session:
            raise self.fail_delete_session
        ended = self.current_account_id is not None
        self.current_account_id = None
        return ended

    def initials_avatar_url(self, name: str) -> str:
        return f"https://avatars.test/initials?name={name}"


class InMemoryStorage:
    """Dictionary-backed KeyValueStore."""

    def __init__(self, items: Optional[Dict[str, str]] = None):
        self.items = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    def clear(self) -> None:
        self.items.clear()


@pytest.fixture
def object_store():
    """Fresh in-memory object store."""
    return FakeObjectStore()


@pytest.fixture
def document_store():
    """Fresh in-memory document store."""
    return FakeDocumentStore()


@pytest.fixture
def identity():
    """Fresh in-memory identity service."""
    return FakeIdentityService()


@pytest.fixture
def local_storage():
    """Empty in-memory marker store."""
    return InMemoryStorage()


# =============================================================================
# HTTP Response Fixtures
# =============================================================================

@pytest.fixture
def mock_http_response():
    """
    Factory fixture for creating mock HTTP responses.

    Usage:
        def test_http_request(mock_http_response):
            response = mock_http_response(
                status_code=200,
                json_data={'$id': 'abc'},
            )

    Returns:
        callable: A factory function for creating mock responses.
    """
    def _create_response(
        status_code: int = 200,
        json_data: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        cookies: Optional[Dict[str, str]] = None
    ) -> MagicMock:
        mock_response = MagicMock()
        mock_response.status_code = status_code
        mock_response.ok = 200 <= status_code < 300
        mock_response.headers = headers or {'Content-Type': 'application/json'}

        cookie_objects = []
        for name, value in (cookies or {}).items():
            cookie = MagicMock()
            cookie.name = name
            cookie.value = value
            cookie_objects.append(cookie)
        mock_response.cookies = cookie_objects

        if json_data is not None:
            mock_response.content = json.dumps(json_data).encode('utf-8')
            mock_response.json.return_value = json_data
        else:
            mock_response.content = b''
            mock_response.json.side_effect = ValueError("No JSON data")

        return mock_response

    return _create_response


@pytest.fixture
def mock_http():
    """A mock requests.Session with a real headers dict and cookie jar mock."""
    http = MagicMock()
    http.headers = {}
    return http


@pytest.fixture
def mock_client():
    """A mock AppwriteClient for service wrapper tests."""
    client = MagicMock()
    client.build_url.side_effect = lambda path, params=None: (
        f"https://appwrite.test/v1{path}?" + "&".join(f"{k}={v}" for k, v in (params or {}).items())
    )
    return client


# =============================================================================
# Data Model Factories
# =============================================================================

@pytest.fixture
def profile_document_factory():
    """
    Factory fixture for creating users-collection profile documents.

    Returns:
        callable: A factory function for creating profile dictionaries.
    """
    def _create_profile(
        doc_id: str = 'user-1',
        account_id: str = 'acct-1',
        name: str = 'Test User',
        username: str = 'testuser',
        email: str = 'test@example.com',
        image_url: str = 'https://avatars.test/initials?name=Test+User',
        bio: Optional[str] = None
    ) -> Dict[str, Any]:
        return {
            '$id': doc_id,
            'accountId': account_id,
            'name': name,
            'username': username,
            'email': email,
            'imageUrl': image_url,
            'bio': bio,
        }

    return _create_profile
