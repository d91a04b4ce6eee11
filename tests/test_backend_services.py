"""
Tests for the backend service wrappers

Tests cover request shapes and error translation for StorageService,
DatabaseService and AccountService against a mocked AppwriteClient.
"""

import json
import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.account_service import AccountService
from services.database_service import DatabaseService
from services.query import Query
from services.storage_service import StorageService, CHUNK_SIZE
from utils.exceptions import (
    AuthError, BackendError, DocumentStoreError, InvalidCredentialsError,
    NotAuthenticatedError, NotFoundError, ObjectStoreError
)


# =============================================================================
# Storage
# =============================================================================

class TestStorageService:
    """Tests for the object store wrapper."""

    @pytest.fixture
    def storage(self, mock_client):
        return StorageService(mock_client, bucket_id='bucket-1')

    def test_upload(self, storage, mock_client):
        mock_client.call.return_value = {'$id': 'file-1', 'bucketId': 'bucket-1', 'name': 'a.jpg',
                                         'sizeOriginal': 3, 'mimeType': 'image/jpeg'}

        blob = storage.upload('a.jpg', b'abc')

        assert blob.id == 'file-1'
        args, kwargs = mock_client.call.call_args
        assert args == ('POST', '/storage/buckets/bucket-1/files')
        assert kwargs['data'] == {'fileId': 'unique()'}
        assert kwargs['files']['file'] == ('a.jpg', b'abc', 'image/jpeg')

    def test_upload_empty_content(self, storage, mock_client):
        with pytest.raises(ObjectStoreError):
            storage.upload('a.jpg', b'')
        mock_client.call.assert_not_called()

    def test_upload_failure(self, storage, mock_client):
        mock_client.call.side_effect = BackendError("quota", code=400)

        with pytest.raises(ObjectStoreError):
            storage.upload('a.jpg', b'abc')

    def test_chunked_upload(self, storage, mock_client):
        """Large files go up in Content-Range chunks sharing one id."""
        mock_client.call.return_value = {'$id': 'file-9', 'bucketId': 'bucket-1'}
        content = b'x' * (CHUNK_SIZE + 10)

        blob = storage.upload('big.png', content)

        assert blob.id == 'file-9'
        assert mock_client.call.call_count == 2
        first, second = mock_client.call.call_args_list
        assert first[1]['headers'] == {'Content-Range': f"bytes 0-{CHUNK_SIZE - 1}/{CHUNK_SIZE + 10}"}
        assert second[1]['headers']['X-Appwrite-ID'] == 'file-9'
        assert second[1]['headers']['Content-Range'] == f"bytes {CHUNK_SIZE}-{CHUNK_SIZE + 9}/{CHUNK_SIZE + 10}"

    def test_preview_url(self, storage, mock_client):
        url = storage.preview_url('file-1')

        mock_client.build_url.assert_called_once_with(
            '/storage/buckets/bucket-1/files/file-1/preview',
            {'width': 2000, 'height': 2000, 'gravity': 'top', 'quality': 100}
        )
        assert 'file-1' in url
        mock_client.call.assert_not_called()

    def test_preview_url_is_deterministic(self, storage):
        assert storage.preview_url('file-1', 100, 100, 'center', 80) == \
            storage.preview_url('file-1', 100, 100, 'center', 80)

    def test_preview_url_without_id(self, storage):
        assert storage.preview_url('') is None

    def test_delete(self, storage, mock_client):
        mock_client.call.return_value = {}

        assert storage.delete('file-1') is True
        mock_client.call.assert_called_once_with('DELETE', '/storage/buckets/bucket-1/files/file-1')

    def test_delete_already_gone(self, storage, mock_client):
        mock_client.call.side_effect = BackendError("not found", code=404)

        assert storage.delete('file-1') is False

    def test_delete_failure(self, storage, mock_client):
        mock_client.call.side_effect = BackendError("server error", code=500)

        with pytest.raises(ObjectStoreError):
            storage.delete('file-1')


# =============================================================================
# Database
# =============================================================================

class TestDatabaseService:
    """Tests for the document store wrapper."""

    @pytest.fixture
    def database(self, mock_client):
        return DatabaseService(mock_client, database_id='db-1')

    def test_create_document(self, database, mock_client):
        mock_client.call.return_value = {'$id': 'doc-1', 'caption': 'hi'}

        document = database.create_document('posts', {'caption': 'hi'})

        assert document['$id'] == 'doc-1'
        mock_client.call.assert_called_once_with(
            'POST', '/databases/db-1/collections/posts/documents',
            json_body={'documentId': 'unique()', 'data': {'caption': 'hi'}}
        )

    def test_list_documents_with_queries(self, database, mock_client):
        mock_client.call.return_value = {'total': 1, 'documents': [{'$id': 'doc-1'}]}
        queries = [Query.order_desc('$createdAt'), Query.limit(20)]

        documents = database.list_documents('posts', queries)

        assert documents == [{'$id': 'doc-1'}]
        assert mock_client.call.call_args[1]['params'] == {'queries[]': queries}

    def test_list_documents_without_queries(self, database, mock_client):
        mock_client.call.return_value = {'total': 0, 'documents': []}

        assert database.list_documents('posts') == []
        assert mock_client.call.call_args[1]['params'] is None

    def test_update_document(self, database, mock_client):
        mock_client.call.return_value = {'$id': 'doc-1', 'likes': ['u1']}

        database.update_document('posts', 'doc-1', {'likes': ['u1']})

        mock_client.call.assert_called_once_with(
            'PATCH', '/databases/db-1/collections/posts/documents/doc-1',
            json_body={'data': {'likes': ['u1']}}
        )

    def test_get_missing_document(self, database, mock_client):
        mock_client.call.side_effect = BackendError("Document not found", code=404)

        with pytest.raises(NotFoundError):
            database.get_document('posts', 'doc-1')

    def test_delete_failure(self, database, mock_client):
        mock_client.call.side_effect = BackendError("unreachable")

        with pytest.raises(DocumentStoreError):
            database.delete_document('saves', 'save-1')


class TestQuery:
    """Tests for the serialized query helpers."""

    def test_equal(self):
        assert json.loads(Query.equal('accountId', 'acct-1')) == {
            'method': 'equal', 'attribute': 'accountId', 'values': ['acct-1']
        }

    def test_order_and_limit(self):
        assert json.loads(Query.order_desc('$createdAt')) == {'method': 'orderDesc', 'attribute': '$createdAt'}
        assert json.loads(Query.limit(20)) == {'method': 'limit', 'values': [20]}


# =============================================================================
# Account
# =============================================================================

class TestAccountService:
    """Tests for the identity wrapper."""

    @pytest.fixture
    def accounts(self, mock_client):
        return AccountService(mock_client)

    def test_create_account(self, accounts, mock_client):
        mock_client.call.return_value = {'$id': 'acct-1', 'email': 'a@example.com', 'name': 'Ada'}

        account = accounts.create_account('a@example.com', 'password123', 'Ada')

        assert account.id == 'acct-1'
        assert mock_client.call.call_args[1]['json_body']['userId'] == 'unique()'

    def test_create_account_conflict(self, accounts, mock_client):
        mock_client.call.side_effect = BackendError("user already exists", code=409)

        with pytest.raises(AuthError):
            accounts.create_account('a@example.com', 'password123', 'Ada')

    def test_invalid_credentials(self, accounts, mock_client):
        mock_client.call.side_effect = BackendError("Invalid credentials", code=401)

        with pytest.raises(InvalidCredentialsError):
            accounts.create_email_session('a@example.com', 'wrong')

    def test_get_account_without_session(self, accounts, mock_client):
        mock_client.call.side_effect = BackendError("missing scope", code=401)

        with pytest.raises(NotAuthenticatedError):
            accounts.get_account()

    def test_get_account_unreachable(self, accounts, mock_client):
        mock_client.call.side_effect = BackendError("connection refused")

        with pytest.raises(AuthError):
            accounts.get_account()

    def test_delete_session(self, accounts, mock_client):
        mock_client.call.return_value = {}

        assert accounts.delete_session(timeout=2) is True
        mock_client.call.assert_called_once_with('DELETE', '/account/sessions/current', timeout=2)
        mock_client.forget_session.assert_called_once()

    def test_delete_session_already_ended(self, accounts, mock_client):
        mock_client.call.side_effect = BackendError("missing scope", code=401)

        assert accounts.delete_session() is False
        mock_client.forget_session.assert_called_once()

    def test_delete_session_unreachable_drops_cookies(self, accounts, mock_client):
        mock_client.call.side_effect = BackendError("timeout")

        with pytest.raises(AuthError):
            accounts.delete_session()
        mock_client.forget_session.assert_called_once()

    def test_initials_avatar_url(self, accounts, mock_client):
        url = accounts.initials_avatar_url('Ada')

        mock_client.build_url.assert_called_once_with('/avatars/initials', {'name': 'Ada'})
        assert 'name=Ada' in url
