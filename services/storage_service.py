"""
Storage Service Module

This module handles the object store (Appwrite Storage). It provides
functionality for uploading image files, deriving preview URLs for them,
and deleting them.
"""

import mimetypes
from typing import Optional

from config import settings
from data.models import BlobRef
from services.appwrite_client import AppwriteClient, UNIQUE_ID
from utils.exceptions import BackendError, ObjectStoreError
from utils.logger import get_logger

logger = get_logger(__name__)

# Files above this size must be sent in Content-Range chunks
CHUNK_SIZE = 5 * 1024 * 1024


class StorageService:
    """Service for file uploads to a storage bucket."""

    def __init__(self, client: AppwriteClient, bucket_id: Optional[str] = None):
        """Initialize the storage service for a bucket."""
        self.client = client
        self.bucket_id = bucket_id or settings.APPWRITE_STORAGE_ID

    def _files_path(self, file_id: str = '') -> str:
        path = f"/storage/buckets/{self.bucket_id}/files"
        return f"{path}/{file_id}" if file_id else path

    def upload(self, file_name: str, content: bytes) -> BlobRef:
        """
        Upload file content to the bucket.

        Args:
            file_name: Original file name, used for the stored name and MIME type.
            content: Raw file bytes.

        Returns:
            BlobRef: Reference to the stored file.

        Raises:
            ObjectStoreError: If the upload fails.
        """
        if not content:
            raise ObjectStoreError(f"Refusing to upload empty file {file_name}")

        mime_type = mimetypes.guess_type(file_name)[0] or 'application/octet-stream'
        total = len(content)

        try:
            if total <= CHUNK_SIZE:
                response = self.client.call(
                    'POST', self._files_path(),
                    data={'fileId': UNIQUE_ID},
                    files={'file': (file_name, content, mime_type)}
                )
            else:
                response = self._upload_chunked(file_name, content, mime_type)
        except BackendError as e:
            logger.error(f"Failed to upload {file_name}: {e}")
            raise ObjectStoreError(f"Upload of {file_name} failed: {e}") from e

        blob = BlobRef.from_response(response)
        logger.info(f"Uploaded {file_name} ({total} bytes) as file {blob.id}")
        return blob

    def _upload_chunked(self, file_name: str, content: bytes, mime_type: str) -> dict:
        total = len(content)
        upload_id = None
        response = {}

        for start in range(0, total, CHUNK_SIZE):
            end = min(start + CHUNK_SIZE, total) - 1
            headers = {'Content-Range': f"bytes {start}-{end}/{total}"}
            if upload_id:
                headers['X-Appwrite-ID'] = upload_id

            response = self.client.call(
                'POST', self._files_path(),
                data={'fileId': upload_id or UNIQUE_ID},
                files={'file': (file_name, content[start:end + 1], mime_type)},
                headers=headers
            )
            upload_id = response.get('$id', upload_id)
            logger.debug(f"Uploaded bytes {start}-{end}/{total} of {file_name}")

        return response

    def preview_url(self, file_id: str, width: int = settings.PREVIEW_WIDTH,
                    height: int = settings.PREVIEW_HEIGHT, gravity: str = settings.PREVIEW_GRAVITY,
                    quality: int = settings.PREVIEW_QUALITY) -> Optional[str]:
        """
        Derive the preview URL of a file. No request is made.

        Args:
            file_id: The stored file id.
            width: Crop width in pixels.
            height: Crop height in pixels.
            gravity: Crop anchor ("center", "top", ...).
            quality: Image quality 0-100.

        Returns:
            Optional[str]: The URL, or None if no file id was given.
        """
        if not file_id:
            logger.warning("Cannot derive a preview URL without a file id")
            return None

        return self.client.build_url(
            f"{self._files_path(file_id)}/preview",
            {'width': width, 'height': height, 'gravity': gravity, 'quality': quality}
        )

    def delete(self, file_id: str) -> bool:
        """
        Delete a file from the bucket.

        Args:
            file_id: The stored file id.

        Returns:
            bool: True if deleted, False if the file did not exist.

        Raises:
            ObjectStoreError: If the delete fails for another reason.
        """
        try:
            self.client.call('DELETE', self._files_path(file_id))
        except BackendError as e:
            if e.code == 404:
                logger.info(f"File {file_id} already deleted")
                return False
            logger.error(f"Failed to delete file {file_id}: {e}")
            raise ObjectStoreError(f"Delete of file {file_id} failed: {e}") from e

        logger.info(f"Deleted file {file_id}")
        return True
