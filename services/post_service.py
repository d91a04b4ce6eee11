"""
Post Service Module

This module publishes, edits, lists and deletes posts. A post spans two
independent backends: the image lives in the object store and the post
document in the document store. There is no transaction across them, so
every path that uploads an image deletes it again if a later step fails.

Publishing runs these steps in order:

    1. upload the image            (failure: nothing to undo)
    2. derive its display URL      (failure: delete the image)
    3. create the post document    (failure: delete the image, unless
                                    reading the post back shows it was
                                    stored after all)

A failed undo is logged and never replaces the error that caused it.
"""

import uuid
from typing import Optional, List, Tuple

from config import settings
from data.models import BlobRef, NewPost, Post, PostUpdate
from services.protocols import DocumentStoreProtocol, ObjectStoreProtocol
from services.query import Query
from utils.exceptions import (
    BackendError, NotFoundError, ObjectStoreError, PostCreationError, PostUpdateError,
    SnapgramError
)
from utils.helpers import normalize_tags
from utils.logger import get_logger

logger = get_logger(__name__)


class PostService:
    """Service for post documents and their images."""

    def __init__(self, database: DocumentStoreProtocol, storage: ObjectStoreProtocol,
                 posts_collection_id: Optional[str] = None):
        """
        Initialize the post service.

        Args:
            database: Document store client.
            storage: Object store client.
            posts_collection_id: Posts collection, defaults to settings.
        """
        self.database = database
        self.storage = storage
        self.posts_collection_id = posts_collection_id or settings.APPWRITE_POSTS_COLLECTION_ID

    # -------------------------------------------------------------------------
    # Image handling
    # -------------------------------------------------------------------------

    def _store_image(self, file_name: str, content: bytes) -> Tuple[BlobRef, str]:
        """
        Upload an image and derive its display URL.

        Returns:
            Tuple[BlobRef, str]: The stored file and its URL.

        Raises:
            ObjectStoreError: If the upload fails, or if no URL could be
                derived (the uploaded file is deleted first).
        """
        blob = self.storage.upload(file_name, content)

        try:
            image_url = self.storage.preview_url(blob.id)
        except Exception as e:
            self._discard_blob(blob.id)
            raise ObjectStoreError(f"Could not derive a URL for file {blob.id}: {e}") from e

        if not image_url:
            self._discard_blob(blob.id)
            raise ObjectStoreError(f"No URL could be derived for file {blob.id}")

        return blob, image_url

    def _discard_blob(self, file_id: str) -> None:
        """Delete a file that no post references. Errors are logged only."""
        try:
            self.storage.delete(file_id)
            logger.info(f"Removed unreferenced file {file_id}")
        except Exception as e:
            logger.error(f"Failed to remove unreferenced file {file_id}: {e}", exc_info=True)

    def _recover_failed_write(self, post_id: str, image_id: str, error: Exception) -> Optional[dict]:
        """
        Decide what to do with an image after the post write reported failure.

        A write can be stored by the backend and still fail on the way back,
        for example on a read timeout. Unless the backend rejected the write
        outright, the post is read back first.

        Returns:
            Optional[dict]: The stored post if it already references the
                image, otherwise None. The image is deleted only when the post
                is known not to reference it.
        """
        cause = error.__cause__
        rejected = (isinstance(cause, BackendError) and cause.code is not None
                    and 400 <= cause.code < 500 and cause.code != 408)

        if not rejected:
            try:
                document = self.database.get_document(self.posts_collection_id, post_id)
            except NotFoundError:
                document = None
            except Exception as e:
                logger.error(f"Could not check whether post {post_id} was saved, keeping file {image_id}: {e}")
                return None

            if document and document.get('imageId') == image_id:
                logger.warning(f"Post {post_id} was saved despite the error")
                return document

        self._discard_blob(image_id)
        return None

    # -------------------------------------------------------------------------
    # Publishing
    # -------------------------------------------------------------------------

    def create_post(self, new_post: NewPost) -> Post:
        """
        Publish a post.

        Args:
            new_post: Caption, location, tags and the image to upload.

        Returns:
            Post: The persisted post.

        Raises:
            PostCreationError: If any step failed. The uploaded image is deleted
                unless the post store could not be checked; the triggering
                error is chained as __cause__.
        """
        try:
            blob, image_url = self._store_image(new_post.file_name, new_post.file_content)
        except SnapgramError as e:
            logger.error(f"Post creation failed while storing image: {e}")
            raise PostCreationError("Post could not be created") from e

        post_id = uuid.uuid4().hex
        try:
            document = self.database.create_document(self.posts_collection_id, {
                'creator': new_post.creator_id,
                'caption': new_post.caption,
                'imageUrl': image_url,
                'imageId': blob.id,
                'location': new_post.location,
                'tags': normalize_tags(new_post.tags),
            }, document_id=post_id)
        except Exception as e:
            logger.error(f"Post creation failed while saving document {post_id}: {e}")
            document = self._recover_failed_write(post_id, blob.id, e)
            if document is None:
                raise PostCreationError("Post could not be created") from e

        post = Post.from_document(document)
        logger.info(f"Published post {post.id} with image {blob.id}")
        return post

    def update_post(self, update: PostUpdate) -> Post:
        """
        Edit a post, optionally replacing its image.

        A replacement image is uploaded first; the previous image is deleted
        only after the document points at the new one.

        Raises:
            PostUpdateError: If the edit failed. A newly uploaded image is
                removed and the post keeps its previous image.
        """
        image_id, image_url = update.image_id, update.image_url
        new_blob = None

        if update.has_new_file:
            try:
                new_blob, image_url = self._store_image(update.file_name or 'upload', update.file_content)
            except SnapgramError as e:
                logger.error(f"Post update failed while storing image: {e}")
                raise PostUpdateError(f"Post {update.post_id} could not be updated") from e
            image_id = new_blob.id

        try:
            document = self.database.update_document(self.posts_collection_id, update.post_id, {
                'caption': update.caption,
                'imageUrl': image_url,
                'imageId': image_id,
                'location': update.location,
                'tags': normalize_tags(update.tags),
            })
        except Exception as e:
            logger.error(f"Post update failed while saving document {update.post_id}: {e}")
            document = self._recover_failed_write(update.post_id, new_blob.id, e) if new_blob else None
            if document is None:
                raise PostUpdateError(f"Post {update.post_id} could not be updated") from e

        if new_blob and update.image_id:
            self._discard_blob(update.image_id)

        return Post.from_document(document)

    def delete_post(self, post_id: str, image_id: Optional[str] = None) -> None:
        """
        Delete a post and then its image.

        Args:
            post_id: Post document id.
            image_id: Image file id; looked up from the post when omitted.

        Raises:
            StoreError: If the post document could not be deleted.
        """
        if image_id is None:
            image_id = self.get_post_by_id(post_id).image_id

        self.database.delete_document(self.posts_collection_id, post_id)
        logger.info(f"Deleted post {post_id}")

        if image_id:
            self._discard_blob(image_id)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def get_recent_posts(self, limit: int = settings.RECENT_POSTS_LIMIT) -> List[Post]:
        """
        Fetch the most recent posts, newest first.

        Args:
            limit: Maximum number of posts.

        Returns:
            List[Post]: Recent posts.
        """
        documents = self.database.list_documents(
            self.posts_collection_id,
            [Query.order_desc('$createdAt'), Query.limit(limit)]
        )
        return [Post.from_document(document) for document in documents]

    def get_post_by_id(self, post_id: str) -> Post:
        return Post.from_document(self.database.get_document(self.posts_collection_id, post_id))
