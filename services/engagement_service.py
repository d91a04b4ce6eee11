"""
Engagement Service Module

This module handles likes and saved posts. Likes are stored as the full list
of liker ids on the post document and are written wholesale; the last writer
wins. Saves are separate join documents and are never deduplicated.
"""

from typing import Optional, List

from config import settings
from data.models import Post, SavedPost
from services.protocols import DocumentStoreProtocol
from utils.logger import get_logger

logger = get_logger(__name__)


def toggled_likes(likes: List[str], user_id: str) -> List[str]:
    """
    Return the liker list with ``user_id`` added, or removed if present.

    Args:
        likes: Current liker ids.
        user_id: Acting user.

    Returns:
        List[str]: New liker ids; the input list is not modified.
    """
    if user_id in likes:
        return [liker for liker in likes if liker != user_id]
    return likes + [user_id]


class EngagementService:
    """Service for likes and saved posts."""

    def __init__(self, database: DocumentStoreProtocol,
                 posts_collection_id: Optional[str] = None,
                 saves_collection_id: Optional[str] = None):
        """Initialize the engagement service."""
        self.database = database
        self.posts_collection_id = posts_collection_id or settings.APPWRITE_POSTS_COLLECTION_ID
        self.saves_collection_id = saves_collection_id or settings.APPWRITE_SAVES_COLLECTION_ID

    def toggle_like(self, post_id: str, likes: List[str]) -> Post:
        """
        Replace the liker list of a post.

        The caller computes the complete new list (see toggled_likes).
        No version check is made, concurrent writers overwrite each other.

        Args:
            post_id: Post document id.
            likes: Complete new list of liker ids.

        Returns:
            Post: The updated post.

        Raises:
            StoreError: If the update failed.
        """
        document = self.database.update_document(
            self.posts_collection_id, post_id, {'likes': list(likes)}
        )
        logger.info(f"Post {post_id} now has {len(likes)} likes")
        return Post.from_document(document)

    def save_post(self, post_id: str, user_id: str) -> SavedPost:
        """
        Bookmark a post for a user. Saving twice creates two records.

        Raises:
            StoreError: If the record could not be created.
        """
        document = self.database.create_document(
            self.saves_collection_id, {'user': user_id, 'post': post_id}
        )
        saved = SavedPost.from_document(document)
        logger.info(f"User {user_id} saved post {post_id} as {saved.id}")
        return saved

    def unsave_post(self, saved_record_id: str) -> None:
        """
        Remove a bookmark by its own record id. The post itself is untouched.

        Raises:
            StoreError: If the record could not be deleted.
        """
        self.database.delete_document(self.saves_collection_id, saved_record_id)
        logger.info(f"Removed saved record {saved_record_id}")
