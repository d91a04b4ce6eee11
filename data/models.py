"""
Data Models for Snapgram

This module contains data classes and models used throughout the application.
Documents returned by the backend are plain dictionaries; the ``from_document``
constructors turn them into these typed records.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, List, Dict, Any


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None


def _ref_id(value: Any) -> str:
    """Return the id of a relationship field, expanded or not."""
    if isinstance(value, dict):
        return value.get('$id', '')
    return value or ''


@dataclass(frozen=True)
class Account:
    """An account held by the identity service."""
    id: str
    email: str
    name: str

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "Account":
        return cls(id=data['$id'], email=data.get('email', ''), name=data.get('name', ''))


@dataclass(frozen=True)
class Principal:
    """The resolved current user: identity account plus profile document.

    Attributes:
        id: Profile document id, used as creator/liker/saver reference.
        account_id: Identity service account id.
        name: Display name.
        username: Handle.
        email: Account email.
        image_url: Avatar URL.
        bio: Free-text biography.
    """
    id: str
    account_id: str
    name: str
    username: str
    email: str
    image_url: str
    bio: str

    @property
    def is_anonymous(self) -> bool:
        return not self.id

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Principal":
        return cls(
            id=document['$id'],
            account_id=document.get('accountId', ''),
            name=document.get('name') or '',
            username=document.get('username') or '',
            email=document.get('email') or '',
            image_url=document.get('imageUrl') or '',
            bio=document.get('bio') or '',
        )


# Stands in for "no current user" wherever a Principal is expected
ANONYMOUS = Principal(id='', account_id='', name='', username='', email='', image_url='', bio='')


@dataclass(frozen=True)
class BlobRef:
    """An uploaded file in the object store."""
    id: str
    bucket_id: str
    name: str = ''
    size: int = 0
    mime_type: str = ''

    @classmethod
    def from_response(cls, data: Dict[str, Any]) -> "BlobRef":
        return cls(
            id=data['$id'],
            bucket_id=data.get('bucketId', ''),
            name=data.get('name', ''),
            size=data.get('sizeOriginal', 0),
            mime_type=data.get('mimeType', ''),
        )


@dataclass
class NewPost:
    """Input for publishing a post."""
    creator_id: str
    caption: str
    file_name: str
    file_content: bytes
    location: str = ''
    tags: Optional[str] = None     # Comma separated free text


@dataclass
class PostUpdate:
    """Input for editing a post. A file replaces the current image."""
    post_id: str
    caption: str
    image_id: str
    image_url: str
    location: str = ''
    tags: Optional[str] = None
    file_name: Optional[str] = None
    file_content: Optional[bytes] = None

    @property
    def has_new_file(self) -> bool:
        return bool(self.file_content)


@dataclass
class Post:
    """A published media post."""
    id: str
    creator: str
    caption: str
    image_url: str
    image_id: str
    location: str = ''
    tags: List[str] = field(default_factory=list)
    likes: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "Post":
        return cls(
            id=document['$id'],
            creator=_ref_id(document.get('creator')),
            caption=document.get('caption') or '',
            image_url=document.get('imageUrl') or '',
            image_id=document.get('imageId') or '',
            location=document.get('location') or '',
            tags=list(document.get('tags') or []),
            likes=[_ref_id(liker) for liker in document.get('likes') or []],
            created_at=_parse_timestamp(document.get('$createdAt')),
        )


@dataclass(frozen=True)
class SavedPost:
    """Bookmark join record between a user and a post."""
    id: str
    user: str
    post: str

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "SavedPost":
        return cls(
            id=document['$id'],
            user=_ref_id(document.get('user')),
            post=_ref_id(document.get('post')),
        )
