"""
Data Layer Protocol Definitions

This module defines typing.Protocol interfaces for local data operations.
These protocols enable dependency injection, making services testable
without touching the real filesystem.

Protocols defined:
- KeyValueStore: Interface for the persisted session marker store
"""

from typing import Protocol, Optional


class KeyValueStore(Protocol):
    """Protocol defining a small persisted string key/value store.

    Semantics follow browser localStorage: missing keys read as None,
    values are always strings.
    """

    def get_item(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key is absent."""
        ...

    def set_item(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        ...

    def remove_item(self, key: str) -> None:
        """Remove a key. Removing an absent key is a no-op."""
        ...

    def clear(self) -> None:
        """Remove every key."""
        ...
