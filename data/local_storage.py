"""
Local Storage Module for Snapgram

This module persists small string values (session markers) in a JSON file,
giving the client the same get/set/remove/clear surface a browser's
localStorage offers.
"""

import json
import os
from typing import Optional, Dict

from config import settings
from utils.logger import get_logger

logger = get_logger(__name__)


class LocalStorage:
    """JSON-file backed key/value store."""

    def __init__(self, path: Optional[str] = None):
        """Initialize the store. The file is created on first write."""
        self.path = path or settings.SESSION_STORE_FILE

    def _load(self) -> Dict[str, str]:
        """Read all items. A missing or unreadable file reads as empty."""
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable local storage file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed local storage file {self.path}")
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, items: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)

        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(items, f)
        os.replace(tmp_path, self.path)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def clear(self) -> None:
        self._save({})
        logger.debug(f"Cleared local storage at {self.path}")
