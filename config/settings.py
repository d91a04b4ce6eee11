"""
Configuration Settings for Snapgram

This module centralizes all configuration settings for the Snapgram client,
including environment variables, backend identifiers, and application constants.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Determine the application root directory
APP_ROOT = Path(__file__).resolve().parent.parent

# Load environment variables from .env file
load_dotenv(dotenv_path=os.path.join(APP_ROOT, '.env'))

# =============================================================================
# Backend Settings
# =============================================================================

APPWRITE_ENDPOINT = os.getenv("APPWRITE_ENDPOINT", "https://cloud.appwrite.io/v1")
APPWRITE_PROJECT_ID = os.getenv("APPWRITE_PROJECT_ID", "")
APPWRITE_DATABASE_ID = os.getenv("APPWRITE_DATABASE_ID", "")
APPWRITE_STORAGE_ID = os.getenv("APPWRITE_STORAGE_ID", "")
APPWRITE_USERS_COLLECTION_ID = os.getenv("APPWRITE_USERS_COLLECTION_ID", "")
APPWRITE_POSTS_COLLECTION_ID = os.getenv("APPWRITE_POSTS_COLLECTION_ID", "")
APPWRITE_SAVES_COLLECTION_ID = os.getenv("APPWRITE_SAVES_COLLECTION_ID", "")

# Seconds before an HTTP request to the backend is abandoned
REQUEST_TIMEOUT = int(os.getenv("REQUEST_TIMEOUT", "15"))

# Seconds the teardown hook may spend ending the remote session
TEARDOWN_TIMEOUT = float(os.getenv("TEARDOWN_TIMEOUT", "2"))

# =============================================================================
# Session Marker Settings
# =============================================================================

SESSION_STORE_FILE = os.path.expanduser(os.getenv(
    "SESSION_STORE_FILE",
    os.path.join(Path.home(), ".snapgram", "local_storage.json")
))
SESSION_MARKER_KEY = "cookieFallback"    # Persisted session cookies (JSON object)
EMPTY_SESSION_MARKER = "[]"              # Marker value meaning "no session"
PAGE_CLOSED_KEY = "pageclosed"           # Written by the teardown hook

# =============================================================================
# Content Settings
# =============================================================================

RECENT_POSTS_LIMIT = 20                  # Default size of the recent-activity feed

# Display URL derivation for uploaded images
PREVIEW_WIDTH = 2000
PREVIEW_HEIGHT = 2000
PREVIEW_GRAVITY = "top"
PREVIEW_QUALITY = 100


def validate_settings():
    """Validate the current configuration. See config.validators."""
    from config.validators import validate_settings as _validate
    return _validate()
