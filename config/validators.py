"""
Configuration Validation for Snapgram

This module contains configuration validation logic.
Extracted from settings.py for better separation of concerns.
"""

from utils.exceptions import ConfigurationError
from utils.helpers import is_valid_url


def validate_settings():
    """
    Validate that all required settings are properly configured.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    # Import settings here to avoid circular imports
    from config import settings

    errors = []

    # Required environment variables
    required_vars = [
        ("APPWRITE_ENDPOINT", settings.APPWRITE_ENDPOINT),
        ("APPWRITE_PROJECT_ID", settings.APPWRITE_PROJECT_ID),
        ("APPWRITE_DATABASE_ID", settings.APPWRITE_DATABASE_ID),
        ("APPWRITE_STORAGE_ID", settings.APPWRITE_STORAGE_ID),
        ("APPWRITE_USERS_COLLECTION_ID", settings.APPWRITE_USERS_COLLECTION_ID),
        ("APPWRITE_POSTS_COLLECTION_ID", settings.APPWRITE_POSTS_COLLECTION_ID),
        ("APPWRITE_SAVES_COLLECTION_ID", settings.APPWRITE_SAVES_COLLECTION_ID),
    ]

    for var_name, var_value in required_vars:
        if not var_value:
            errors.append(f"Missing required environment variable: {var_name}")

    if settings.APPWRITE_ENDPOINT and not is_valid_url(settings.APPWRITE_ENDPOINT):
        errors.append(f"APPWRITE_ENDPOINT must be an http(s) URL, got {settings.APPWRITE_ENDPOINT}")

    # Validate numeric settings are within reasonable bounds
    numeric_validations = [
        ("RECENT_POSTS_LIMIT", settings.RECENT_POSTS_LIMIT, 1, 100),
        ("PREVIEW_WIDTH", settings.PREVIEW_WIDTH, 0, 4000),
        ("PREVIEW_HEIGHT", settings.PREVIEW_HEIGHT, 0, 4000),
        ("PREVIEW_QUALITY", settings.PREVIEW_QUALITY, 0, 100),
    ]

    for name, value, min_val, max_val in numeric_validations:
        if value < min_val or value > max_val:
            errors.append(f"{name} must be between {min_val} and {max_val}, got {value}")

    # Validate timeout values are positive
    timeout_settings = [
        ("REQUEST_TIMEOUT", settings.REQUEST_TIMEOUT),
        ("TEARDOWN_TIMEOUT", settings.TEARDOWN_TIMEOUT),
    ]

    for name, value in timeout_settings:
        if value <= 0:
            errors.append(f"{name} must be positive, got {value}")

    # Raise all errors at once
    if errors:
        error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        raise ConfigurationError(error_msg)

    return True


def get_config_summary() -> dict:
    """
    Returns a summary of current configuration (without sensitive values).
    Useful for logging startup state.
    """
    # Import settings here to avoid circular imports
    from config import settings

    return {
        "backend": {
            "endpoint": settings.APPWRITE_ENDPOINT,
            "project": settings.APPWRITE_PROJECT_ID,
            "database": settings.APPWRITE_DATABASE_ID,
            "bucket": settings.APPWRITE_STORAGE_ID,
        },
        "collections": {
            "users": settings.APPWRITE_USERS_COLLECTION_ID,
            "posts": settings.APPWRITE_POSTS_COLLECTION_ID,
            "saves": settings.APPWRITE_SAVES_COLLECTION_ID,
        },
        "session": {
            "store_file": settings.SESSION_STORE_FILE,
            "teardown_timeout": settings.TEARDOWN_TIMEOUT,
        },
        "feed_settings": {
            "recent_posts_limit": settings.RECENT_POSTS_LIMIT,
        }
    }
