"""
Appwrite Client Module

This module handles HTTP transport to the Appwrite backend shared by the
account, database and storage services. It sets the project headers, maps
failed responses onto BackendError, and keeps session cookies persisted in
local storage so a new process can resume an existing session.
"""

import json
from typing import Optional, Dict, Any
from urllib.parse import urlencode

import requests

from config import settings
from data.protocols import KeyValueStore
from utils.exceptions import BackendError
from utils.logger import get_logger

logger = get_logger(__name__)

# Placeholder id that asks the backend to generate a unique id
UNIQUE_ID = "unique()"

SESSION_COOKIE_PREFIX = "a_session_"
FALLBACK_COOKIES_HEADER = "X-Fallback-Cookies"


class AppwriteClient:
    """HTTP client for the Appwrite REST API."""

    def __init__(self, local_storage: Optional[KeyValueStore] = None,
                 endpoint: Optional[str] = None, project_id: Optional[str] = None,
                 timeout: Optional[float] = None, http: Optional[requests.Session] = None):
        """
        Initialize the client.

        Args:
            local_storage: Store used to persist session cookies (optional).
            endpoint: API endpoint, defaults to settings.APPWRITE_ENDPOINT.
            project_id: Project id, defaults to settings.APPWRITE_PROJECT_ID.
            timeout: Request timeout in seconds.
            http: requests.Session to use (optional).
        """
        self.endpoint = (endpoint or settings.APPWRITE_ENDPOINT).rstrip('/')
        self.project_id = project_id or settings.APPWRITE_PROJECT_ID
        self.timeout = timeout or settings.REQUEST_TIMEOUT
        self.local_storage = local_storage
        self.http = http or requests.Session()
        self.http.headers.update({
            'X-Appwrite-Project': self.project_id,
            'X-Appwrite-Response-Format': '1.5.0',
        })

    # -------------------------------------------------------------------------
    # Session cookie persistence
    # -------------------------------------------------------------------------

    def _stored_cookies(self) -> Dict[str, str]:
        if self.local_storage is None:
            return {}
        raw = self.local_storage.get_item(settings.SESSION_MARKER_KEY)
        if not raw or raw == settings.EMPTY_SESSION_MARKER:
            return {}
        try:
            cookies = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring malformed session marker")
            return {}
        return cookies if isinstance(cookies, dict) else {}

    def _remember_session(self, response: requests.Response) -> None:
        """Persist session cookies carried by a response."""
        if self.local_storage is None:
            return

        fallback = response.headers.get(FALLBACK_COOKIES_HEADER)
        if fallback:
            self.local_storage.set_item(settings.SESSION_MARKER_KEY, fallback)
            return

        cookies = {c.name: c.value for c in response.cookies if c.name.startswith(SESSION_COOKIE_PREFIX)}
        if cookies:
            stored = self._stored_cookies()
            stored.update(cookies)
            self.local_storage.set_item(settings.SESSION_MARKER_KEY, json.dumps(stored))
            logger.debug("Persisted session cookie to local storage")

    def forget_session(self) -> None:
        """Drop session cookies from memory and from local storage."""
        self.http.cookies.clear()
        if self.local_storage is not None:
            self.local_storage.set_item(settings.SESSION_MARKER_KEY, settings.EMPTY_SESSION_MARKER)

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    def build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Build an absolute URL that can be fetched without extra headers.

        Args:
            path: API path starting with '/'.
            params: Query parameters.

        Returns:
            str: URL including the project query parameter.
        """
        query = dict(params or {})
        query['project'] = self.project_id
        return f"{self.endpoint}{path}?{urlencode(query, doseq=True)}"

    def call(self, method: str, path: str, params: Optional[Dict[str, Any]] = None,
             json_body: Optional[Dict[str, Any]] = None, data: Optional[Dict[str, Any]] = None,
             files: Optional[Dict[str, Any]] = None, headers: Optional[Dict[str, str]] = None,
             timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: API path starting with '/'.
            params: Query string parameters.
            json_body: JSON request body.
            data: Form fields (multipart uploads).
            files: Multipart files.
            headers: Extra request headers.
            timeout: Overrides the client timeout for this request.

        Returns:
            Dict[str, Any]: Response body, empty for responses without content.

        Raises:
            BackendError: On network failure or a non-2xx response.
        """
        request_headers = dict(headers or {})
        stored = self._stored_cookies()
        if stored:
            request_headers[FALLBACK_COOKIES_HEADER] = json.dumps(stored)

        url = f"{self.endpoint}{path}"
        try:
            response = self.http.request(
                method, url,
                params=params, json=json_body, data=data, files=files,
                headers=request_headers, timeout=timeout or self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"{method} {path} failed: {e}")
            raise BackendError(f"Request to {path} failed: {e}") from e

        if not response.ok:
            raise self._error_from(response, method, path)

        self._remember_session(response)

        if response.status_code == 204 or not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise BackendError(f"Invalid JSON from {path}", code=response.status_code) from e

    @staticmethod
    def _error_from(response: requests.Response, method: str, path: str) -> BackendError:
        message = f"{method} {path} returned {response.status_code}"
        error_type = ''
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get('message') or message
            error_type = body.get('type') or ''
        logger.debug(f"Backend error {response.status_code} ({error_type}): {message}")
        return BackendError(message, code=response.status_code, error_type=error_type)
