"""
Session Service Module

This module tracks who the current user is. It resolves the principal from
the identity service and the users collection, mirrors the result in a
local state, and keeps the persisted session marker in step with it across
process start, sign-in, sign-out and process teardown.

States:

    UNKNOWN -> CHECKING -> AUTHENTICATED | ANONYMOUS
    AUTHENTICATED -> ANONYMOUS   (sign-out or teardown)

Readers may observe ANONYMOUS while a check is in progress.
"""

import atexit
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from config import settings
from data.models import ANONYMOUS, Principal
from data.protocols import KeyValueStore
from services.protocols import DocumentStoreProtocol, IdentityServiceProtocol
from services.query import Query
from utils.exceptions import AuthError, NotFoundError
from utils.logger import get_logger

logger = get_logger(__name__)


class SessionState(Enum):
    UNKNOWN = "unknown"
    CHECKING = "checking"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session handed to other components."""
    state: SessionState
    principal: Principal

    @property
    def is_authenticated(self) -> bool:
        return self.state is SessionState.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.state is SessionState.CHECKING


class SessionLifecycleManager:
    """
    Owns the local session state for one process.

    Construct once per process and pass ``snapshot()`` results to anything
    that needs the current user.
    """

    def __init__(self, identity: IdentityServiceProtocol, database: DocumentStoreProtocol,
                 local_storage: KeyValueStore, users_collection_id: Optional[str] = None):
        """
        Initialize the manager.

        Args:
            identity: Identity service client.
            database: Document store holding the users collection.
            local_storage: Persisted marker store.
            users_collection_id: Users collection, defaults to settings.
        """
        self.identity = identity
        self.database = database
        self.local_storage = local_storage
        self.users_collection_id = users_collection_id or settings.APPWRITE_USERS_COLLECTION_ID

        self._state = SessionState.UNKNOWN
        self._principal = ANONYMOUS
        self._hook_installed = False

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def principal(self) -> Principal:
        return self._principal

    @property
    def is_authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(state=self._state, principal=self._principal)

    def _set_anonymous(self) -> None:
        self._principal = ANONYMOUS
        self._state = SessionState.ANONYMOUS

    def has_session_marker(self) -> bool:
        """Return False when the persisted marker is missing or empty."""
        marker = self.local_storage.get_item(settings.SESSION_MARKER_KEY)
        return marker is not None and marker != settings.EMPTY_SESSION_MARKER

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def start(self) -> bool:
        """
        Resolve the session at process start.

        Without a persisted marker the state is set to ANONYMOUS straight
        away, so callers can send the user to sign-in immediately. The remote
        check runs in either case.

        Returns:
            bool: True if a principal was resolved.
        """
        if not self.has_session_marker():
            logger.info("No persisted session marker, sign-in required")
            self._set_anonymous()

        return self.check_auth_user()

    def check_auth_user(self) -> bool:
        """
        Ask the identity service for the current account and load its profile.

        Every failure, including an unreachable service, results in False
        and the ANONYMOUS state; the error itself is only logged.

        Returns:
            bool: True if the principal was resolved.
        """
        self._state = SessionState.CHECKING

        try:
            account = self.identity.get_account()
            profiles = self.database.list_documents(
                self.users_collection_id, [Query.equal('accountId', account.id)]
            )
            if not profiles:
                raise NotFoundError(f"No profile document for account {account.id}")
            if len(profiles) > 1:
                logger.warning(f"{len(profiles)} profile documents for account {account.id}, using the first")

            principal = Principal.from_document(profiles[0])
        except Exception as e:
            logger.info(f"Current user could not be resolved: {e}")
            self._set_anonymous()
            return False

        self._principal = principal
        self._state = SessionState.AUTHENTICATED
        logger.info(f"Authenticated as {principal.username or principal.id}")
        return True

    # -------------------------------------------------------------------------
    # User actions
    # -------------------------------------------------------------------------

    def sign_up(self, name: str, username: str, email: str, password: str) -> Principal:
        """
        Create an account and its profile document. Does not sign in.

        Returns:
            Principal: The stored profile.

        Raises:
            AuthError: If the account could not be created.
            StoreError: If the profile document could not be saved.
        """
        account = self.identity.create_account(email, password, name)
        document = self.database.create_document(self.users_collection_id, {
            'accountId': account.id,
            'email': account.email,
            'name': account.name,
            'username': username,
            'imageUrl': self.identity.initials_avatar_url(name),
        })
        logger.info(f"Saved profile {document.get('$id')} for account {account.id}")
        return Principal.from_document(document)

    def sign_in(self, email: str, password: str) -> bool:
        """
        Start a session and resolve the principal.

        Returns:
            bool: True if the principal was resolved after signing in.

        Raises:
            AuthError: If the session could not be started.
        """
        self.identity.create_email_session(email, password)
        return self.check_auth_user()

    def sign_out(self) -> bool:
        """
        End the remote session and clear local state.

        Local state is cleared even if the remote call fails, and signing
        out twice is harmless.

        Returns:
            bool: True if a remote session was ended.
        """
        ended = False
        try:
            ended = self.identity.delete_session()
        except (AuthError, OSError) as e:
            logger.warning(f"Remote sign out failed: {e}")
        finally:
            self._set_anonymous()
            try:
                self.local_storage.set_item(settings.SESSION_MARKER_KEY, settings.EMPTY_SESSION_MARKER)
            except OSError as e:
                logger.warning(f"Could not clear the session marker: {e}")

        logger.info("Signed out")
        return ended

    # -------------------------------------------------------------------------
    # Teardown
    # -------------------------------------------------------------------------

    def teardown(self) -> None:
        """
        Best-effort cleanup when the process is going away.

        Ends the remote session with a short timeout, clears local storage and
        writes the page-closed marker. Nothing here is guaranteed to complete
        and no error escapes.
        """
        try:
            self.identity.delete_session(timeout=settings.TEARDOWN_TIMEOUT)
        except Exception as e:
            logger.debug(f"Teardown sign out did not complete: {e}")

        self._set_anonymous()
        try:
            self.local_storage.clear()
            self.local_storage.set_item(settings.PAGE_CLOSED_KEY, 'true')
        except Exception as e:
            logger.debug(f"Teardown could not update local storage: {e}")

    def install_teardown_hook(self) -> None:
        """Run teardown() when the interpreter exits."""
        if not self._hook_installed:
            atexit.register(self.teardown)
            self._hook_installed = True

    def remove_teardown_hook(self) -> None:
        if self._hook_installed:
            atexit.unregister(self.teardown)
            self._hook_installed = False
