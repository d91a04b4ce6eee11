"""
Account Service Module

This module handles the identity service (Appwrite Account). It provides
functionality for creating accounts, starting and ending email/password
sessions, and fetching the currently authenticated account.
"""

from typing import Optional, Dict, Any

from data.models import Account
from services.appwrite_client import AppwriteClient, UNIQUE_ID
from utils.exceptions import (
    AuthError, BackendError, InvalidCredentialsError, NotAuthenticatedError
)
from utils.logger import get_logger

logger = get_logger(__name__)


class AccountService:
    """Service for identity accounts and sessions."""

    def __init__(self, client: AppwriteClient):
        """Initialize the account service."""
        self.client = client

    def create_account(self, email: str, password: str, name: str) -> Account:
        """
        Create an identity account.

        Args:
            email: Login email.
            password: Login password.
            name: Display name.

        Returns:
            Account: The new account.

        Raises:
            AuthError: If the account could not be created.
        """
        try:
            response = self.client.call('POST', '/account', json_body={
                'userId': UNIQUE_ID,
                'email': email,
                'password': password,
                'name': name,
            })
        except BackendError as e:
            logger.error(f"Failed to create account for {email}: {e}")
            raise AuthError(f"Account creation failed: {e}") from e

        account = Account.from_response(response)
        logger.info(f"Created account {account.id}")
        return account

    def create_email_session(self, email: str, password: str) -> Dict[str, Any]:
        """
        Start an email/password session.

        Returns:
            Dict[str, Any]: The session object.

        Raises:
            InvalidCredentialsError: If the credentials are rejected.
            AuthError: For any other failure.
        """
        try:
            session = self.client.call('POST', '/account/sessions/email', json_body={
                'email': email,
                'password': password,
            })
        except BackendError as e:
            if e.code in (400, 401):
                raise InvalidCredentialsError(f"Sign in rejected for {email}") from e
            logger.error(f"Failed to start session: {e}")
            raise AuthError(f"Sign in failed: {e}") from e

        logger.info(f"Started session {session.get('$id')}")
        return session

    def get_account(self) -> Account:
        """
        Fetch the account behind the current session.

        Raises:
            NotAuthenticatedError: If there is no active session.
            AuthError: For any other failure.
        """
        try:
            response = self.client.call('GET', '/account')
        except BackendError as e:
            if e.code == 401:
                raise NotAuthenticatedError("No active session") from e
            raise AuthError(f"Could not fetch current account: {e}") from e
        return Account.from_response(response)

    def delete_session(self, session_id: str = 'current', timeout: Optional[float] = None) -> bool:
        """
        End a session. Ending an already ended session is not an error.

        Args:
            session_id: Session to end, "current" by default.
            timeout: Request timeout override.

        Returns:
            bool: True if a session was ended, False if none was active.

        Raises:
            AuthError: If the backend could not be reached or failed. The
                session cookies held by this process are dropped anyway.
        """
        try:
            self.client.call('DELETE', f"/account/sessions/{session_id}", timeout=timeout)
        except BackendError as e:
            self.client.forget_session()
            if e.code in (401, 404):
                logger.info("No active session to end")
                return False
            raise AuthError(f"Sign out failed: {e}") from e

        self.client.forget_session()
        logger.info(f"Ended session {session_id}")
        return True

    def initials_avatar_url(self, name: str) -> str:
        """Derive an initials avatar URL for a display name. No request is made."""
        return self.client.build_url('/avatars/initials', {'name': name})
