"""
Snapgram Client

This is the main entry point for the Snapgram client.
It wires the backend clients to the session, post and engagement services
and exposes them as command line actions.

The session is ended when the process exits, the way closing the web page
ends it. Pass --keep-session to keep it for the next invocation.
"""

import os
import sys
import argparse
import getpass
import logging
from typing import Optional, List

from config import settings
from config.validators import get_config_summary
from data.local_storage import LocalStorage
from data.models import NewPost, Post, SavedPost, Principal
from services.account_service import AccountService
from services.appwrite_client import AppwriteClient
from services.database_service import DatabaseService
from services.engagement_service import EngagementService, toggled_likes
from services.post_service import PostService
from services.session_service import SessionLifecycleManager
from services.storage_service import StorageService
from utils.exceptions import (
    SnapgramError, AuthError, NotAuthenticatedError, StoreError, ConfigurationError
)
from utils.helpers import truncate_text
from utils.logger import get_logger, setup_file_logging

# Set up logging
logger = get_logger(__name__)


class Snapgram:
    """
    Application facade.

    Builds every service once per process and gates post and engagement
    actions on a resolved principal.
    """

    def __init__(self, local_storage: Optional[LocalStorage] = None,
                 client: Optional[AppwriteClient] = None):
        """Initialize the application services."""
        self.local_storage = local_storage or LocalStorage()
        self.client = client or AppwriteClient(local_storage=self.local_storage)

        self.accounts = AccountService(self.client)
        self.database = DatabaseService(self.client)
        self.storage = StorageService(self.client)

        self.session = SessionLifecycleManager(self.accounts, self.database, self.local_storage)
        self.posts = PostService(self.database, self.storage)
        self.engagement = EngagementService(self.database)

    def _require_principal(self) -> Principal:
        snapshot = self.session.snapshot()
        if not snapshot.is_authenticated:
            raise NotAuthenticatedError("Sign in first")
        return snapshot.principal

    def check_auth_user(self) -> bool:
        return self.session.check_auth_user()

    def sign_out(self) -> bool:
        return self.session.sign_out()

    def create_post(self, caption: str, file_name: str, file_content: bytes,
                    location: str = '', tags: Optional[str] = None) -> Post:
        principal = self._require_principal()
        return self.posts.create_post(NewPost(
            creator_id=principal.id,
            caption=caption,
            file_name=file_name,
            file_content=file_content,
            location=location,
            tags=tags,
        ))

    def get_recent_posts(self, limit: int = settings.RECENT_POSTS_LIMIT) -> List[Post]:
        self._require_principal()
        return self.posts.get_recent_posts(limit)

    def toggle_like(self, post_id: str) -> Post:
        """Like the post, or remove the like if the current user already liked it."""
        principal = self._require_principal()
        post = self.posts.get_post_by_id(post_id)
        return self.engagement.toggle_like(post_id, toggled_likes(post.likes, principal.id))

    def save(self, post_id: str) -> SavedPost:
        principal = self._require_principal()
        return self.engagement.save_post(post_id, principal.id)

    def unsave(self, saved_record_id: str) -> None:
        self._require_principal()
        self.engagement.unsave_post(saved_record_id)

    def delete_post(self, post_id: str) -> None:
        self._require_principal()
        self.posts.delete_post(post_id)


def create_app(local_storage: Optional[LocalStorage] = None) -> Snapgram:
    """Create the application after validating settings."""
    settings.validate_settings()
    return Snapgram(local_storage=local_storage)


# =============================================================================
# Command handlers
# =============================================================================

def _print_post(post: Post) -> None:
    tags = " ".join(f"#{tag}" for tag in post.tags)
    created = post.created_at.strftime('%Y-%m-%d %H:%M') if post.created_at else ''
    print(f"{post.id}  {created}  {truncate_text(post.caption, 60)}  {tags}  ({len(post.likes)} likes)")


def cmd_sign_up(app: Snapgram, args) -> bool:
    password = args.password or getpass.getpass("Password: ")
    principal = app.session.sign_up(args.name, args.username, args.email, password)
    print(f"Created account for @{principal.username}")
    return True


def cmd_sign_in(app: Snapgram, args) -> bool:
    password = args.password or getpass.getpass("Password: ")
    if not app.session.sign_in(args.email, password):
        logger.warning("Signed in, but no profile was found for this account")
        return False
    print(f"Signed in as @{app.session.principal.username}")
    return True


def cmd_sign_out(app: Snapgram, args) -> bool:
    app.sign_out()
    print("Signed out")
    return True


def cmd_whoami(app: Snapgram, args) -> bool:
    principal = app.session.principal
    if principal.is_anonymous:
        print("Not signed in")
        return False
    print(f"{principal.name} (@{principal.username}) <{principal.email}>")
    return True


def cmd_post(app: Snapgram, args) -> bool:
    with open(args.image, 'rb') as f:
        content = f.read()
    post = app.create_post(args.caption, os.path.basename(args.image), content, args.location or "", args.tags)
    _print_post(post)
    return True


def cmd_feed(app: Snapgram, args) -> bool:
    for post in app.get_recent_posts(args.limit):
        _print_post(post)
    return True


def cmd_like(app: Snapgram, args) -> bool:
    _print_post(app.toggle_like(args.post_id))
    return True


def cmd_save(app: Snapgram, args) -> bool:
    saved = app.save(args.post_id)
    print(f"Saved as {saved.id}")
    return True


def cmd_unsave(app: Snapgram, args) -> bool:
    app.unsave(args.saved_id)
    print("Removed from saved")
    return True


def cmd_delete_post(app: Snapgram, args) -> bool:
    app.delete_post(args.post_id)
    print(f"Deleted post {args.post_id}")
    return True


# Commands that run before a session exists
SESSIONLESS_COMMANDS = {'sign-up', 'sign-in'}


def parse_arguments(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description='Snapgram client')
    parser.add_argument('--log-file', type=str, default=None, help='Log file path')
    parser.add_argument('--log-level', type=str, choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        default='WARNING', help='Logging level')
    parser.add_argument('--keep-session', action='store_true',
                        help='Do not end the session when the process exits')

    subparsers = parser.add_subparsers(dest='command', required=True)

    sign_up = subparsers.add_parser('sign-up', help='Create an account')
    sign_up.add_argument('--name', required=True)
    sign_up.add_argument('--username', required=True)
    sign_up.add_argument('--email', required=True)
    sign_up.add_argument('--password', default=None)
    sign_up.set_defaults(handler=cmd_sign_up)

    sign_in = subparsers.add_parser('sign-in', help='Start a session')
    sign_in.add_argument('--email', required=True)
    sign_in.add_argument('--password', default=None)
    sign_in.set_defaults(handler=cmd_sign_in)

    subparsers.add_parser('sign-out', help='End the session').set_defaults(handler=cmd_sign_out)
    subparsers.add_parser('whoami', help='Show the current user').set_defaults(handler=cmd_whoami)

    post = subparsers.add_parser('post', help='Publish an image post')
    post.add_argument('--image', required=True, help='Path of the image file')
    post.add_argument('--caption', required=True)
    post.add_argument('--location', default='')
    post.add_argument('--tags', default=None, help='Comma-separated tags')
    post.set_defaults(handler=cmd_post)

    feed = subparsers.add_parser('feed', help='List recent posts')
    feed.add_argument('--limit', type=int, default=settings.RECENT_POSTS_LIMIT)
    feed.set_defaults(handler=cmd_feed)

    like = subparsers.add_parser('like', help='Like or unlike a post')
    like.add_argument('post_id')
    like.set_defaults(handler=cmd_like)

    save = subparsers.add_parser('save', help='Save a post')
    save.add_argument('post_id')
    save.set_defaults(handler=cmd_save)

    unsave = subparsers.add_parser('unsave', help='Remove a saved post record')
    unsave.add_argument('saved_id')
    unsave.set_defaults(handler=cmd_unsave)

    delete = subparsers.add_parser('delete-post', help='Delete a post and its image')
    delete.add_argument('post_id')
    delete.set_defaults(handler=cmd_delete_post)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    log_level = getattr(logging, args.log_level)
    get_logger().setLevel(log_level)
    if args.log_file:
        setup_file_logging(args.log_file, log_level)

    try:
        app = create_app()
        logger.debug(f"Configuration: {get_config_summary()}")
        if not args.keep_session:
            app.session.install_teardown_hook()

        if args.command not in SESSIONLESS_COMMANDS:
            app.session.start()

        exit_code = 0 if args.handler(app, args) else 1

    except ConfigurationError as e:
        logger.error(str(e))
        exit_code = 1
    except NotAuthenticatedError:
        print("Not signed in. Run 'sign-in' first.", file=sys.stderr)
        exit_code = 1
    except AuthError as e:
        logger.error(f"Authentication error: {e}")
        exit_code = 1
    except StoreError as e:
        logger.error(f"Storage error: {e}")
        exit_code = 1
    except SnapgramError as e:
        logger.error(f"Snapgram error: {e}")
        exit_code = 1
    except OSError as e:
        logger.error(f"File error: {e}")
        exit_code = 1
    except Exception as e:
        logger.error(f"Unhandled exception in Snapgram: {e}", exc_info=True)
        exit_code = 2

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
