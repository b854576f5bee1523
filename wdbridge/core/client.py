"""Core client for WD Bridge (wdbridge)."""

from typing import Callable, List

from wdbridge.core.api import OperationResult, WDApi
from wdbridge.core.auth import WDAuth
from wdbridge.core.config import MAX_ATTEMPTS
from wdbridge.core.errors import RetryExhaustedError
from wdbridge.core.path_stack import PathStack
from wdbridge.core.session import Session
from wdbridge.core.stats import OperationStats
from wdbridge.models.entry import RemoteEntry
from wdbridge.utils.logger import (
    get_api_logger,
    enable_api_messages,
    disable_api_messages,
)

log = get_api_logger()


class WDClient:
    """Session-holding client that handles basic API operations."""

    def __init__(self, host, api=None, auth=None, max_attempts=MAX_ATTEMPTS):
        """Initialize the client for one device host."""
        self.session = Session()
        self.api = api if api is not None else WDApi(host)
        self.auth = auth if auth is not None else WDAuth(self.session)
        self.path_stack = PathStack()
        self.stats = OperationStats()
        self.max_attempts = max_attempts

    def authenticate(self, username, password):
        """Log in; returns False if the credentials were rejected."""
        return self.auth.authenticate(username, password)

    def retry_limited(
        self, max_attempts, action, operation: Callable[[], OperationResult]
    ):
        """
        Run an operation until it succeeds or the attempt ceiling is reached.

        ``operation`` rebuilds the whole call on every attempt, so a replay
        after re-authentication picks up the fresh token and the current
        folder. Session expiry and ordinary failures share the same budget.
        """
        last_error = None
        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                log.debug("Attempt %d to %s", attempt, action)

            result = operation()
            if result.success:
                return result.result

            if not result.session_valid:
                # No attempt is left to use a fresh token
                if attempt < max_attempts:
                    self.auth.reauthenticate()
            else:
                last_error = result.error

        raise RetryExhaustedError(action, max_attempts, last_error)

    # Path stack navigation

    def get_current_folder(self):
        return self.path_stack.current_folder()

    def enter_directory(self, folder_id):
        self.path_stack.enter(folder_id)

    def enter_parent_directory(self):
        return self.path_stack.enter_parent()

    def set_path(self, folder_id):
        self.path_stack.reset(folder_id)

    def remove_path_stack_entries(self, count):
        self.path_stack.truncate(count)

    # Folder operations

    def list_files(self) -> List[RemoteEntry]:
        """List the entries of the current folder."""

        def list_request():
            return self.api.list_folder(
                self.session.authorization, self.get_current_folder()
            )

        return self.retry_limited(self.max_attempts, "list files", list_request)

    def create_directory(self, name):
        """Create a folder in the current folder and return its id."""

        def mkdir_request():
            return self.api.make_directory(
                self.session.authorization, self.get_current_folder(), name
            )

        return self.retry_limited(
            self.max_attempts, "create new directory", mkdir_request
        )

    def remove_entry(self, entry_id):
        """Delete a file or folder by id."""

        def remove_request():
            return self.api.remove(self.session.authorization, entry_id)

        return self.retry_limited(self.max_attempts, "remove file", remove_request)

    @staticmethod
    def enable_api_messages():
        enable_api_messages()

    @staticmethod
    def disable_api_messages():
        disable_api_messages()
