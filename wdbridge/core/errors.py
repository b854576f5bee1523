"""Exceptions raised by WD Bridge (wdbridge)."""

from typing import Optional


class WDBridgeError(Exception):
    """Base exception for all bridge errors."""


class AuthenticationError(WDBridgeError):
    """Raised when credentials are rejected or cannot be replayed."""


class RetryExhaustedError(WDBridgeError):
    """Raised when an operation keeps failing past the attempt ceiling."""

    def __init__(
        self, action: str, attempts: int, last_error: Optional[BaseException] = None
    ) -> None:
        self.action = action
        self.attempts = attempts
        self.last_error = last_error
        message = f"tried to {action} {attempts} times and failed"
        if last_error is not None:
            message += f" (last error: {last_error})"
        super().__init__(message)
