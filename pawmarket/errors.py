"""
Page-level exceptions.

Backend failures are raised as ``BackendError`` by the backend client; pages
either turn them into an inline ``error`` message, swallow them as an empty
result, or escalate them to an ``AlertError`` when the user's action did not
complete.
"""

from .utils.backend_client import BackendError


class AlertError(Exception):
    """Blocking error dialog: the requested action did not complete."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class AuthenticationRequired(Exception):
    """The action needs a signed-in user."""

    def __init__(self, action: str = "this action"):
        self.action = action
        super().__init__(f"Sign in to use {action}")


__all__ = ["AlertError", "AuthenticationRequired", "BackendError"]
