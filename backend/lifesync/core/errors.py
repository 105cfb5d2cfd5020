"""
Error taxonomy shared by the conversation engine, storage and API layers.

Each error carries the HTTP status it maps to; the API installs one
handler for the base class.
"""

from typing import Optional


class LifeSyncError(Exception):
    """Base class for all application errors."""
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(LifeSyncError):
    """Malformed request (missing or wrong-typed message/action)."""
    status_code = 400


class NotFoundError(LifeSyncError):
    """Referenced record does not exist for this user."""
    status_code = 404

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found")


class GenerationFailure(LifeSyncError):
    """The language model returned nothing usable.

    Turned into a degraded reply by the orchestrator, never raised to HTTP.
    """
    status_code = 502


class ProcessingFailure(LifeSyncError):
    """Unexpected failure while handling a conversation turn."""
    status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        super().__init__(message)


class ExecutionFailure(LifeSyncError):
    """A confirmed action could not be persisted."""
    status_code = 500

    def __init__(self, action_type: str, original_error: Exception):
        self.action_type = action_type
        self.original_error = original_error
        super().__init__(f"Failed to execute {action_type} action: {original_error}")
