"""
Domain error taxonomy.

Services raise these; ``api.middleware`` renders them as
``{"error": <code>, "detail": <message>}`` with the class status code.
"""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Fatal misconfiguration detected while the application is built."""


class TaskTrackerError(Exception):
    status_code: int = 500
    error: str = "InternalError"
    default_message: str = "Internal server error."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskTrackerError):
    """Missing or malformed input that the client can correct."""

    status_code = 400
    error = "ValidationError"
    default_message = "Invalid request."


class Conflict(TaskTrackerError):
    status_code = 400
    error = "Conflict"
    default_message = "Email or phone number already registered."


class InvalidCredentials(TaskTrackerError):
    """Login failure. Deliberately the same for unknown email and bad password."""

    status_code = 400
    error = "InvalidCredentials"
    default_message = "Invalid email or password."


class Unauthenticated(TaskTrackerError):
    status_code = 401
    error = "Unauthenticated"
    default_message = "Missing or invalid bearer token."


class NotFound(TaskTrackerError):
    status_code = 404
    error = "NotFound"
    default_message = "Task not found."


class StorageError(TaskTrackerError):
    status_code = 500
    error = "StorageError"
    default_message = "Storage failure."
