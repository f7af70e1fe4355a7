# app/core/exceptions.py
"""
Application error taxonomy.

Every error carries the HTTP status and the message that is safe to show a
client. Underlying causes (provider responses, driver errors) stay in the
server logs.
"""


class AppError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_body(self) -> dict:
        return {"error": self.message}


class ValidationError(AppError):
    """Client input missing or malformed."""

    status_code = 400
    message = "Missing required fields"


class PayloadTooLarge(ValidationError):
    status_code = 413
    message = "Image too large (max 5MB)."


class NotFoundError(AppError):
    status_code = 404
    message = "Not found"


class DependencyError(AppError):
    """An external collaborator (storage, database, messaging) failed."""

    status_code = 500
    message = "Upstream service failed"


class StorageError(DependencyError):
    message = "Image upload failed"


class DatabaseError(DependencyError):
    message = "Database operation failed"


class NotificationError(DependencyError):
    message = "Notification could not be delivered"


class OrderError(AppError):
    """
    Wraps any error raised while handling an order so it renders in the
    order endpoint's `{success, message}` shape.
    """

    def __init__(self, cause: AppError, message: str | None = None):
        self.cause = cause
        self.status_code = cause.status_code
        super().__init__(message or cause.message)

    def to_body(self) -> dict:
        body: dict = {"success": False, "message": self.message}
        if isinstance(self.cause, NotificationError):
            body["error"] = "notification_failed"
        return body
