"""Domain errors raised by the access engine and routers.

Each carries the HTTP status it maps to; the handlers installed in
``taskhub.main`` turn them into ``{"detail": message}`` responses.
"""


class TaskhubError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None, status_code=None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(TaskhubError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(TaskhubError):
    status_code = 401
    default_message = "Not authenticated"


class AuthorizationError(TaskhubError):
    status_code = 403
    default_message = "Not authorized"


class NotFoundError(TaskhubError):
    status_code = 404
    default_message = "Not found"


class TaskNotFoundError(AuthorizationError):
    """Task is missing or the caller may not act on it; the two are indistinguishable."""

    status_code = 404
    default_message = "Task not found or not authorized"


class ConflictError(TaskhubError):
    status_code = 409
    default_message = "Conflict"
