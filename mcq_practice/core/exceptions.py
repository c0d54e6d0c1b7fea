"""
Error taxonomy shared by the services, the API layer and the API client.

Services raise these; ``mcq_practice.main`` renders any ``AppError`` as
``{"detail": message}`` with the class's status code.
"""


class AppError(Exception):
    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed input: bulk upload text, missing form fields, bad config."""

    status_code = 400
    default_message = "Invalid input"


class AuthError(AppError):
    status_code = 401
    default_message = "Not authenticated"


class PermissionDeniedError(AuthError):
    status_code = 403
    default_message = "Not allowed"


class NotFoundError(AppError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "Conflict with existing data"


class FetchError(AppError):
    """Network or API failure seen from the client side."""

    status_code = 502
    default_message = "Something went wrong. Please try again."


class NoQuestionsError(AppError):
    """The question bank has nothing to offer for the requested topic."""

    status_code = 404
    default_message = "No questions available for this topic"
