from fastapi import status


class TaskManagerError(Exception):
    """Base class for errors the core reports to the HTTP boundary."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal Server Error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


class NotFoundError(TaskManagerError):
    """A referenced task or user is missing, or not in the required state."""

    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found."


class ValidationError(TaskManagerError):
    """Input rejected with field-level detail."""

    status_code = 422
    message = "The given data was invalid."

    def __init__(self, errors: dict[str, list[str]], message: str | None = None):
        self.errors = errors
        super().__init__(message)
