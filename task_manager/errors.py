"""Error kinds raised by the services, each tied to one HTTP status."""


class TaskManagerError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TaskManagerError):
    """A required field is missing or empty."""
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(TaskManagerError):
    status_code = 401
    default_message = "Invalid username or password"


class NotFound(TaskManagerError):
    status_code = 404
    default_message = "Not found"


class Conflict(TaskManagerError):
    status_code = 409
    default_message = "Conflict"


class StorageError(TaskManagerError):
    """The database engine failed; the message carries the engine's text."""
    status_code = 500
    default_message = "Storage error"
