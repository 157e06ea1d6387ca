from typing import Optional


class TodoAppError(Exception):
    """Base error carrying the HTTP status and message sent to clients"""

    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.message
        self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.error:
            body["error"] = self.error
        return body


class TaskValidationError(TodoAppError):
    status_code = 400
    message = "Invalid task data"


class TaskNotFound(TodoAppError):
    status_code = 404
    message = "Task not found"


class StoreUnavailable(TodoAppError):
    status_code = 500
    message = "Task store unavailable"
