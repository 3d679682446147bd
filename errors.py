"""
Error types raised by the quiz service.

Every QuizError carries the HTTP status and the client-facing message; the
handlers in main.py turn them into `{"message": ...}` bodies.
"""


class QuizError(Exception):
    code = "QUIZ_ERROR"
    http_status = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_response(self) -> dict:
        return {"message": self.message}


class InvalidPasswordError(QuizError):
    code = "INVALID_PASSWORD"
    http_status = 401

    def __init__(self, username: str):
        super().__init__("Invalid password")
        self.username = username


class UserNotFoundError(QuizError):
    code = "USER_NOT_FOUND"
    http_status = 404

    def __init__(self, username: str):
        super().__init__("User not found")
        self.username = username


class StoreError(QuizError):
    """A store operation failed. The driver detail stays in the logs."""
    code = "STORE_ERROR"
    http_status = 500

    def __init__(self, operation: str, detail: str = ""):
        super().__init__("Internal server error")
        self.operation = operation
        self.detail = detail
