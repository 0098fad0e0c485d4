"""Domain errors raised by the services and rendered as ``{"error": ...}``."""

from typing import Optional


class MoneyManagerError(Exception):
    """Base error; ``status_code`` is the HTTP status the API answers with."""

    status_code = 400
    default_message = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthorized(MoneyManagerError):
    status_code = 401
    default_message = "Unauthorized"


class NotFound(MoneyManagerError):
    status_code = 404
    default_message = "Not found"


class InvalidOperation(MoneyManagerError):
    status_code = 400
    default_message = "Invalid operation"


class InsufficientFunds(MoneyManagerError):
    status_code = 400
    default_message = "Insufficient balance"


class Forbidden(MoneyManagerError):
    status_code = 403
    default_message = "Not allowed"


class AttemptsExhausted(MoneyManagerError):
    status_code = 409
    default_message = "Maximum attempts exceeded"
