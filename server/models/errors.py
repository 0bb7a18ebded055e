"""Application error hierarchy"""
from typing import Optional


class AnalyticsError(Exception):
    """Base exception for all analytics errors."""

    status_code = 500

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def to_dict(self) -> dict:
        """Error body returned to HTTP clients"""
        return {"error": self.message}


class ValidationError(AnalyticsError):
    """Malformed input to a write operation"""

    status_code = 400


class StoreError(AnalyticsError):
    """Document store unavailable or query failed"""

    status_code = 500


class NotFoundError(AnalyticsError):
    """Referenced document does not exist"""

    status_code = 404


def format_validation_errors(errors) -> str:
    """Flatten pydantic error details into one message"""
    messages = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error['msg']}" if location else error["msg"])
    return "; ".join(messages) or "Invalid input"
