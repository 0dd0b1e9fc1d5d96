"""
Error kinds raised by the mark list service.

Each carries the HTTP status it maps to and a message that is safe to show
to clients. Driver and upstream details are logged, not attached here.
"""


class AppError(Exception):
    status = 500
    kind = "error"
    default_message = "Something went wrong"

    def __init__(self, message=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.details = details

    def to_dict(self):
        payload = {"error": self.kind, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    status = 400
    kind = "validation_error"
    default_message = "Please provide all required fields."


class DuplicateKeyError(AppError):
    status = 409
    kind = "duplicate_key"
    default_message = "Register number already exists."


class NotFoundError(AppError):
    status = 404
    kind = "not_found"
    default_message = "Student not found."


class UpstreamError(AppError):
    status = 500
    kind = "upstream_error"
    default_message = "Could not generate feedback at this time."


class StoreError(AppError):
    status = 500
    kind = "store_error"
    default_message = "Error accessing student data."
