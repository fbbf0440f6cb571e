"""
HTTP-facing errors.

Route handlers translate registry and storage errors into these; the
application renders each one as ``{"error": {...}}`` with its status code.
"""


class APIException(Exception):
    """An error with an HTTP status and a client-readable message."""

    status_code: int = 500
    error_type: str = "api_error"
    message: str = "An error occurred"

    def __init__(
        self,
        message: str | None = None,
        detail: str | None = None,
        status_code: int | None = None,
    ) -> None:
        self.message = message or type(self).message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def body(self) -> dict[str, object]:
        """JSON payload for the response."""
        return {
            "error": {
                "type": self.error_type,
                "message": self.message,
                "detail": self.detail,
            }
        }


class BadRequestError(APIException):
    """Duplicate registrations, repeat votes and other refused requests."""

    status_code = 400
    error_type = "bad_request"
    message = "Bad request"


class ValidationError(APIException):
    """Invalid launch fields or image upload; carries per-field messages."""

    status_code = 400
    error_type = "validation_error"
    message = "Invalid input"

    def __init__(self, fields: dict[str, str], message: str | None = None) -> None:
        self.fields = fields
        super().__init__(message=message)

    def body(self) -> dict[str, object]:
        return {
            "error": {
                "type": self.error_type,
                "message": self.message,
                "fields": self.fields,
            }
        }


class NotFoundError(APIException):
    status_code = 404
    error_type = "not_found"
    message = "Not found"


class InternalError(APIException):
    status_code = 500
    error_type = "internal_error"
    message = "Internal server error"
