"""Domain errors raised by the property store."""


class StoreError(Exception):
    """Base exception for property store errors."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(StoreError):
    """Raised when input is missing or invalid."""

    status_code = 400


class NotFoundError(StoreError):
    """Raised when a referenced property, phase, unit or milestone does not exist."""

    status_code = 404


def describe_invalid_body(errors) -> str:
    """Render the first pydantic error as ``Invalid request body: <loc>: <msg>``."""
    if not errors:
        return "Invalid request body."
    first = errors[0]
    where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"Invalid request body: {where + ': ' if where else ''}{first.get('msg', 'invalid value')}"
