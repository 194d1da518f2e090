"""Error kinds raised by the services and their HTTP mapping."""
import enum


class ErrorKind(str, enum.Enum):
    INVALID_INPUT = "invalid_input"
    INVALID_STATE = "invalid_state"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"


HTTP_STATUS = {
    ErrorKind.INVALID_INPUT: 400,
    ErrorKind.INVALID_STATE: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.SERVER_ERROR: 500,
}


class ServiceError(Exception):
    """Base error carrying a kind and a client-visible message."""

    kind = ErrorKind.SERVER_ERROR

    def __init__(self, message, kind=None):
        if kind is not None:
            self.kind = kind
        self.message = message
        super().__init__(message)

    @property
    def status_code(self):
        return HTTP_STATUS[self.kind]


class InvalidInput(ServiceError):
    kind = ErrorKind.INVALID_INPUT


class InvalidState(ServiceError):
    kind = ErrorKind.INVALID_STATE


class Unauthorized(ServiceError):
    kind = ErrorKind.UNAUTHORIZED


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT


def format_validation_errors(errors) -> str:
    """Join pydantic error entries into one human-readable message."""
    messages = []
    for err in errors:
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        msg = err.get("msg", "Invalid value")
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        messages.append(f"{'.'.join(loc)}: {msg}" if loc else msg)
    return ", ".join(messages) or "Invalid request data"
