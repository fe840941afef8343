"""Service-layer errors. Each kind carries the HTTP status and stable code it maps to."""


class ServiceError(Exception):
    """Base class for errors raised by services and translated by the API layer."""

    status_code: int = 400
    error_code: str = "bad_request"
    default_message: str = "Request could not be processed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequest(ServiceError):
    status_code = 400
    error_code = "bad_request"
    default_message = "Invalid request."


class InvalidCredentials(ServiceError):
    """Login failed. The message never says whether the user exists."""

    status_code = 401
    error_code = "invalid_credentials"
    default_message = "Invalid credentials."


class Unauthenticated(ServiceError):
    """Missing, malformed, expired or forged access token; reasons are not distinguished."""

    status_code = 401
    error_code = "unauthenticated"
    default_message = "Not authenticated"


class InvalidRefreshToken(ServiceError):
    status_code = 401
    error_code = "invalid_refresh_token"
    default_message = "Invalid refresh token."


class RefreshTokenExpired(ServiceError):
    status_code = 401
    error_code = "refresh_token_expired"
    default_message = "Refresh token has expired. Please log in again."


class Forbidden(ServiceError):
    status_code = 403
    error_code = "forbidden"
    default_message = "You do not have permission to perform this action."


class NotFound(ServiceError):
    status_code = 404
    error_code = "not_found"
    default_message = "Resource not found."


class DeviceNotFound(NotFound):
    error_code = "device_not_found"
    default_message = "Device not found."


class Conflict(ServiceError):
    status_code = 409
    error_code = "conflict"
    default_message = "Resource already exists."


class RangeNotSatisfiable(ServiceError):
    status_code = 416
    error_code = "range_not_satisfiable"
    default_message = "Requested range not satisfiable."


__all__ = [
    "BadRequest",
    "Conflict",
    "DeviceNotFound",
    "Forbidden",
    "InvalidCredentials",
    "InvalidRefreshToken",
    "NotFound",
    "RangeNotSatisfiable",
    "RefreshTokenExpired",
    "ServiceError",
    "Unauthenticated",
]
