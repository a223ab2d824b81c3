"""Error types raised across the service, each tied to an HTTP status."""

from __future__ import annotations

from http import HTTPStatus


class AppError(Exception):
    """Base class for every error the service reports to a caller."""

    status_code: HTTPStatus = HTTPStatus.INTERNAL_SERVER_ERROR
    template: str = "{detail}"

    def __init__(self, detail: object = "") -> None:
        self.detail = detail
        super().__init__(self.template.format(detail=detail))

    @property
    def message(self) -> str:
        """The text sent back in the response body."""
        return str(self)


class Unauthorized(AppError):
    """The request failed signature or token authentication."""

    status_code = HTTPStatus.UNAUTHORIZED
    template = "Authentication failed"


class BadRequest(AppError):
    """The request or its payload was malformed."""

    status_code = HTTPStatus.BAD_REQUEST
    template = "Bad request: {detail}"


class ConfigError(AppError):
    """Configuration was missing or could not be parsed."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    template = "Configuration error: {detail}"


class InternalError(AppError):
    """An unexpected failure; the detail is kept but not shown."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
    template = "Internal server error"


class HttpClientError(AppError):
    """An outgoing HTTP request to an upstream service failed."""

    status_code = HTTPStatus.BAD_GATEWAY
    template = "HTTP client error: {detail}"


class RequestError(AppError):
    """A request could not be carried out as asked."""

    status_code = HTTPStatus.BAD_REQUEST
    template = "Request error: {detail}"