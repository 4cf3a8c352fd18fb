from __future__ import annotations


class RentalApiError(Exception):
    """Base class for errors rendered as `{"success": false, "error": ...}`."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigError(RentalApiError):
    """Required configuration (credentials, listing ids) is missing."""

    status_code = 500


class QueryValidationError(RentalApiError):
    status_code = 400


class AuthError(RentalApiError):
    """The provider refused to issue an access token."""

    status_code = 500


class UpstreamError(RentalApiError):
    """A provider call returned a non-success status or could not be sent."""

    status_code = 502

    def __init__(self, message: str, *, status: int | None = None):
        super().__init__(message)
        self.status = status


class ParseError(RentalApiError):
    """A provider response was not JSON or had no recognized shape."""

    status_code = 502


class MissingCredentialsError(ConfigError, AuthError):
    """Account id or API key is not configured; no token can be requested."""

    status_code = 500
