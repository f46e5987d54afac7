"""Exception hierarchy for the OAuth bundle.

Every error carries the HTTP status it should be rendered with, so the API
layer can translate it without knowing where it came from.
"""

from __future__ import annotations

from typing import Any


class OAuthException(Exception):
    """Base exception for all OAuth-related errors."""

    def __init__(
        self,
        message: str = "An OAuth error occurred",
        status_code: int = 400,
        cause: BaseException | None = None,
    ):
        """
        Args:
            message: Human-readable error message
            status_code: HTTP status code (default: 400 Bad Request)
            cause: Underlying error, if any
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response format."""
        return {"code": self.status_code, "message": self.message}


class ProviderNotSupportedException(OAuthException):
    """Raised when an unknown OAuth provider is requested."""

    def __init__(self, provider: str):
        super().__init__(
            message=f'OAuth provider "{provider}" is not supported. Available providers: google, apple',
            status_code=400,
        )
        self.provider = provider
