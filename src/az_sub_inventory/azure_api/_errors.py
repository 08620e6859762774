"""Exceptions raised by the Azure REST helpers."""

from __future__ import annotations


class AzureApiError(Exception):
    """A REST call returned a non-success status."""

    def __init__(self, message: str, *, status_code: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class AzureAuthorizationError(AzureApiError):
    """The caller is not allowed to read the requested resource (401/403)."""
