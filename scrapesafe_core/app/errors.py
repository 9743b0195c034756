# app/errors.py
# -*- coding: utf-8 -*-
"""
Domain errors raised by the core services.

Routers translate these into HTTP responses; the services themselves
never know about status codes beyond the hint carried here.
"""

from typing import Optional, Dict, Any


class ScrapeSafeError(Exception):
    status_code = 500

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_body(self) -> Dict[str, Any]:
        body = {"error": self.message}
        body.update(self.extra)
        return body


class InvalidInputError(ScrapeSafeError):
    """Malformed address, missing field or unknown enum value."""
    status_code = 400


class NotFoundError(ScrapeSafeError):
    status_code = 404


class ConflictError(ScrapeSafeError):
    status_code = 409


class PreconditionError(ScrapeSafeError):
    """A well-formed request the current state does not allow."""

    def __init__(self, message: str, status_code: int = 400, **extra: Any):
        super().__init__(message, **extra)
        self.status_code = status_code


class PurchaseFailedError(ScrapeSafeError):
    """Signing or activation failed; the license row stays pending."""
    status_code = 500

    def __init__(self, message: str, license_id: Optional[int] = None):
        super().__init__(message, licenseId=license_id)
        self.license_id = license_id


class SignerNotConfigured(RuntimeError):
    """The server signing secret is missing. Not recoverable at runtime."""

    # set when a purchase had already committed its pending row
    license_id: Optional[int] = None
