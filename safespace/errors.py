"""
safespace.errors — Service-Layer Error Taxonomy
================================================

Services raise these; the API layer maps ``status_code`` to the HTTP
response in one exception handler.  Queries do not raise ``NotFound``:
they return ``None`` or an empty result instead.
"""

from __future__ import annotations


class SafeSpaceError(Exception):
    """Base class for every error a service raises on purpose."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(SafeSpaceError):
    """No identity was presented for an operation that requires one."""

    status_code = 401

    def __init__(self, message: str = "Unauthenticated") -> None:
        super().__init__(message)


class Unauthorized(SafeSpaceError):
    """An identity was presented but lacks the required privilege."""

    status_code = 403


class NotFound(SafeSpaceError):
    """A mutation referenced a row that does not exist."""

    status_code = 404


class ValidationError(SafeSpaceError):
    """Input rejected before any write."""

    status_code = 422
