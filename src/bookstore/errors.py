"""
bookstore.errors

Domain error taxonomy.

Responsibilities:
- Give every failure class a stable HTTP-equivalent status.
- Let services raise domain errors without importing FastAPI.
"""

from __future__ import annotations


class BookstoreError(Exception):
    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class Unauthenticated(BookstoreError):
    # No token, a malformed token, or one the identity provider rejected.
    status_code = 401


class Forbidden(BookstoreError):
    status_code = 403


class ValidationFailed(BookstoreError):
    status_code = 400


class NotFound(BookstoreError):
    status_code = 404


class StoreFailure(BookstoreError):
    # The collaborator's message is passed through unchanged.
    status_code = 500


# --- Module Notes -----------------------------------------------------------
# The API layer maps any BookstoreError to `{"error": message}` (see `api.errors`).
