"""
bookstore.auth.models

Auth domain models.

Responsibilities:
- Define the authenticated identity type (`Principal`) injected into endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity, as reported by the identity provider.
    Not persisted by this service.
    """

    id: str
    email: str


# --- Module Notes -----------------------------------------------------------
# Roles are deliberately absent: admin/author status is re-derived from the store per request.
