"""
bookstore.auth

Authentication/authorization package.

Responsibilities:
- Identity provider boundary (bearer token -> Principal).
- Access control service (admin / author gates).
- FastAPI auth dependencies.
"""

# Package marker.
