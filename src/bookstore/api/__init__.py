"""
bookstore.api

API package for the bookstore service.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring and error mapping.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The API layer stays thin: request parsing + auth gates + delegation to services.
