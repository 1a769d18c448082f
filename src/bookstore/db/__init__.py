"""
bookstore.db

Persistence package (SQLAlchemy async).

Responsibilities:
- Provide ORM models, engine/session setup, and repositories.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# The hosted relational store is the only owner of Author/Book rows; nothing here caches them.
