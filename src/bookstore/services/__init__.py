"""
bookstore.services

Service-layer package.

Responsibilities:
- Own transaction boundaries and persistence decisions.
- Enforce the publish workflow, ownership and visibility rules.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Services raise `bookstore.errors` types and never import FastAPI.
