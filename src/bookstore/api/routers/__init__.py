"""
bookstore.api.routers

HTTP routers, one module per audience (public, author, admin, ops).
"""
