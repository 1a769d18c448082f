"""
bookstore.storage

Object store collaborator boundary (cover images, PDFs, author photos).
"""

# Package marker.
