"""
BookCourier - REST backend for a bookstore/library platform.

Users browse and order books, librarians publish and fulfil them,
admins moderate the catalog and manage roles.
"""

__version__ = "0.1.0"
