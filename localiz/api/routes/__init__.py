"""
API routes package.

One router per resource; the application factory includes them all.
"""

from . import admin, blog, contact, deals, listings, ratings, users, utils

__all__ = ["admin", "blog", "contact", "deals", "listings", "ratings", "users", "utils"]
