"""
Application package initializer.

The API is organised by domain: listings (businesses), their product
catalogues, reviews, categories and the identity/profile layer.  Each
domain exposes a router from ``api/v1/endpoints`` backed by a service
class in ``services``.
"""

from .main import app  # noqa: F401
