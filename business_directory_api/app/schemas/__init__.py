"""
Pydantic schema definitions for API payloads.

Each domain (auth, businesses, products, reviews, profiles, categories)
defines its own request and response models.  Schemas are separated
from the SQLite rows so the API representation can evolve on its own.
"""
