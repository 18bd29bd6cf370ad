"""
Service layer.

Each service encapsulates the business rules for one domain and talks
to SQLite directly.  API handlers stay thin: they authenticate, call a
service and translate domain errors into HTTP responses.
"""
