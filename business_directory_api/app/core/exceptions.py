"""
Domain errors raised by the service layer.

Services signal failures with ``ValueError`` subclasses; endpoints map
them to HTTP status codes.  A plain ``ValueError`` means the request
itself was invalid (HTTP 400).
"""


class NotFoundError(ValueError):
    """The requested record does not exist or is not visible to the caller."""


class PermissionDeniedError(ValueError):
    """The caller is authenticated but not allowed to perform the action."""


class ConflictError(ValueError):
    """The write would violate a uniqueness or ownership rule."""
