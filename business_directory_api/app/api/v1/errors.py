"""Translation of service-layer errors into HTTP responses."""

from fastapi import HTTPException, status

from business_directory_api.app.core.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)


def http_error(exc: ValueError) -> HTTPException:
    """Map a domain ``ValueError`` to the matching ``HTTPException``."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PermissionDeniedError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ConflictError):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))
