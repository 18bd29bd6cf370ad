"""
Moderation endpoints for API v1.

Restricted to the static ``ADMIN_EMAILS`` allow-list; other signed-in
users get 403 "Access denied" and anonymous callers 401.  Admins browse
listings by moderation status and approve or reject them.  A decision
can be reversed at any time and is written without looking at the
current status.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from business_directory_api.app.api.v1.errors import http_error
from business_directory_api.app.core.security import require_admin
from business_directory_api.app.schemas.business import (
    BusinessPartitions,
    BusinessRead,
    BusinessStatus,
    BusinessStatusUpdate,
)
from business_directory_api.app.services.business_service import BusinessService

router = APIRouter()


@router.get("/businesses", response_model=List[BusinessRead])
async def list_businesses_by_status(
    status: BusinessStatus = Query("pending", description="pending, approved or rejected"),
    current_user: dict = Depends(require_admin),
) -> List[BusinessRead]:
    """One admin tab: every listing in the given moderation state."""
    return await BusinessService.list_by_status(status)


@router.get("/businesses/partitions", response_model=BusinessPartitions)
async def business_partitions(current_user: dict = Depends(require_admin)) -> BusinessPartitions:
    """All three tabs from a single read."""
    return await BusinessService.partition_all()


@router.put("/businesses/{business_id}/status", response_model=BusinessRead)
async def set_business_status(
    business_id: int,
    data: BusinessStatusUpdate,
    current_user: dict = Depends(require_admin),
) -> BusinessRead:
    """Approve or reject a listing."""
    try:
        return await BusinessService.set_status(business_id, data.status)
    except ValueError as e:
        raise http_error(e) from e
