"""
Resource registry endpoints. Reads are public; writes are admin-only.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.security import require_admin
from resource_booking.db.session import get_db
from resource_booking.models.user import User
from resource_booking.schemas.resource import ResourceCreate, ResourceUpdate, ResourceResponse
from resource_booking.services import resource_service
from resource_booking.services.cache_service import invalidate_resource_availability

router = APIRouter(prefix="/resources", tags=["Resources"])


@router.get("/", response_model=list[ResourceResponse])
async def list_resources_endpoint(db: AsyncSession = Depends(get_db)):
    return await resource_service.list_resources(db)


@router.get("/{resource_id}", response_model=ResourceResponse)
async def get_resource_endpoint(resource_id: int, db: AsyncSession = Depends(get_db)):
    return await resource_service.get_resource(db, resource_id)


@router.post("/", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
async def create_resource_endpoint(
    data: ResourceCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await resource_service.create_resource(db, data)


@router.put("/{resource_id}", response_model=ResourceResponse)
async def update_resource_endpoint(
    resource_id: int,
    data: ResourceUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await resource_service.update_resource(db, resource_id, data)


@router.delete("/{resource_id}")
async def delete_resource_endpoint(
    resource_id: int,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Delete a resource. Existing bookings keep their resource_id."""
    await resource_service.delete_resource(db, resource_id)
    await invalidate_resource_availability(resource_id)
    return {"message": "Resource removed", "resource_id": resource_id}
