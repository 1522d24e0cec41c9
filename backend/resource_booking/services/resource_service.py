"""
Resource registry: CRUD for bookable resources.

The registry is read-mostly. Booking creation reads it without locking;
the only write the booking engine makes here is the version bump in
booking_service.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from resource_booking.core.exceptions import DuplicateResource, ResourceNotFound
from resource_booking.core.logging import get_logger
from resource_booking.models.resource import Resource
from resource_booking.schemas.resource import ResourceCreate, ResourceUpdate

logger = get_logger(__name__)


async def get_resource(db: AsyncSession, resource_id: int) -> Resource:
    result = await db.execute(select(Resource).where(Resource.id == resource_id))
    resource = result.scalar_one_or_none()
    if resource is None:
        raise ResourceNotFound(f"Resource {resource_id} not found")
    return resource


async def list_resources(db: AsyncSession) -> list[Resource]:
    result = await db.execute(select(Resource).order_by(Resource.name.asc()))
    return list(result.scalars().all())


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: Optional[int] = None) -> None:
    query = select(Resource.id).where(Resource.name == name)
    if exclude_id is not None:
        query = query.where(Resource.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise DuplicateResource(f"Resource '{name}' already exists")


async def create_resource(db: AsyncSession, data: ResourceCreate) -> Resource:
    await _ensure_unique_name(db, data.name)

    resource = Resource(
        name=data.name,
        type=data.type.value,
        capacity=data.capacity,
        description=data.description,
        location=data.location,
        is_available=data.is_available,
        requires_approval=data.requires_approval,
        auto_approve=data.auto_approve,
    )
    db.add(resource)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent create of the same name
        await db.rollback()
        raise DuplicateResource(f"Resource '{data.name}' already exists")
    await db.refresh(resource)

    logger.info("resource_created", resource_id=resource.id, name=resource.name, type=resource.type)
    return resource


async def update_resource(db: AsyncSession, resource_id: int, data: ResourceUpdate) -> Resource:
    resource = await get_resource(db, resource_id)
    changes = data.model_dump(exclude_unset=True, exclude_none=True)

    if "name" in changes and changes["name"] != resource.name:
        await _ensure_unique_name(db, changes["name"], exclude_id=resource_id)
    if "type" in changes:
        changes["type"] = changes["type"].value

    for field, value in changes.items():
        setattr(resource, field, value)

    try:
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent rename or create
        await db.rollback()
        raise DuplicateResource(f"Resource '{changes.get('name')}' already exists")
    await db.refresh(resource)

    logger.info("resource_updated", resource_id=resource.id, fields=sorted(changes))
    return resource


async def delete_resource(db: AsyncSession, resource_id: int) -> None:
    """Delete a resource. Its bookings are left in place."""
    resource = await get_resource(db, resource_id)
    await db.delete(resource)
    await db.commit()
    logger.info("resource_deleted", resource_id=resource_id)
