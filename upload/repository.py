# =============================================================================
# USERHUB BACKEND - RESOURCE REPOSITORY
# =============================================================================
# File: upload/repository.py
# Description: Data access for uploaded file metadata
# =============================================================================

from typing import List, Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import Resource, ResourceStatus


class ResourceRepository:
    """Data access layer for Resource rows. Callers own the transaction."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def create(self, **fields) -> Resource:
        resource = Resource(**fields)
        self._session.add(resource)
        await self._session.flush()
        await self._session.refresh(resource)
        return resource

    async def get_by_resource_id(self, resource_id: str) -> Optional[Resource]:
        result = await self._session.execute(
            select(Resource).where(Resource.resource_id == resource_id)
        )
        return result.scalar_one_or_none()

    async def list_by_type(
        self,
        resource_type: str,
        offset: int = 0,
        limit: int = 10,
    ) -> List[Resource]:
        """Enabled resources of one type, newest first."""
        result = await self._session.execute(
            select(Resource)
            .where(Resource.type == resource_type, Resource.status == ResourceStatus.ENABLED)
            .order_by(Resource.created_at.desc(), Resource.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def count_by_type(self, resource_type: str) -> int:
        result = await self._session.execute(
            select(func.count())
            .select_from(Resource)
            .where(Resource.type == resource_type, Resource.status == ResourceStatus.ENABLED)
        )
        return result.scalar_one()

    async def mark_deleted(self, resource: Resource) -> Resource:
        resource.status = ResourceStatus.DELETED
        await self._session.flush()
        return resource
