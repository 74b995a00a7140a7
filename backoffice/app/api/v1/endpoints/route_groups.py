"""
Route group API endpoints, including the routes nested under a group.

Single group and single route lookups read through to the external
route group service.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.dependencies import get_route_group_client
from backoffice.app.db.session import get_db
from backoffice.app.schemas.common import Envelope, MessageResponse, NonEmptyStr, Source
from backoffice.app.schemas.external import ExternalRoute, ExternalRouteGroup, RouteGroupResult, RouteResult
from backoffice.app.schemas.route_group import (
    RouteCreate,
    RouteGroupCreate,
    RouteGroupRead,
    RouteGroupUpdate,
    RouteRead,
    RouteUpdate,
)
from backoffice.app.services import route_group_service
from backoffice.app.services.external_service import ExternalServiceClient
from backoffice.app.services.read_through import ReadThroughResolver

router = APIRouter(prefix="/route-groups", tags=["Route Groups"])


@router.get("", response_model=Envelope[List[RouteGroupRead]])
async def list_route_groups(db: AsyncSession = Depends(get_db)):
    groups = await route_group_service.list_route_groups(db)
    return Envelope(
        message="Route groups retrieved",
        data=[RouteGroupRead.model_validate(group) for group in groups],
    )


@router.get("/{group_id}", response_model=Envelope[RouteGroupResult])
async def get_route_group(
    group_id: NonEmptyStr,
    db: AsyncSession = Depends(get_db),
    client: ExternalServiceClient = Depends(get_route_group_client),
):
    async def fetch_local(key):
        return await route_group_service.get_route_group(db, key)

    async def fetch_external(key):
        return await client.fetch_one(ExternalRouteGroup, key)

    resolved = await ReadThroughResolver("Route group", fetch_local, fetch_external).resolve(group_id)

    data = resolved.entity
    if resolved.source == Source.LOCAL:
        data = RouteGroupRead.model_validate(data)
    return Envelope(message="Route group retrieved", data=data, source=resolved.source)


@router.post("", response_model=Envelope[RouteGroupRead], status_code=status.HTTP_201_CREATED)
async def create_route_group(group_data: RouteGroupCreate, db: AsyncSession = Depends(get_db)):
    """Create a route group, optionally with its routes."""
    group = await route_group_service.create_route_group(db, group_data)
    return Envelope(message="Route group created", data=RouteGroupRead.model_validate(group))


@router.put("/{group_id}", response_model=Envelope[RouteGroupRead])
async def update_route_group(
    group_id: NonEmptyStr,
    group_data: RouteGroupUpdate,
    db: AsyncSession = Depends(get_db),
):
    group = await route_group_service.update_route_group(db, group_id, group_data)
    return Envelope(message="Route group updated", data=RouteGroupRead.model_validate(group))


@router.delete("/{group_id}", response_model=MessageResponse)
async def delete_route_group(group_id: NonEmptyStr, db: AsyncSession = Depends(get_db)):
    """Delete a route group with all of its routes and stops."""
    await route_group_service.delete_route_group(db, group_id)
    return MessageResponse(message="Route group deleted")


# Routes within a group

@router.get("/{group_id}/routes", response_model=Envelope[List[RouteRead]])
async def list_routes(group_id: NonEmptyStr, db: AsyncSession = Depends(get_db)):
    routes = await route_group_service.list_routes(db, group_id)
    return Envelope(message="Routes retrieved", data=[RouteRead.model_validate(route) for route in routes])


@router.get("/{group_id}/routes/{route_id}", response_model=Envelope[RouteResult])
async def get_route(
    group_id: NonEmptyStr,
    route_id: NonEmptyStr,
    db: AsyncSession = Depends(get_db),
    client: ExternalServiceClient = Depends(get_route_group_client),
):
    async def fetch_local(gid, rid):
        return await route_group_service.get_route(db, gid, rid)

    async def fetch_external(gid, rid):
        return await client.fetch_one(ExternalRoute, gid, "routes", rid)

    resolved = await ReadThroughResolver("Route", fetch_local, fetch_external).resolve(
        group_id,
        route_id,
        description=f"'{route_id}' in group '{group_id}'",
    )

    data = resolved.entity
    if resolved.source == Source.LOCAL:
        data = RouteRead.model_validate(data)
    return Envelope(message="Route retrieved", data=data, source=resolved.source)


@router.post("/{group_id}/routes", response_model=Envelope[RouteRead], status_code=status.HTTP_201_CREATED)
async def create_route(group_id: NonEmptyStr, route_data: RouteCreate, db: AsyncSession = Depends(get_db)):
    route = await route_group_service.create_route(db, group_id, route_data)
    return Envelope(message="Route created", data=RouteRead.model_validate(route))


@router.put("/{group_id}/routes/{route_id}", response_model=Envelope[RouteRead])
async def update_route(
    group_id: NonEmptyStr,
    route_id: NonEmptyStr,
    route_data: RouteUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a route; ``stops`` replaces the whole stop list when sent."""
    route = await route_group_service.update_route(db, group_id, route_id, route_data)
    return Envelope(message="Route updated", data=RouteRead.model_validate(route))


@router.delete("/{group_id}/routes/{route_id}", response_model=MessageResponse)
async def delete_route(group_id: NonEmptyStr, route_id: NonEmptyStr, db: AsyncSession = Depends(get_db)):
    await route_group_service.delete_route(db, group_id, route_id)
    return MessageResponse(message="Route deleted")
