"""
Route group and route service.

A route group owns its routes and a route owns its ordered stops, so
deleting a group removes everything under it.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.exceptions import ConflictError, ResourceNotFoundError
from backoffice.app.models.catalog import Address, TruckType
from backoffice.app.models.driver import Driver
from backoffice.app.models.route_group import Route, RouteGroup, RouteStop
from backoffice.app.schemas.route_group import (
    RouteCreate,
    RouteGroupCreate,
    RouteGroupUpdate,
    RouteStopIn,
    RouteUpdate,
)
from backoffice.app.services.references import connect_or_create, connect_truck

logger = logging.getLogger(__name__)


# Route groups

async def list_route_groups(db: AsyncSession) -> List[RouteGroup]:
    result = await db.execute(select(RouteGroup).order_by(RouteGroup.name, RouteGroup.id))
    return list(result.scalars().all())


async def get_route_group(db: AsyncSession, group_id: str, refresh: bool = False) -> Optional[RouteGroup]:
    query = select(RouteGroup).where(RouteGroup.id == group_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def create_route_group(db: AsyncSession, data: RouteGroupCreate) -> RouteGroup:
    """
    Raises:
        ConflictError: group or nested route id already exists
        ResourceNotFoundError: a nested route names an unknown driver
    """
    group = RouteGroup(
        id=data.id,
        name=data.name,
        description=data.description,
        business_segment_id=data.business_segment_id,
    )
    db.add(group)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Route group", data.id)

    for route_data in data.routes:
        await _add_route(db, group.id, route_data)

    await db.commit()
    logger.info("Route group %s created with %d routes", group.id, len(data.routes))
    return await get_route_group(db, group.id, refresh=True)


async def update_route_group(db: AsyncSession, group_id: str, data: RouteGroupUpdate) -> RouteGroup:
    group = await get_route_group(db, group_id)
    if group is None:
        raise ResourceNotFoundError("Route group", group_id)

    changes = data.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)
    for field, value in changes.items():
        setattr(group, field, value)

    await db.commit()
    return await get_route_group(db, group_id, refresh=True)


async def delete_route_group(db: AsyncSession, group_id: str) -> None:
    group = await get_route_group(db, group_id)
    if group is None:
        raise ResourceNotFoundError("Route group", group_id)
    await db.delete(group)
    await db.commit()
    logger.info("Route group %s deleted", group_id)


# Routes

async def _build_stops(db: AsyncSession, stops: List[RouteStopIn]) -> List[RouteStop]:
    built = []
    for stop in stops:
        address = await connect_or_create(db, Address, stop.address)
        built.append(RouteStop(sequence=stop.sequence, address_id=address.id, notes=stop.notes))
    return built


async def _check_driver(db: AsyncSession, driver_id: Optional[int]) -> None:
    if driver_id is not None and await db.get(Driver, driver_id) is None:
        raise ResourceNotFoundError("Driver", driver_id)


async def _add_route(db: AsyncSession, group_id: str, data: RouteCreate) -> Route:
    if await db.get(Route, data.id) is not None:
        raise ConflictError("Route", data.id)
    await _check_driver(db, data.driver_id)

    truck = await connect_truck(db, data.truck)
    truck_type = await connect_or_create(db, TruckType, data.truck_type)
    route = Route(
        id=data.id,
        route_group_id=group_id,
        name=data.name,
        code=data.code,
        truck_id=truck.id if truck else None,
        truck_type_id=truck_type.id if truck_type else None,
        driver_id=data.driver_id,
        stops=await _build_stops(db, data.stops),
    )
    db.add(route)
    return route


async def list_routes(db: AsyncSession, group_id: str) -> List[Route]:
    result = await db.execute(
        select(Route).where(Route.route_group_id == group_id).order_by(Route.name, Route.id)
    )
    return list(result.scalars().all())


async def get_route(db: AsyncSession, group_id: str, route_id: str, refresh: bool = False) -> Optional[Route]:
    query = select(Route).where(Route.id == route_id, Route.route_group_id == group_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def create_route(db: AsyncSession, group_id: str, data: RouteCreate) -> Route:
    """
    Raises:
        ResourceNotFoundError: group missing locally, or unknown driver
        ConflictError: route id already exists
    """
    if await get_route_group(db, group_id) is None:
        raise ResourceNotFoundError("Route group", group_id)

    await _add_route(db, group_id, data)
    await db.commit()
    return await get_route(db, group_id, data.id, refresh=True)


async def update_route(db: AsyncSession, group_id: str, route_id: str, data: RouteUpdate) -> Route:
    route = await get_route(db, group_id, route_id)
    if route is None:
        raise ResourceNotFoundError("Route", route_id)

    fields = data.model_fields_set
    if data.name is not None:
        route.name = data.name
    if "code" in fields:
        route.code = data.code
    if "driver_id" in fields:
        await _check_driver(db, data.driver_id)
        route.driver_id = data.driver_id
    if "truck" in fields:
        truck = await connect_truck(db, data.truck)
        route.truck_id = truck.id if truck else None
    if "truck_type" in fields:
        truck_type = await connect_or_create(db, TruckType, data.truck_type)
        route.truck_type_id = truck_type.id if truck_type else None
    if data.stops is not None:
        route.stops = await _build_stops(db, data.stops)

    await db.commit()
    return await get_route(db, group_id, route_id, refresh=True)


async def delete_route(db: AsyncSession, group_id: str, route_id: str) -> None:
    route = await get_route(db, group_id, route_id)
    if route is None:
        raise ResourceNotFoundError("Route", route_id)
    await db.delete(route)
    await db.commit()
