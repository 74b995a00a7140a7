"""
Delivery route (numeric id) and driver service.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.exceptions import ConflictError, ResourceNotFoundError
from backoffice.app.models.driver import DeliveryRoute, DeliveryRouteOrder, Driver
from backoffice.app.schemas.driver import DeliveryRouteCreate, DeliveryRouteOrderIn, DeliveryRouteUpdate

logger = logging.getLogger(__name__)


async def list_drivers(db: AsyncSession) -> List[Driver]:
    result = await db.execute(select(Driver).order_by(Driver.id))
    return list(result.scalars().all())


async def _require_driver(db: AsyncSession, driver_id: int) -> Driver:
    driver = await db.get(Driver, driver_id)
    if driver is None:
        raise ResourceNotFoundError("Driver", driver_id)
    return driver


def _build_order(route_id: int, data: DeliveryRouteOrderIn) -> DeliveryRouteOrder:
    order = DeliveryRouteOrder(
        route_id=route_id,
        sequence=data.sequence,
        value=data.value,
        priority=data.priority,
    )
    if data.id is not None:
        order.id = data.id
    return order


async def list_delivery_routes(db: AsyncSession) -> List[DeliveryRoute]:
    result = await db.execute(select(DeliveryRoute).order_by(DeliveryRoute.date.desc(), DeliveryRoute.id))
    return list(result.scalars().all())


async def get_delivery_route(db: AsyncSession, route_id: int, refresh: bool = False) -> Optional[DeliveryRoute]:
    query = select(DeliveryRoute).where(DeliveryRoute.id == route_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def create_delivery_route(db: AsyncSession, data: DeliveryRouteCreate) -> DeliveryRoute:
    """
    Raises:
        ResourceNotFoundError: unknown driver
        ConflictError: route id already exists
    """
    if await db.get(DeliveryRoute, data.id) is not None:
        raise ConflictError("Route", data.id)
    await _require_driver(db, data.driver_id)

    route = DeliveryRoute(id=data.id, driver_id=data.driver_id, date=data.date, notes=data.notes)
    db.add(route)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Route", data.id)

    for order_data in data.orders:
        db.add(_build_order(route.id, order_data))

    await db.commit()
    return await get_delivery_route(db, route.id, refresh=True)


async def update_delivery_route(db: AsyncSession, route_id: int, data: DeliveryRouteUpdate) -> DeliveryRoute:
    """Orders with a known id are updated in place, the rest are added."""
    route = await get_delivery_route(db, route_id)
    if route is None:
        raise ResourceNotFoundError("Route", route_id)

    if data.driver_id is not None:
        await _require_driver(db, data.driver_id)
        route.driver_id = data.driver_id
    if data.date is not None:
        route.date = data.date
    if "notes" in data.model_fields_set:
        route.notes = data.notes

    if data.orders is not None:
        existing = {order.id: order for order in route.orders}
        for order_data in data.orders:
            order = existing.get(order_data.id) if order_data.id is not None else None
            if order is None:
                db.add(_build_order(route.id, order_data))
                continue
            order.sequence = order_data.sequence
            order.value = order_data.value
            order.priority = order_data.priority

    await db.commit()
    return await get_delivery_route(db, route_id, refresh=True)


async def delete_delivery_route(db: AsyncSession, route_id: int) -> None:
    route = await get_delivery_route(db, route_id)
    if route is None:
        raise ResourceNotFoundError("Route", route_id)
    await db.delete(route)
    await db.commit()
    logger.info("Delivery route %s deleted", route_id)
