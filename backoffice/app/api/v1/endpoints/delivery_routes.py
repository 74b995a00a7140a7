"""
Delivery route (numeric id) and driver API endpoints.

Single route lookups read through to the legacy external service.
"""

from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.dependencies import get_delivery_route_client
from backoffice.app.db.session import get_db
from backoffice.app.schemas.common import Envelope, MessageResponse, Source
from backoffice.app.schemas.driver import DeliveryRouteCreate, DeliveryRouteRead, DeliveryRouteUpdate, DriverRead
from backoffice.app.schemas.external import DeliveryRouteResult, ExternalDeliveryRoute
from backoffice.app.services import delivery_route_service
from backoffice.app.services.external_service import ExternalServiceClient
from backoffice.app.services.read_through import ReadThroughResolver

router = APIRouter(prefix="/routes", tags=["Delivery Routes"])
drivers_router = APIRouter(prefix="/drivers", tags=["Drivers"])


@drivers_router.get("", response_model=Envelope[List[DriverRead]])
async def list_drivers(db: AsyncSession = Depends(get_db)):
    drivers = await delivery_route_service.list_drivers(db)
    return Envelope(message="Drivers retrieved", data=[DriverRead.model_validate(d) for d in drivers])


@router.get("", response_model=Envelope[List[DeliveryRouteRead]])
async def list_delivery_routes(db: AsyncSession = Depends(get_db)):
    routes = await delivery_route_service.list_delivery_routes(db)
    return Envelope(message="Routes retrieved", data=[DeliveryRouteRead.model_validate(r) for r in routes])


@router.get("/{route_id}", response_model=Envelope[DeliveryRouteResult])
async def get_delivery_route(
    route_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
    client: ExternalServiceClient = Depends(get_delivery_route_client),
):
    async def fetch_local(key):
        return await delivery_route_service.get_delivery_route(db, key)

    async def fetch_external(key):
        return await client.fetch_one(ExternalDeliveryRoute, key)

    resolved = await ReadThroughResolver("Route", fetch_local, fetch_external).resolve(route_id)

    data = resolved.entity
    if resolved.source == Source.LOCAL:
        data = DeliveryRouteRead.model_validate(data)
    return Envelope(message="Route retrieved", data=data, source=resolved.source)


@router.post("", response_model=Envelope[DeliveryRouteRead], status_code=status.HTTP_201_CREATED)
async def create_delivery_route(route_data: DeliveryRouteCreate, db: AsyncSession = Depends(get_db)):
    """Create a route for an existing driver together with its orders."""
    route = await delivery_route_service.create_delivery_route(db, route_data)
    return Envelope(message="Route created", data=DeliveryRouteRead.model_validate(route))


@router.put("/{route_id}", response_model=Envelope[DeliveryRouteRead])
async def update_delivery_route(
    route_data: DeliveryRouteUpdate,
    route_id: int = Path(..., gt=0),
    db: AsyncSession = Depends(get_db),
):
    route = await delivery_route_service.update_delivery_route(db, route_id, route_data)
    return Envelope(message="Route updated", data=DeliveryRouteRead.model_validate(route))


@router.delete("/{route_id}", response_model=MessageResponse)
async def delete_delivery_route(route_id: int = Path(..., gt=0), db: AsyncSession = Depends(get_db)):
    await delivery_route_service.delete_delivery_route(db, route_id)
    return MessageResponse(message="Route deleted")
