"""
Connect-or-create helpers for reference entities.

A nested reference is connected when a row with its id already exists and
inserted otherwise. Existing rows are never overwritten from a nested
payload.
"""

from typing import Any, Iterable, Optional, Type

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.models.catalog import Truck, TruckType


async def connect_or_create(
    db: AsyncSession,
    model: Type[Any],
    data: Optional[BaseModel],
    exclude: Iterable[str] = (),
    **overrides: Any,
) -> Optional[Any]:
    if data is None:
        return None

    instance = await db.get(model, data.id)
    if instance is None:
        values = data.model_dump(exclude=set(exclude))
        values.update(overrides)
        instance = model(**values)
        db.add(instance)
        # Session runs with autoflush off; flush so later lookups see the row.
        await db.flush()
    return instance


async def connect_truck(db: AsyncSession, data: Optional[BaseModel]) -> Optional[Truck]:
    """Trucks carry an optional nested truck type, resolved first."""
    if data is None:
        return None
    truck_type = await connect_or_create(db, TruckType, data.truck_type)
    return await connect_or_create(
        db,
        Truck,
        data,
        exclude={"truck_type"},
        truck_type_id=truck_type.id if truck_type else None,
    )
