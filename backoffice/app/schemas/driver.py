"""
Driver and delivery route (numeric id) Pydantic schemas.
"""

from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import Field

from backoffice.app.schemas.common import CamelModel, PositiveInt


class DriverRead(CamelModel):
    id: int
    name: str


class DeliveryRouteOrderIn(CamelModel):
    """Embedded order; ``id`` selects an existing order on update."""
    id: Optional[PositiveInt] = None
    sequence: int = Field(..., ge=0)
    value: float = Field(..., ge=0)
    priority: bool = False


class DeliveryRouteCreate(CamelModel):
    id: PositiveInt
    driver_id: PositiveInt
    date: date_type
    notes: Optional[str] = None
    orders: List[DeliveryRouteOrderIn] = Field(default_factory=list)


class DeliveryRouteUpdate(CamelModel):
    driver_id: Optional[PositiveInt] = None
    date: Optional[date_type] = None
    notes: Optional[str] = None
    orders: Optional[List[DeliveryRouteOrderIn]] = None


class DeliveryRouteOrderRead(CamelModel):
    id: int
    sequence: int
    value: float
    priority: bool


class DeliveryRouteRead(CamelModel):
    id: int
    driver_id: int
    driver: Optional[DriverRead] = None
    date: date_type
    notes: Optional[str] = None
    orders: List[DeliveryRouteOrderRead]
    created_at: datetime
    updated_at: datetime
