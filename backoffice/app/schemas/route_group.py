"""
Route Group / Route Pydantic schemas.

Defines request and response models for route groups and their routes.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from backoffice.app.schemas.catalog import AddressSchema, TruckSchema, TruckTypeSchema
from backoffice.app.schemas.common import CamelModel, NonEmptyStr, PositiveInt
from backoffice.app.schemas.driver import DriverRead


class RouteStopIn(CamelModel):
    sequence: int = Field(..., ge=0)
    address: AddressSchema
    notes: Optional[str] = None


class RouteCreate(CamelModel):
    """Schema for creating a route inside a route group."""
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    truck: Optional[TruckSchema] = None
    truck_type: Optional[TruckTypeSchema] = None
    driver_id: Optional[PositiveInt] = None
    stops: List[RouteStopIn] = Field(default_factory=list)


class RouteUpdate(CamelModel):
    """Schema for updating a route; ``stops`` replaces the stop list when sent."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    truck: Optional[TruckSchema] = None
    truck_type: Optional[TruckTypeSchema] = None
    driver_id: Optional[PositiveInt] = None
    stops: Optional[List[RouteStopIn]] = None


class RouteGroupCreate(CamelModel):
    """Schema for creating a route group, optionally with its routes."""
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    business_segment_id: Optional[NonEmptyStr] = None
    routes: List[RouteCreate] = Field(default_factory=list)


class RouteGroupUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    business_segment_id: Optional[NonEmptyStr] = None


class RouteStopRead(CamelModel):
    id: int
    sequence: int
    address: AddressSchema
    notes: Optional[str] = None


class RouteRead(CamelModel):
    id: str
    route_group_id: str
    name: str
    code: Optional[str] = None
    truck: Optional[TruckSchema] = None
    truck_type: Optional[TruckTypeSchema] = None
    driver: Optional[DriverRead] = None
    stops: List[RouteStopRead]
    created_at: datetime
    updated_at: datetime


class RouteGroupRead(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    business_segment_id: Optional[str] = None
    routes: List[RouteRead]
    created_at: datetime
    updated_at: datetime
