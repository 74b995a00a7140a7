"""
Reference entity schemas.

The same shapes are used for inline (connect-or-create) input and output.
"""

from typing import Optional

from pydantic import Field

from backoffice.app.schemas.common import CamelModel, NonEmptyStr


class CustomerSchema(CamelModel):
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)
    document: Optional[str] = Field(None, max_length=50)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)


class AddressSchema(CamelModel):
    id: NonEmptyStr
    street: str = Field(..., min_length=1, max_length=300)
    city: Optional[str] = Field(None, max_length=120)
    region: Optional[str] = Field(None, max_length=120)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class ProductSchema(CamelModel):
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)
    sku: Optional[str] = Field(None, max_length=64)
    unit: Optional[str] = Field(None, max_length=30)


class SalesRepresentativeSchema(CamelModel):
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)
    phone: Optional[str] = Field(None, max_length=50)


class OrderGroupSchema(CamelModel):
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)


class PointOfInterestSchema(CamelModel):
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=200)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    address: Optional[str] = Field(None, max_length=300)


class TruckTypeSchema(CamelModel):
    id: NonEmptyStr
    name: str = Field(..., min_length=1, max_length=120)
    capacity_kg: Optional[float] = Field(None, gt=0)


class TruckSchema(CamelModel):
    id: NonEmptyStr
    plate: str = Field(..., min_length=1, max_length=20)
    truck_type: Optional[TruckTypeSchema] = None
