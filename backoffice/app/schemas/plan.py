"""
Plan Pydantic schemas.

Defines request and response models for plans and their nested visits,
orders, line items, payment methods and reassignments.
"""

from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import Field, model_validator

from backoffice.app.models.enums import (
    LineItemStatus,
    OrderKind,
    OrderStatus,
    PaymentMethodType,
    VisitStatus,
)
from backoffice.app.schemas.catalog import (
    AddressSchema,
    CustomerSchema,
    OrderGroupSchema,
    PointOfInterestSchema,
    ProductSchema,
    SalesRepresentativeSchema,
    TruckSchema,
)
from backoffice.app.schemas.common import CamelModel, NonEmptyStr, PositiveInt


# ---------------------------------------------------------------- input

class LineItemIn(CamelModel):
    """Line item payload; ``id`` selects an existing item on update."""
    id: Optional[PositiveInt] = None
    product: ProductSchema
    quantity: float = Field(..., ge=0)
    unit_price: float = Field(..., ge=0)
    tax_rate: float = Field(0.0, ge=0, le=1, description="Fraction, 0.19 == 19%")
    actual_quantity: Optional[float] = Field(None, ge=0)
    actual_value: Optional[float] = Field(None, ge=0)
    status: LineItemStatus = LineItemStatus.PENDING


class OrderIn(CamelModel):
    id: NonEmptyStr
    visit_id: Optional[NonEmptyStr] = None
    kind: Optional[OrderKind] = None
    sequence: int = Field(0, ge=0)
    customer: CustomerSchema
    address: AddressSchema
    sales_representative: Optional[SalesRepresentativeSchema] = None
    order_group: Optional[OrderGroupSchema] = None
    status: OrderStatus = OrderStatus.PENDING
    notes: Optional[str] = None
    line_items: List[LineItemIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def visit_and_kind_together(self):
        if (self.visit_id is None) != (self.kind is None):
            raise ValueError("visitId and kind must be provided together")
        return self


class PaymentMethodIn(CamelModel):
    method: PaymentMethodType
    amount: float = Field(..., ge=0)
    reference: Optional[str] = Field(None, max_length=100)


class ReassignmentIn(CamelModel):
    from_user_id: Optional[NonEmptyStr] = None
    to_user_id: NonEmptyStr
    reason: Optional[str] = Field(None, max_length=300)
    reassigned_at: Optional[datetime] = None


class VisitIn(CamelModel):
    id: NonEmptyStr
    sequence: int = Field(0, ge=0)
    customer: CustomerSchema
    address: AddressSchema
    status: VisitStatus = VisitStatus.PENDING
    planned_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    notes: Optional[str] = None
    payment_methods: List[PaymentMethodIn] = Field(default_factory=list)
    reassignments: List[ReassignmentIn] = Field(default_factory=list)


def _check_nested_ids(visits: Optional[List[VisitIn]], orders: Optional[List[OrderIn]]) -> None:
    visit_ids = [visit.id for visit in visits or []]
    if len(visit_ids) != len(set(visit_ids)):
        raise ValueError("visit ids must be unique within a plan")
    order_ids = [order.id for order in orders or []]
    if len(order_ids) != len(set(order_ids)):
        raise ValueError("order ids must be unique within a plan")


class PlanBase(CamelModel):
    operation_type: NonEmptyStr
    date: date_type
    active_dates: List[date_type] = Field(default_factory=list)
    assigned_user_id: NonEmptyStr

    route_id: Optional[NonEmptyStr] = None
    route_group_id: Optional[NonEmptyStr] = None
    business_segment_id: Optional[NonEmptyStr] = None
    truck: Optional[TruckSchema] = None
    start_point: Optional[PointOfInterestSchema] = None
    end_point: Optional[PointOfInterestSchema] = None

    planned_start_time: Optional[datetime] = None
    planned_end_time: Optional[datetime] = None
    planned_distance_km: Optional[float] = Field(None, ge=0)
    planned_duration_minutes: Optional[int] = Field(None, ge=0)
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    actual_distance_km: Optional[float] = Field(None, ge=0)
    actual_duration_minutes: Optional[int] = Field(None, ge=0)


class PlanCreate(PlanBase):
    """Schema for creating a plan together with its visits and orders."""
    id: NonEmptyStr
    visits: List[VisitIn] = Field(default_factory=list)
    orders: List[OrderIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def orders_reference_payload_visits(self):
        _check_nested_ids(self.visits, self.orders)
        visit_ids = {visit.id for visit in self.visits}
        for order in self.orders:
            if order.visit_id is not None and order.visit_id not in visit_ids:
                raise ValueError(f"order '{order.id}' references unknown visit '{order.visit_id}'")
        return self


class PlanUpdate(CamelModel):
    """
    Schema for partially updating a plan.

    Top-level fields are optional. When ``visits`` or ``orders`` are sent,
    each listed item is upserted by id; unlisted items are left untouched.
    """
    operation_type: Optional[NonEmptyStr] = None
    date: Optional[date_type] = None
    active_dates: Optional[List[date_type]] = None
    assigned_user_id: Optional[NonEmptyStr] = None

    route_id: Optional[NonEmptyStr] = None
    route_group_id: Optional[NonEmptyStr] = None
    business_segment_id: Optional[NonEmptyStr] = None
    truck: Optional[TruckSchema] = None
    start_point: Optional[PointOfInterestSchema] = None
    end_point: Optional[PointOfInterestSchema] = None

    planned_start_time: Optional[datetime] = None
    planned_end_time: Optional[datetime] = None
    planned_distance_km: Optional[float] = Field(None, ge=0)
    planned_duration_minutes: Optional[int] = Field(None, ge=0)
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    actual_distance_km: Optional[float] = Field(None, ge=0)
    actual_duration_minutes: Optional[int] = Field(None, ge=0)

    visits: Optional[List[VisitIn]] = None
    orders: Optional[List[OrderIn]] = None

    @model_validator(mode="after")
    def unique_nested_ids(self):
        _check_nested_ids(self.visits, self.orders)
        return self


# ---------------------------------------------------------------- output

class LineItemRead(CamelModel):
    id: int
    product: ProductSchema
    quantity: float
    unit_price: float
    tax_rate: float
    value: float
    actual_quantity: Optional[float] = None
    actual_value: Optional[float] = None
    status: LineItemStatus


class OrderRead(CamelModel):
    id: str
    plan_id: str
    visit_id: Optional[str] = None
    kind: Optional[OrderKind] = None
    sequence: int
    customer: CustomerSchema
    address: AddressSchema
    sales_representative: Optional[SalesRepresentativeSchema] = None
    order_group: Optional[OrderGroupSchema] = None
    status: OrderStatus
    notes: Optional[str] = None
    line_items: List[LineItemRead]
    created_at: datetime
    updated_at: datetime


class OrderRef(CamelModel):
    id: str
    status: OrderStatus


class PaymentMethodRead(CamelModel):
    id: int
    method: PaymentMethodType
    amount: float
    reference: Optional[str] = None


class ReassignmentRead(CamelModel):
    id: int
    from_user_id: Optional[str] = None
    to_user_id: str
    reason: Optional[str] = None
    reassigned_at: datetime


class VisitRead(CamelModel):
    id: str
    plan_id: str
    sequence: int
    customer: CustomerSchema
    address: AddressSchema
    status: VisitStatus
    planned_arrival: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    notes: Optional[str] = None
    delivery_orders: List[OrderRef]
    pickup_orders: List[OrderRef]
    payment_methods: List[PaymentMethodRead]
    reassignments: List[ReassignmentRead]


class PlanRead(CamelModel):
    id: str
    operation_type: str
    date: date_type
    active_dates: List[date_type]
    assigned_user_id: str

    route_id: Optional[str] = None
    route_group_id: Optional[str] = None
    business_segment_id: Optional[str] = None
    truck: Optional[TruckSchema] = None
    start_point: Optional[PointOfInterestSchema] = None
    end_point: Optional[PointOfInterestSchema] = None

    planned_start_time: Optional[datetime] = None
    planned_end_time: Optional[datetime] = None
    planned_distance_km: Optional[float] = None
    planned_duration_minutes: Optional[int] = None
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    actual_distance_km: Optional[float] = None
    actual_duration_minutes: Optional[int] = None

    visits: List[VisitRead]
    orders: List[OrderRead]
    created_at: datetime
    updated_at: datetime
