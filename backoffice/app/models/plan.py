"""
Plan aggregate database models.

A Plan owns its Visits and Orders exclusively; Orders own their LineItems
and Visits own their payment methods and reassignment history. Every owned
collection cascades on delete.
"""

from sqlalchemy import JSON, Column, Date, DateTime, Enum, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.app.db.session import Base
from backoffice.app.models.enums import (
    LineItemStatus,
    OrderKind,
    OrderStatus,
    PaymentMethodType,
    VisitStatus,
)


class Plan(Base):
    """
    Delivery plan for one assigned user on one scheduled date.

    Route, route group and business segment are kept as plain identifiers
    because they may only exist in the external service.
    """
    __tablename__ = "plans"

    id = Column(String(64), primary_key=True)
    operation_type = Column(String(50), nullable=False)
    date = Column(Date, nullable=False, index=True)
    active_dates = Column(JSON, nullable=False, default=list)
    assigned_user_id = Column(String(64), nullable=False, index=True)

    route_id = Column(String(64), nullable=True)
    route_group_id = Column(String(64), nullable=True)
    business_segment_id = Column(String(64), nullable=True)
    truck_id = Column(String(64), ForeignKey("trucks.id"), nullable=True)

    start_point_id = Column(String(64), ForeignKey("points_of_interest.id"), nullable=True)
    end_point_id = Column(String(64), ForeignKey("points_of_interest.id"), nullable=True)

    # Planned vs actual metrics
    planned_start_time = Column(DateTime(timezone=True), nullable=True)
    planned_end_time = Column(DateTime(timezone=True), nullable=True)
    planned_distance_km = Column(Float, nullable=True)
    planned_duration_minutes = Column(Integer, nullable=True)
    actual_start_time = Column(DateTime(timezone=True), nullable=True)
    actual_end_time = Column(DateTime(timezone=True), nullable=True)
    actual_distance_km = Column(Float, nullable=True)
    actual_duration_minutes = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    truck = relationship("Truck", lazy="selectin")
    start_point = relationship("PointOfInterest", foreign_keys=[start_point_id], lazy="selectin")
    end_point = relationship("PointOfInterest", foreign_keys=[end_point_id], lazy="selectin")

    visits = relationship(
        "Visit",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="Visit.sequence",
        lazy="selectin",
    )
    orders = relationship(
        "Order",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="Order.sequence",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Plan(id='{self.id}', date={self.date}, assigned_user_id='{self.assigned_user_id}')>"


class Visit(Base):
    """A stop within a plan at one customer address."""
    __tablename__ = "visits"

    id = Column(String(64), primary_key=True)
    plan_id = Column(String(64), ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False, default=0)

    customer_id = Column(String(64), ForeignKey("customers.id"), nullable=False)
    address_id = Column(String(64), ForeignKey("addresses.id"), nullable=False)

    status = Column(Enum(VisitStatus), default=VisitStatus.PENDING, nullable=False)
    planned_arrival = Column(DateTime(timezone=True), nullable=True)
    actual_arrival = Column(DateTime(timezone=True), nullable=True)
    notes = Column(Text, nullable=True)

    plan = relationship("Plan", back_populates="visits")
    customer = relationship("Customer", lazy="selectin")
    address = relationship("Address", lazy="selectin")

    orders = relationship("Order", back_populates="visit", order_by="Order.sequence", lazy="selectin")
    payment_methods = relationship(
        "PaymentMethod",
        back_populates="visit",
        cascade="all, delete-orphan",
        order_by="PaymentMethod.id",
        lazy="selectin",
    )
    reassignments = relationship(
        "VisitReassignment",
        back_populates="visit",
        cascade="all, delete-orphan",
        order_by="VisitReassignment.id",
        lazy="selectin",
    )

    @property
    def delivery_orders(self):
        return [order for order in self.orders if order.kind == OrderKind.DELIVERY]

    @property
    def pickup_orders(self):
        return [order for order in self.orders if order.kind == OrderKind.PICKUP]

    def __repr__(self):
        return f"<Visit(id='{self.id}', plan_id='{self.plan_id}', seq={self.sequence})>"


class Order(Base):
    """
    Customer order inside a plan.

    ``visit_id`` and ``kind`` are set together when the order is delivered
    or picked up during a specific visit.
    """
    __tablename__ = "orders"

    id = Column(String(64), primary_key=True)
    plan_id = Column(String(64), ForeignKey("plans.id", ondelete="CASCADE"), nullable=False, index=True)
    visit_id = Column(String(64), ForeignKey("visits.id", ondelete="SET NULL"), nullable=True, index=True)
    kind = Column(Enum(OrderKind), nullable=True)
    sequence = Column(Integer, nullable=False, default=0)

    customer_id = Column(String(64), ForeignKey("customers.id"), nullable=False)
    address_id = Column(String(64), ForeignKey("addresses.id"), nullable=False)
    sales_representative_id = Column(String(64), ForeignKey("sales_representatives.id"), nullable=True)
    order_group_id = Column(String(64), ForeignKey("order_groups.id"), nullable=True)

    status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    plan = relationship("Plan", back_populates="orders")
    visit = relationship("Visit", back_populates="orders")
    customer = relationship("Customer", lazy="selectin")
    address = relationship("Address", lazy="selectin")
    sales_representative = relationship("SalesRepresentative", lazy="selectin")
    order_group = relationship("OrderGroup", lazy="selectin")

    line_items = relationship(
        "LineItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="LineItem.id",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Order(id='{self.id}', plan_id='{self.plan_id}', status='{self.status.value}')>"


class LineItem(Base):
    __tablename__ = "line_items"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(String(64), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(64), ForeignKey("products.id"), nullable=False)

    quantity = Column(Float, nullable=False)
    unit_price = Column(Float, nullable=False)
    tax_rate = Column(Float, nullable=False, default=0.0)  # fraction, 0.19 == 19%
    value = Column(Float, nullable=False)

    actual_quantity = Column(Float, nullable=True)
    actual_value = Column(Float, nullable=True)
    status = Column(Enum(LineItemStatus), default=LineItemStatus.PENDING, nullable=False)

    order = relationship("Order", back_populates="line_items")
    product = relationship("Product", lazy="selectin")


class PaymentMethod(Base):
    __tablename__ = "payment_methods"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    visit_id = Column(String(64), ForeignKey("visits.id", ondelete="CASCADE"), nullable=False, index=True)
    method = Column(Enum(PaymentMethodType), nullable=False)
    amount = Column(Float, nullable=False)
    reference = Column(String(100), nullable=True)

    visit = relationship("Visit", back_populates="payment_methods")


class VisitReassignment(Base):
    """History entry recorded when a visit moves from one user to another."""
    __tablename__ = "visit_reassignments"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    visit_id = Column(String(64), ForeignKey("visits.id", ondelete="CASCADE"), nullable=False, index=True)
    from_user_id = Column(String(64), nullable=True)
    to_user_id = Column(String(64), nullable=False)
    reason = Column(String(300), nullable=True)
    reassigned_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    visit = relationship("Visit", back_populates="reassignments")
