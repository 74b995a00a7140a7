"""
Driver and numeric-id delivery route models.

Drivers are seeded from a CSV file; a delivery route assigns a driver to a
date and carries its sequenced orders inline.
"""

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.app.db.session import Base


class Driver(Base):
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(200), nullable=False)

    def __repr__(self):
        return f"<Driver(id={self.id}, name='{self.name}')>"


class DeliveryRoute(Base):
    __tablename__ = "delivery_routes"

    id = Column(Integer, primary_key=True, autoincrement=False)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    driver = relationship("Driver", lazy="selectin")
    orders = relationship(
        "DeliveryRouteOrder",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="DeliveryRouteOrder.sequence",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<DeliveryRoute(id={self.id}, driver_id={self.driver_id}, date={self.date})>"


class DeliveryRouteOrder(Base):
    __tablename__ = "delivery_route_orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_id = Column(Integer, ForeignKey("delivery_routes.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    value = Column(Float, nullable=False)
    priority = Column(Boolean, default=False, nullable=False)

    route = relationship("DeliveryRoute", back_populates="orders")
