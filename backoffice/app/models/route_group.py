"""
Route Group / Route / Route Stop database models.

A RouteGroup owns its Routes; a Route owns its ordered stops.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from backoffice.app.db.session import Base


class RouteGroup(Base):
    __tablename__ = "route_groups"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    business_segment_id = Column(String(64), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    routes = relationship(
        "Route",
        back_populates="route_group",
        cascade="all, delete-orphan",
        order_by="Route.name",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<RouteGroup(id='{self.id}', name='{self.name}')>"


class Route(Base):
    """
    A named sequence of stops inside a route group.

    Truck, truck type and driver assignments are optional.
    """
    __tablename__ = "routes"

    id = Column(String(64), primary_key=True)
    route_group_id = Column(String(64), ForeignKey("route_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    code = Column(String(50), nullable=True)

    truck_id = Column(String(64), ForeignKey("trucks.id"), nullable=True)
    truck_type_id = Column(String(64), ForeignKey("truck_types.id"), nullable=True)
    driver_id = Column(Integer, ForeignKey("drivers.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    route_group = relationship("RouteGroup", back_populates="routes")
    truck = relationship("Truck", lazy="selectin")
    truck_type = relationship("TruckType", lazy="selectin")
    driver = relationship("Driver", lazy="selectin")

    stops = relationship(
        "RouteStop",
        back_populates="route",
        cascade="all, delete-orphan",
        order_by="RouteStop.sequence",
        lazy="selectin",
    )

    def __repr__(self):
        return f"<Route(id='{self.id}', group='{self.route_group_id}', name='{self.name}')>"


class RouteStop(Base):
    __tablename__ = "route_stops"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    route_id = Column(String(64), ForeignKey("routes.id", ondelete="CASCADE"), nullable=False, index=True)
    sequence = Column(Integer, nullable=False)
    address_id = Column(String(64), ForeignKey("addresses.id"), nullable=False)
    notes = Column(Text, nullable=True)

    route = relationship("Route", back_populates="stops")
    address = relationship("Address", lazy="selectin")
