"""
Reference entities shared by plans and routes.

These rows are connected by id when they already exist and created inline
otherwise, so writes never overwrite them.
"""

from sqlalchemy import Column, Float, ForeignKey, String
from sqlalchemy.orm import relationship

from backoffice.app.db.session import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    document = Column(String(50), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(64), primary_key=True)
    street = Column(String(300), nullable=False)
    city = Column(String(120), nullable=True)
    region = Column(String(120), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    sku = Column(String(64), nullable=True)
    unit = Column(String(30), nullable=True)


class SalesRepresentative(Base):
    __tablename__ = "sales_representatives"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    phone = Column(String(50), nullable=True)


class OrderGroup(Base):
    __tablename__ = "order_groups"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)


class PointOfInterest(Base):
    """Named geo-located place used as a plan start or end point."""
    __tablename__ = "points_of_interest"

    id = Column(String(64), primary_key=True)
    name = Column(String(200), nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    address = Column(String(300), nullable=True)


class TruckType(Base):
    __tablename__ = "truck_types"

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    capacity_kg = Column(Float, nullable=True)


class Truck(Base):
    __tablename__ = "trucks"

    id = Column(String(64), primary_key=True)
    plate = Column(String(20), nullable=False)
    truck_type_id = Column(String(64), ForeignKey("truck_types.id"), nullable=True)

    truck_type = relationship("TruckType", lazy="selectin")
