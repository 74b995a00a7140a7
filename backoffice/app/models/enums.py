"""
Enumerations shared by models and schemas.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        USER: Regular back-office user (default role)
        ADMIN: Manages users and all data
        MANAGER: Supervises operations, read access to users
    """
    USER = "USER"
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED = "DELIVERED"
    PARTIALLY_DELIVERED = "PARTIALLY_DELIVERED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"


class OrderKind(str, enum.Enum):
    """Role an order plays inside its visit."""
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class LineItemStatus(str, enum.Enum):
    PENDING = "PENDING"
    DELIVERED = "DELIVERED"
    PARTIAL = "PARTIAL"
    REJECTED = "REJECTED"


class VisitStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"


class PaymentMethodType(str, enum.Enum):
    CASH = "CASH"
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    CREDIT = "CREDIT"
    CHECK = "CHECK"
