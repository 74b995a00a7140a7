"""
Plan service.

Creates, updates and deletes plans together with their visits, orders,
line items, payment methods and reassignment records. All nested writes
of a request run on the request session and are committed together.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.exceptions import ConflictError, ResourceNotFoundError, ValidationError
from backoffice.app.models.catalog import (
    Address,
    Customer,
    OrderGroup,
    PointOfInterest,
    Product,
    SalesRepresentative,
)
from backoffice.app.models.plan import LineItem, Order, PaymentMethod, Plan, Visit, VisitReassignment
from backoffice.app.schemas.plan import LineItemIn, OrderIn, PlanCreate, PlanUpdate, VisitIn
from backoffice.app.services.references import connect_or_create, connect_truck

logger = logging.getLogger(__name__)

NESTED_FIELDS = {"id", "visits", "orders", "truck", "start_point", "end_point"}
REQUIRED_COLUMNS = ("operation_type", "date", "active_dates", "assigned_user_id")


def compute_line_value(quantity: float, unit_price: float, tax_rate: float) -> float:
    """Gross line value; ``tax_rate`` is a fraction (0.19 == 19%)."""
    return round(quantity * unit_price * (1 + tax_rate), 2)


# Queries

async def list_plans(db: AsyncSession) -> List[Plan]:
    result = await db.execute(select(Plan).order_by(Plan.date.desc(), Plan.id))
    return list(result.scalars().all())


async def get_plan(db: AsyncSession, plan_id: str, refresh: bool = False) -> Optional[Plan]:
    query = select(Plan).where(Plan.id == plan_id)
    if refresh:
        query = query.execution_options(populate_existing=True)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def find_plans(db: AsyncSession, plan_date: date, assigned_user_id: str) -> List[Plan]:
    result = await db.execute(
        select(Plan)
        .where(Plan.date == plan_date, Plan.assigned_user_id == assigned_user_id)
        .order_by(Plan.id)
    )
    return list(result.scalars().all())


# Nested writers

async def _build_visit(db: AsyncSession, plan_id: str, data: VisitIn) -> Visit:
    customer = await connect_or_create(db, Customer, data.customer)
    address = await connect_or_create(db, Address, data.address)
    return Visit(
        id=data.id,
        plan_id=plan_id,
        sequence=data.sequence,
        customer_id=customer.id,
        address_id=address.id,
        status=data.status,
        planned_arrival=data.planned_arrival,
        actual_arrival=data.actual_arrival,
        notes=data.notes,
        payment_methods=[PaymentMethod(**pm.model_dump()) for pm in data.payment_methods],
        reassignments=[
            VisitReassignment(**ra.model_dump(exclude_none=True)) for ra in data.reassignments
        ],
    )


async def _add_line_item(db: AsyncSession, order_id: str, data: LineItemIn) -> LineItem:
    product = await connect_or_create(db, Product, data.product)
    item = LineItem(
        order_id=order_id,
        product_id=product.id,
        quantity=data.quantity,
        unit_price=data.unit_price,
        tax_rate=data.tax_rate,
        value=compute_line_value(data.quantity, data.unit_price, data.tax_rate),
        actual_quantity=data.actual_quantity,
        actual_value=data.actual_value,
        status=data.status,
    )
    if data.id is not None:
        item.id = data.id
    db.add(item)
    return item


async def _order_references(db: AsyncSession, data: OrderIn) -> dict:
    customer = await connect_or_create(db, Customer, data.customer)
    address = await connect_or_create(db, Address, data.address)
    representative = await connect_or_create(db, SalesRepresentative, data.sales_representative)
    group = await connect_or_create(db, OrderGroup, data.order_group)
    return {
        "customer_id": customer.id,
        "address_id": address.id,
        "sales_representative_id": representative.id if representative else None,
        "order_group_id": group.id if group else None,
    }


async def _create_order(db: AsyncSession, plan_id: str, data: OrderIn) -> Order:
    existing = await db.get(Order, data.id)
    if existing is not None:
        raise ConflictError("Order", data.id)

    references = await _order_references(db, data)
    order = Order(
        id=data.id,
        plan_id=plan_id,
        visit_id=data.visit_id,
        kind=data.kind,
        sequence=data.sequence,
        status=data.status,
        notes=data.notes,
        **references,
    )
    db.add(order)
    for item in data.line_items:
        await _add_line_item(db, order.id, item)
    return order


async def _apply_plan_references(db: AsyncSession, plan: Plan, data, fields) -> None:
    if "truck" in fields:
        truck = await connect_truck(db, data.truck)
        plan.truck_id = truck.id if truck else None
    if "start_point" in fields:
        start = await connect_or_create(db, PointOfInterest, data.start_point)
        plan.start_point_id = start.id if start else None
    if "end_point" in fields:
        end = await connect_or_create(db, PointOfInterest, data.end_point)
        plan.end_point_id = end.id if end else None


# Commands

async def create_plan(db: AsyncSession, data: PlanCreate) -> Plan:
    """
    Create a plan with everything nested under it.

    The plan row is inserted first; a primary key collision there means
    the plan already exists.

    Raises:
        ConflictError: plan, visit or order id already taken
    """
    values = data.model_dump(exclude=NESTED_FIELDS)
    values["active_dates"] = [d.isoformat() for d in data.active_dates]
    plan = Plan(id=data.id, **values)
    db.add(plan)
    try:
        await db.flush()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Plan", data.id)

    await _apply_plan_references(db, plan, data, {"truck", "start_point", "end_point"})

    for visit_data in data.visits:
        if await db.get(Visit, visit_data.id) is not None:
            raise ConflictError("Visit", visit_data.id)
        db.add(await _build_visit(db, plan.id, visit_data))
    await db.flush()

    for order_data in data.orders:
        await _create_order(db, plan.id, order_data)

    await db.commit()
    logger.info("Plan %s created with %d visits and %d orders", plan.id, len(data.visits), len(data.orders))
    return await get_plan(db, plan.id, refresh=True)


async def _upsert_visit(db: AsyncSession, plan: Plan, data: VisitIn) -> None:
    visit = await db.get(Visit, data.id)
    if visit is None:
        db.add(await _build_visit(db, plan.id, data))
        return
    if visit.plan_id != plan.id:
        raise ConflictError("Visit", data.id, message=f"Visit '{data.id}' belongs to another plan")

    customer = await connect_or_create(db, Customer, data.customer)
    address = await connect_or_create(db, Address, data.address)
    visit.sequence = data.sequence
    visit.customer_id = customer.id
    visit.address_id = address.id
    visit.status = data.status
    visit.planned_arrival = data.planned_arrival
    visit.actual_arrival = data.actual_arrival
    visit.notes = data.notes
    visit.payment_methods = [PaymentMethod(**pm.model_dump()) for pm in data.payment_methods]
    visit.reassignments = [
        VisitReassignment(**ra.model_dump(exclude_none=True)) for ra in data.reassignments
    ]


async def _upsert_order(db: AsyncSession, plan: Plan, data: OrderIn) -> None:
    if data.visit_id is not None:
        visit = await db.get(Visit, data.visit_id)
        if visit is None or visit.plan_id != plan.id:
            raise ValidationError(
                errors=[{
                    "path": "orders",
                    "message": f"order '{data.id}' references unknown visit '{data.visit_id}'",
                }]
            )

    order = await db.get(Order, data.id)
    if order is None:
        await _create_order(db, plan.id, data)
        return
    if order.plan_id != plan.id:
        raise ConflictError("Order", data.id, message=f"Order '{data.id}' belongs to another plan")

    references = await _order_references(db, data)
    for field, value in references.items():
        setattr(order, field, value)
    order.visit_id = data.visit_id
    order.kind = data.kind
    order.sequence = data.sequence
    order.status = data.status
    order.notes = data.notes

    existing_items = {item.id: item for item in order.line_items}
    for item_data in data.line_items:
        item = existing_items.get(item_data.id) if item_data.id is not None else None
        if item is None:
            await _add_line_item(db, order.id, item_data)
            continue
        product = await connect_or_create(db, Product, item_data.product)
        item.product_id = product.id
        item.quantity = item_data.quantity
        item.unit_price = item_data.unit_price
        item.tax_rate = item_data.tax_rate
        item.value = compute_line_value(item_data.quantity, item_data.unit_price, item_data.tax_rate)
        item.actual_quantity = item_data.actual_quantity
        item.actual_value = item_data.actual_value
        item.status = item_data.status


async def update_plan(db: AsyncSession, plan_id: str, data: PlanUpdate) -> Plan:
    """
    Partially update a plan.

    Unset fields are left alone and ``null`` never clears a required column.
    Listed visits and orders are upserted by id; unlisted ones are kept.

    Raises:
        ResourceNotFoundError: no local plan with this id
        ConflictError: a nested id belongs to another plan
        ValidationError: an order points at a visit outside this plan
    """
    plan = await get_plan(db, plan_id)
    if plan is None:
        raise ResourceNotFoundError("Plan", plan_id)

    fields = data.model_fields_set
    changes = data.model_dump(exclude_unset=True, exclude=NESTED_FIELDS)
    for column in REQUIRED_COLUMNS:
        if column in changes and changes[column] is None:
            changes.pop(column)
    if "active_dates" in changes:
        changes["active_dates"] = [d.isoformat() for d in changes["active_dates"]]
    for field, value in changes.items():
        setattr(plan, field, value)

    await _apply_plan_references(db, plan, data, fields)

    if data.visits is not None:
        for visit_data in data.visits:
            await _upsert_visit(db, plan, visit_data)
        await db.flush()

    if data.orders is not None:
        for order_data in data.orders:
            await _upsert_order(db, plan, order_data)

    await db.commit()
    return await get_plan(db, plan_id, refresh=True)


async def delete_plan(db: AsyncSession, plan_id: str) -> None:
    plan = await get_plan(db, plan_id)
    if plan is None:
        raise ResourceNotFoundError("Plan", plan_id)
    await db.delete(plan)
    await db.commit()
    logger.info("Plan %s deleted", plan_id)
