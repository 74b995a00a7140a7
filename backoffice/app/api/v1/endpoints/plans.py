"""
Plan API endpoints.

Single-plan and date/user lookups read through to the external plan
service when the plan is not stored locally.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.app.core.dependencies import get_plan_client
from backoffice.app.core.exceptions import ValidationError
from backoffice.app.db.session import get_db
from backoffice.app.schemas.common import Envelope, MessageResponse, NonEmptyStr, Source
from backoffice.app.schemas.external import ExternalPlan, PlanListResult, PlanResult
from backoffice.app.schemas.plan import PlanCreate, PlanRead, PlanUpdate
from backoffice.app.services import plan_service
from backoffice.app.services.external_service import ExternalServiceClient
from backoffice.app.services.read_through import ReadThroughResolver

router = APIRouter(prefix="/plans", tags=["Plans"])


@router.get("", response_model=Envelope[PlanListResult])
async def get_plans(
    plan_date: Optional[date] = Query(None, alias="date"),
    assigned_user_id: Optional[NonEmptyStr] = Query(None, alias="assignedUserId"),
    db: AsyncSession = Depends(get_db),
    plan_client: ExternalServiceClient = Depends(get_plan_client),
):
    """
    List plans.

    Without filters every local plan is returned. With both ``date`` and
    ``assignedUserId`` the matching plans are resolved locally first and
    from the plan service otherwise.
    """
    if plan_date is None and assigned_user_id is None:
        plans = await plan_service.list_plans(db)
        return Envelope(message="Plans retrieved", data=[PlanRead.model_validate(p) for p in plans])

    if plan_date is None or assigned_user_id is None:
        missing = "date" if plan_date is None else "assignedUserId"
        raise ValidationError(
            message="Both date and assignedUserId are required",
            errors=[{"path": missing, "message": "Field required"}],
        )

    async def fetch_local(plan_date, user_id):
        return await plan_service.find_plans(db, plan_date, user_id)

    async def fetch_external(plan_date, user_id):
        return await plan_client.fetch_many(
            ExternalPlan,
            params={"date": plan_date.isoformat(), "assignedUserId": user_id},
        )

    resolver = ReadThroughResolver("Plan", fetch_local, fetch_external)
    resolved = await resolver.resolve(
        plan_date,
        assigned_user_id,
        description=f"for date '{plan_date.isoformat()}' and user '{assigned_user_id}'",
    )

    data = resolved.entity
    if resolved.source == Source.LOCAL:
        data = [PlanRead.model_validate(p) for p in data]
    return Envelope(message="Plans retrieved", data=data, source=resolved.source)


@router.get("/{plan_id}", response_model=Envelope[PlanResult])
async def get_plan(
    plan_id: NonEmptyStr,
    db: AsyncSession = Depends(get_db),
    plan_client: ExternalServiceClient = Depends(get_plan_client),
):
    async def fetch_local(key):
        return await plan_service.get_plan(db, key)

    async def fetch_external(key):
        return await plan_client.fetch_one(ExternalPlan, key)

    resolved = await ReadThroughResolver("Plan", fetch_local, fetch_external).resolve(plan_id)

    data = resolved.entity
    if resolved.source == Source.LOCAL:
        data = PlanRead.model_validate(data)
    return Envelope(message="Plan retrieved", data=data, source=resolved.source)


@router.post("", response_model=Envelope[PlanRead], status_code=status.HTTP_201_CREATED)
async def create_plan(plan_data: PlanCreate, db: AsyncSession = Depends(get_db)):
    """Create a plan with its visits, orders and line items in one transaction."""
    plan = await plan_service.create_plan(db, plan_data)
    return Envelope(message="Plan created", data=PlanRead.model_validate(plan))


@router.put("/{plan_id}", response_model=Envelope[PlanRead])
async def update_plan(plan_id: NonEmptyStr, plan_data: PlanUpdate, db: AsyncSession = Depends(get_db)):
    plan = await plan_service.update_plan(db, plan_id, plan_data)
    return Envelope(message="Plan updated", data=PlanRead.model_validate(plan))


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(plan_id: NonEmptyStr, db: AsyncSession = Depends(get_db)):
    await plan_service.delete_plan(db, plan_id)
    return MessageResponse(message="Plan deleted")
