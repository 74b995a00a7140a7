"""
Schemas for payloads returned by the external (upstream) services.

Upstream records are passed through as-is, but only after their minimal
shape has been checked here.
"""

from typing import Annotated, List, Union

from pydantic import BaseModel, ConfigDict, Field

from backoffice.app.schemas.driver import DeliveryRouteRead
from backoffice.app.schemas.plan import PlanRead
from backoffice.app.schemas.route_group import RouteGroupRead, RouteRead


class ExternalRecord(BaseModel):
    """Upstream record: must carry an identifier, any other field passes through."""
    model_config = ConfigDict(extra="allow")

    id: Union[str, int]


class ExternalPlan(ExternalRecord):
    pass


class ExternalRouteGroup(ExternalRecord):
    pass


class ExternalRoute(ExternalRecord):
    pass


class ExternalDeliveryRoute(ExternalRecord):
    id: int = Field(..., gt=0)


# Read-through results: the local shape is tried first, anything else
# that carries an id is passed through as the upstream record.
PlanResult = Annotated[Union[PlanRead, ExternalPlan], Field(union_mode="left_to_right")]
PlanListResult = Annotated[Union[List[PlanRead], List[ExternalPlan]], Field(union_mode="left_to_right")]
RouteGroupResult = Annotated[Union[RouteGroupRead, ExternalRouteGroup], Field(union_mode="left_to_right")]
RouteResult = Annotated[Union[RouteRead, ExternalRoute], Field(union_mode="left_to_right")]
DeliveryRouteResult = Annotated[
    Union[DeliveryRouteRead, ExternalDeliveryRoute],
    Field(union_mode="left_to_right"),
]
