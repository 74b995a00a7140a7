"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter

from backoffice.app.api.v1.endpoints import auth, delivery_routes, plans, route_groups, users

router = APIRouter()

# Authentication and user management
router.include_router(auth.router)
router.include_router(users.router)

# Plans with nested visits and orders
router.include_router(plans.router)

# Route groups and the routes inside them
router.include_router(route_groups.router)

# Numeric-id delivery routes and drivers
router.include_router(delivery_routes.router)
router.include_router(delivery_routes.drivers_router)
