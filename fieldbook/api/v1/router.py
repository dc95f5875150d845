"""
API v1 router setup
Organized into: public (customer booking) and dashboard (business owner) routes
"""
from fastapi import APIRouter

from fieldbook.api.v1.public import availability
from fieldbook.api.v1.dashboard import time_blocks, priority_blocks, business_hours

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    availability.router,
    prefix="/public",
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES
# ============================================================================
api_v1_router.include_router(
    time_blocks.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    priority_blocks.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    business_hours.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


# ============================================================================
# ROOT ENDPOINT - API Info
# ============================================================================
@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """
    API information and available endpoints.
    """
    return {
        "version": "1.0",
        "routes": {
            "public": "Availability, slot checks and bookings for customers",
            "dashboard": "Time blocks, priority blocks and business hours"
        }
    }


@api_v1_router.get("/health", tags=["Info"])
async def health_check():
    """
    Health check endpoint.
    Useful for monitoring and load balancers.
    """
    return {
        "status": "healthy",
        "version": "1.0",
        "service": "Fieldbook Scheduling API"
    }
