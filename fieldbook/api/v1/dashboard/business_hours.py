# ============================================================================
# FILE: fieldbook/api/v1/dashboard/business_hours.py
# ============================================================================
"""
Operating hours management
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from uuid import UUID

from fieldbook.config.database import get_db
from fieldbook.schemas.scheduling import BusinessHoursUpdate, BusinessHoursResponse
from fieldbook.services.business.business_service import BusinessService

router = APIRouter(tags=["dashboard-business-hours"])


@router.get("/businesses/{business_id}/business-hours", response_model=BusinessHoursResponse)
def get_business_hours(
        business_id: UUID,
        db: Session = Depends(get_db)
):
    """Effective weekly schedule; the default schedule when none is configured"""
    hours = BusinessService.get_business_hours(db, business_id)
    if hours is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return hours


@router.put("/businesses/{business_id}/business-hours", response_model=BusinessHoursResponse)
def update_business_hours(
        business_id: UUID,
        hours: BusinessHoursUpdate,
        db: Session = Depends(get_db)
):
    business = BusinessService.update_business_hours(db, business_id, hours)
    if business is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return BusinessService.get_business_hours(db, business_id)
