# ============================================================================
# FILE: fieldbook/api/v1/public/availability.py
# Public booking endpoints - no authentication, thin HTTP layer
# ============================================================================
"""
Customer-facing availability, slot confirmation and booking.
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from redis.exceptions import LockError, RedisError
from typing import Optional
from uuid import UUID
import asyncio
import logging

from fieldbook.config.database import get_db
from fieldbook.api.dependencies import get_booking_lock
from fieldbook.schemas.scheduling import (
    AvailabilityResponse,
    SlotCheckRequest,
    SlotCheckResponse,
    BookingRequest,
    BookingResponse,
)
from fieldbook.services.availability.availability_service import AvailabilityService
from fieldbook.services.availability.constraints import AvailabilityLookupError
from fieldbook.services.booking.booking_service import (
    BookingService,
    BusinessNotFoundError,
    SlotUnavailableError,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["public-availability"])


def _require_date(value: str) -> str:
    if AvailabilityService.parse_date(value) is None:
        raise HTTPException(status_code=400, detail="date must be in YYYY-MM-DD format")
    return value


@router.get("/businesses/{business_id}/availability", response_model=AvailabilityResponse)
def get_availability(
        business_id: UUID,
        date: str = Query(..., description="YYYY-MM-DD"),
        duration_minutes: int = Query(60, ge=1, le=24 * 60),
        customer_email: Optional[str] = Query(None),
        customer_phone: Optional[str] = Query(None),
        db: Session = Depends(get_db)
):
    """
    Bookable start times for one day.
    An empty `slots` list means nothing is available that day.
    """
    _require_date(date)

    try:
        slots = AvailabilityService.get_available_slots(
            db,
            business_id,
            date,
            duration_minutes,
            customer_email=customer_email,
            customer_phone=customer_phone,
        )
    except AvailabilityLookupError as e:
        logger.error(f"Availability lookup failed for {business_id}: {e}")
        raise HTTPException(status_code=503, detail="Availability is temporarily unavailable")

    return AvailabilityResponse(
        business_id=str(business_id),
        date=date,
        duration_minutes=duration_minutes,
        slots=slots,
    )


@router.post("/businesses/{business_id}/availability/check", response_model=SlotCheckResponse)
def check_availability(
        business_id: UUID,
        request: SlotCheckRequest,
        db: Session = Depends(get_db)
):
    """Confirm a specific start time right before submitting a booking"""
    _require_date(request.date)

    try:
        available = AvailabilityService.check_slot_availability(
            db,
            business_id,
            request.date,
            request.time,
            request.duration_minutes,
            customer_email=request.customer_email,
            customer_phone=request.customer_phone,
        )
    except AvailabilityLookupError as e:
        logger.error(f"Slot check failed for {business_id}: {e}")
        raise HTTPException(status_code=503, detail="Availability is temporarily unavailable")

    return SlotCheckResponse(
        business_id=str(business_id),
        date=request.date,
        time=request.time,
        duration_minutes=request.duration_minutes,
        available=available,
    )


@router.post(
    "/businesses/{business_id}/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_booking(
        business_id: UUID,
        request: BookingRequest,
        db: Session = Depends(get_db),
        lock_for=Depends(get_booking_lock)
):
    """
    Book a slot. The slot is re-checked while holding the business's booking
    lock, so a slot taken since it was displayed returns 409.
    """
    _require_date(request.date)

    job = None
    try:
        async with lock_for(str(business_id)):
            # Blocking row lock and commit run off the event loop
            job = await asyncio.to_thread(
                BookingService.reserve_slot,
                db,
                business_id,
                request.date,
                request.time,
                request.duration_minutes,
                customer_name=request.customer_name,
                customer_email=request.customer_email,
                customer_phone=request.customer_phone,
                service_name=request.service_name,
                estimated_cost=request.estimated_cost,
                notes=request.notes,
            )
    except BusinessNotFoundError:
        raise HTTPException(status_code=404, detail="Business not found")
    except SlotUnavailableError:
        raise HTTPException(
            status_code=409,
            detail="This time is no longer available, please choose another time"
        )
    except LockError:
        if job is None:
            logger.warning(f"Booking lock busy for business {business_id}")
            raise HTTPException(status_code=409, detail="Another booking is in progress, please retry")
        # Job committed; the lock only expired before it was released
        logger.warning(f"Booking lock for business {business_id} expired before release")
    except AvailabilityLookupError as e:
        logger.error(f"Booking failed for {business_id}: {e}")
        raise HTTPException(status_code=503, detail="Booking is temporarily unavailable")
    except RedisError as e:
        if job is None:
            logger.error(f"Booking lock unavailable for {business_id}: {e}")
            raise HTTPException(status_code=503, detail="Booking is temporarily unavailable")
        logger.warning(f"Could not release booking lock for {business_id}: {e}")
    except Exception as e:
        logger.error(f"Error creating booking for {business_id}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to create booking")

    return BookingResponse(**job.to_dict())
