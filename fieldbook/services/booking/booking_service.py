# ============================================================================
# fieldbook/services/booking/booking_service.py
# ============================================================================
"""Service for reserving a slot: re-check and insert in one transaction"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union
from uuid import uuid4
from sqlalchemy.orm import Session
import logging

from fieldbook.models.business import Business
from fieldbook.models.job import Job, JobStatus
from fieldbook.services.availability.availability_service import AvailabilityService
from fieldbook.services.availability.hours import parse_time_of_day
from fieldbook.services.availability.reader import SqlSchedulingReader
from fieldbook.utils.ids import to_uuid

logger = logging.getLogger(__name__)


class BusinessNotFoundError(Exception):
    pass


class SlotUnavailableError(Exception):
    """The requested start time is no longer bookable"""


class BookingService:
    """Handles booking creation"""

    @staticmethod
    def reserve_slot(
            db: Session,
            business_id,
            target_date: Union[str, date],
            time: str,
            duration_minutes: int = 60,
            customer_name: Optional[str] = None,
            customer_email: Optional[str] = None,
            customer_phone: Optional[str] = None,
            service_name: Optional[str] = None,
            estimated_cost: Optional[float] = None,
            notes: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> Job:
        """
        Create a scheduled job if `time` is still available.

        The business row is locked (SELECT ... FOR UPDATE) for the length of the
        transaction, so two submissions for the same tenant re-check capacity
        one after the other and the second sees the first's job.
        """
        business_uuid = to_uuid(business_id)

        try:
            business = db.query(Business).filter(
                Business.id == business_uuid
            ).with_for_update().first()
            if not business:
                raise BusinessNotFoundError(f"Business {business_id} not found")

            available = AvailabilityService.check_slot_availability(
                db,
                business_uuid,
                target_date,
                time,
                duration_minutes,
                customer_email=customer_email,
                customer_phone=customer_phone,
                now=now,
            )
            if not available:
                raise SlotUnavailableError(
                    f"{target_date} {time} is no longer available for {duration_minutes} min"
                )

            scheduled_at = datetime.combine(
                AvailabilityService.parse_date(target_date),
                parse_time_of_day(time)
            )
            client = SqlSchedulingReader(db).find_client(
                business_uuid, customer_email, customer_phone
            )

            job = Job(
                id=uuid4(),
                business_id=business_uuid,
                client_id=client.id if client else None,
                customer_name=customer_name,
                customer_email=customer_email,
                customer_phone=customer_phone,
                scheduled_at=scheduled_at,
                time_is_set=True,
                estimated_duration=duration_minutes,
                estimated_cost=Decimal(str(estimated_cost)) if estimated_cost is not None else None,
                service_name=service_name,
                notes=notes,
                status=JobStatus.SCHEDULED.value,
            )

            db.add(job)
            db.commit()
            db.refresh(job)

        except Exception:
            db.rollback()
            raise

        logger.info(f"Reserved job {job.id} for business {business_id} at {scheduled_at.isoformat()}")
        return job
