# ===== fieldbook/services/availability/availability_service.py =====
from typing import List, Optional, Union
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo
from sqlalchemy.orm import Session
import logging

from fieldbook.config.settings import get_settings
from fieldbook.services.availability.constraints import ConstraintAggregator
from fieldbook.services.availability.hours import DEFAULT_OPERATING_HOURS
from fieldbook.services.availability.reader import SqlSchedulingReader
from fieldbook.services.availability.slots import generate_available_slots

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Availability queries and submission-time slot confirmation"""

    @staticmethod
    def build_aggregator(reader: SqlSchedulingReader) -> ConstraintAggregator:
        settings = get_settings()
        return ConstraintAggregator(
            reader,
            default_hours=DEFAULT_OPERATING_HOURS,
            vip_threshold=settings.VIP_REVENUE_THRESHOLD,
            max_occurrences=settings.MAX_RECURRENCE_OCCURRENCES,
        )

    @staticmethod
    def parse_date(value: Union[str, date]) -> Optional[date]:
        """Parse a YYYY-MM-DD string. Returns None when malformed."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        try:
            return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
        except ValueError:
            return None

    @staticmethod
    def business_now(reader: SqlSchedulingReader, business_id) -> datetime:
        """Current wall-clock time in the business's timezone, as a naive datetime"""
        tz_name = "UTC"
        try:
            business = reader.get_business(business_id)
            if business and business.timezone:
                tz_name = business.timezone
            return datetime.now(ZoneInfo(tz_name)).replace(tzinfo=None)
        except Exception as e:
            logger.warning(f"Invalid timezone '{tz_name}' for {business_id}: {e}, using UTC")
            return datetime.now(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def get_available_slots(
            db: Session,
            business_id,
            target_date: Union[str, date],
            duration_minutes: int = 60,
            customer_email: Optional[str] = None,
            customer_phone: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> List[str]:
        """
        Bookable start times ("HH:MM", ascending) for one day.

        An empty list means "no slots" (closed, fully booked or blocked), not an
        error. Raises AvailabilityLookupError when existing bookings cannot be
        read.
        """
        parsed_date = AvailabilityService.parse_date(target_date)
        if parsed_date is None:
            logger.error(f"Invalid date format: {target_date}")
            return []

        reader = SqlSchedulingReader(db)
        aggregator = AvailabilityService.build_aggregator(reader)
        constraints = aggregator.collect(
            business_id,
            parsed_date,
            customer_email=customer_email,
            customer_phone=customer_phone,
        )

        if now is None:
            now = AvailabilityService.business_now(reader, business_id)

        slots = generate_available_slots(
            constraints,
            duration_minutes,
            now,
            slot_interval_minutes=get_settings().SLOT_INTERVAL_MINUTES,
        )

        if not slots:
            logger.warning(
                f"No slots for business {business_id} on {parsed_date.isoformat()} "
                f"({duration_minutes} min) - check business hours, time blocks and capacity"
            )
        return slots

    @staticmethod
    def check_slot_availability(
            db: Session,
            business_id,
            target_date: Union[str, date],
            time: str,
            duration_minutes: int = 60,
            customer_email: Optional[str] = None,
            customer_phone: Optional[str] = None,
            now: Optional[datetime] = None
    ) -> bool:
        """Re-derive the day's slots and check `time` is exactly one of them"""
        slots = AvailabilityService.get_available_slots(
            db,
            business_id,
            target_date,
            duration_minutes,
            customer_email=customer_email,
            customer_phone=customer_phone,
            now=now,
        )
        is_available = time in slots

        logger.info(
            f"Slot check {target_date} {time} ({duration_minutes} min) for {business_id}: "
            f"{'available' if is_available else 'not available'}"
        )
        return is_available
